"""
prompt.py

Responsibility: The interactive input seam.

Components never prompt the terminal directly; they receive a `Prompter`. The
console implementation (questionary) is used by the CLI, tests pass scripted
ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import questionary

from gitpub.errors import PromptCancelledError

_STYLE = questionary.Style(
    [
        ("question", "bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:cyan"),
    ]
)


@dataclass(frozen=True)
class Choice:
    label: str
    value: str


class Prompter(Protocol):
    def text(self, message: str, default: str = "") -> str: ...

    def password(self, message: str) -> str: ...

    def select(self, message: str, choices: Sequence[Choice], default: str | None = None) -> str: ...


def _answer(question) -> str:
    # questionary's ask() returns None when the user hits Ctrl-C or EOF.
    answer = question.ask()
    if answer is None:
        raise PromptCancelledError("Cancelled by user")
    return answer


class ConsolePrompter:
    """Terminal prompter. Ctrl-C and EOF raise PromptCancelledError."""

    def text(self, message: str, default: str = "") -> str:
        answer = _answer(questionary.text(message, default=default, style=_STYLE)).strip()
        return answer or default

    def password(self, message: str) -> str:
        return _answer(questionary.password(message, style=_STYLE)).strip()

    def select(self, message: str, choices: Sequence[Choice], default: str | None = None) -> str:
        if not choices:
            raise ValueError("select() needs at least one choice")
        values = [c.value for c in choices]
        return _answer(
            questionary.select(
                message,
                choices=[questionary.Choice(c.label, value=c.value) for c in choices],
                default=default if default in values else None,
                style=_STYLE,
            )
        )
