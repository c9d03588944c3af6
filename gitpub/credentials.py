"""Per-user credential cache: one small file per value under `<home>/.git/`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

CREDENTIALS_DIR = ".git"

SERVER_FILE = ".git_server"
TOKEN_FILE = ".git_token"
OWNER_FILE = ".git_own"
LOGIN_FILE = ".git_login"


class CredentialStore:
    def __init__(self, home_path: Path | str) -> None:
        self.root = Path(home_path) / CREDENTIALS_DIR

    def path(self, key: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root / key

    def read(self, key: str) -> str | None:
        path = self.path(key)
        if not path.is_file():
            return None
        value = path.read_text(encoding="utf-8").strip()
        return value or None

    def write(self, key: str, value: str) -> Path:
        path = self.path(key)
        path.write_text(value, encoding="utf-8")
        return path


def get_or_prompt(
    store: CredentialStore,
    key: str,
    ask: Callable[[], str],
    *,
    refresh: bool = False,
) -> str:
    """Return the cached value for `key`, asking (and persisting) when absent or refreshing."""
    value = None if refresh else store.read(key)
    if value is not None:
        logger.debug("Using cached %s from %s", key, store.root)
        return value
    value = ask()
    path = store.write(key, value)
    logger.debug("Wrote %s -> %s", key, path)
    return value
