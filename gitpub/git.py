"""
git.py

Responsibility: The only module that runs `git`.

`GitRepo` wraps the handful of porcelain commands the workflows need and
returns plain Python values. Failures surface as `GitCommandError` carrying
the combined command output.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gitpub.errors import GitCommandError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"

# Unmerged states from `git status --porcelain`.
_CONFLICT_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


@dataclass(frozen=True)
class GitStatus:
    """Path lists from a single `git status`; never reuse across tree mutations."""

    not_added: tuple[str, ...] = ()
    created: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()
    renamed: tuple[str, ...] = ()
    conflicted: tuple[str, ...] = ()

    @property
    def has_uncommitted(self) -> bool:
        return bool(self.not_added or self.created or self.deleted or self.modified or self.renamed)


def parse_porcelain_status(output: str) -> GitStatus:
    """Parse `git status --porcelain -z` output."""
    buckets: dict[str, list[str]] = {
        "not_added": [],
        "created": [],
        "deleted": [],
        "modified": [],
        "renamed": [],
        "conflicted": [],
    }
    entries = output.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        code, path = entry[:2], entry[3:]
        x, y = code[0], code[1]

        if code == "??":
            buckets["not_added"].append(path)
            continue
        if code in _CONFLICT_CODES:
            buckets["conflicted"].append(path)
            continue
        if x in "RC":
            # -z puts the original path in the next entry.
            i += 1
            if x == "R":
                buckets["renamed"].append(path)
        if x == "A":
            buckets["created"].append(path)
        if "D" in (x, y):
            buckets["deleted"].append(path)
        if "M" in (x, y):
            buckets["modified"].append(path)

    return GitStatus(**{k: tuple(v) for k, v in buckets.items()})


class GitRepo:
    def __init__(self, workdir: Path | str, env: dict[str, str] | None = None) -> None:
        self.workdir = Path(workdir)
        self._env = env

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """
        Run `git <args>` in the working directory, raising GitCommandError on failure.
        """
        cmd = ["git", *args]
        logger.debug("$ %s", " ".join(cmd))
        result = subprocess.run(
            cmd,
            cwd=str(self.workdir),
            env=self._env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        if check and result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stdout)
        return result

    @property
    def is_initialized(self) -> bool:
        return (self.workdir / ".git").exists()

    def init(self, initial_branch: str = DEFAULT_BRANCH) -> None:
        self._run("init")
        # Unborn HEAD, so this only names the first branch.
        self._run("symbolic-ref", "HEAD", f"refs/heads/{initial_branch}")

    def status(self) -> GitStatus:
        return parse_porcelain_status(self._run("status", "--porcelain", "-z").stdout)

    def add_all(self) -> None:
        self._run("add", "-A")

    def commit(self, message: str) -> None:
        self._run("commit", "-m", message)

    def remotes(self) -> list[str]:
        return [line.strip() for line in self._run("remote").stdout.splitlines() if line.strip()]

    def add_remote(self, name: str, url: str) -> None:
        self._run("remote", "add", name, url)

    def ls_remote(self, remote: str = "origin") -> str:
        """Raw `git ls-remote --refs` output: one `<sha>\\t<ref>` per line."""
        return self._run("ls-remote", "--refs", remote).stdout

    def fetch(self, remote: str = "origin") -> None:
        self._run("fetch", remote)

    def merge(self, ref: str, *options: str) -> None:
        self._run("merge", ref, "--no-edit", *options)

    def reset_hard(self, ref: str) -> None:
        self._run("reset", "--hard", ref)

    def pull(self, remote: str, branch: str) -> None:
        self._run("pull", "--no-rebase", "--no-edit", remote, branch)

    def push(self, remote: str, branch: str, source: str = "") -> None:
        """Push `branch`, or `source` (a local ref such as HEAD) onto the remote `branch`."""
        self._run("push", remote, f"{source}:{branch}" if source else branch)

    def stash_list(self) -> list[str]:
        return [line for line in self._run("stash", "list").stdout.splitlines() if line.strip()]

    def stash_pop(self) -> None:
        self._run("stash", "pop")

    def local_branches(self) -> list[str]:
        out = self._run("branch", "--list", "--format=%(refname:short)").stdout
        return [line.strip() for line in out.splitlines() if line.strip()]

    def checkout(self, branch: str) -> None:
        self._run("checkout", branch)

    def checkout_new(self, branch: str) -> None:
        self._run("checkout", "-b", branch)

    def current_branch(self) -> str:
        """Checked-out branch name, or "" on a detached HEAD."""
        result = self._run("symbolic-ref", "--short", "-q", "HEAD", check=False)
        return result.stdout.strip() if result.returncode == 0 else ""

    def head_sha(self) -> str:
        """Commit id of HEAD, or "" before the first commit."""
        result = self._run("rev-parse", "--verify", "-q", "HEAD", check=False)
        return result.stdout.strip() if result.returncode == 0 else ""
