from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Sequence

import pytest

from gitpub.config import Settings
from gitpub.context import RepositoryContext
from gitpub.errors import GitCommandError
from gitpub.git import GitStatus
from gitpub.hosting import HostingProvider, OrgInfo, RepoInfo, UserInfo
from gitpub.prompt import Choice


class ScriptedPrompter:
    """Answers prompts from a fixed list, in order, and records what was asked."""

    def __init__(self, answers: Sequence[str] = ()) -> None:
        self.answers = list(answers)
        self.asked: list[tuple[str, str, list[Choice]]] = []

    def _next(self, kind: str, message: str, choices: Sequence[Choice] = ()) -> str:
        self.asked.append((kind, message, list(choices)))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)

    def text(self, message: str, default: str = "") -> str:
        return self._next("text", message)

    def password(self, message: str) -> str:
        return self._next("password", message)

    def select(self, message: str, choices: Sequence[Choice], default: str | None = None) -> str:
        return self._next("select", message, choices)


class FakeGit:
    """In-memory stand-in for GitRepo that records every call."""

    def __init__(
        self,
        *,
        statuses: Sequence[GitStatus] = (),
        ls_remote: str = "",
        stash: Sequence[str] = (),
        branches: Sequence[str] = (),
        remotes: Sequence[str] = (),
        initialized: bool = False,
        branch: str = "main",
        head: str = "abc1234",
        fail: dict[str, Exception] | None = None,
    ) -> None:
        self._statuses = list(statuses)
        self.ls_remote_output = ls_remote
        self.stash = list(stash)
        self.branches = list(branches)
        self._remotes = list(remotes)
        self.is_initialized = initialized
        self.branch = branch
        self.head = head
        self.fail = dict(fail or {})
        self.calls: list[tuple] = []

    def _record(self, name: str, *args: str) -> None:
        self.calls.append((name, *args))
        if name in self.fail:
            raise self.fail[name]

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def status(self) -> GitStatus:
        self._record("status")
        if len(self._statuses) > 1:
            return self._statuses.pop(0)
        return self._statuses[0] if self._statuses else GitStatus()

    def init(self, initial_branch: str = "main") -> None:
        self._record("init", initial_branch)
        self.is_initialized = True

    def add_all(self) -> None:
        self._record("add_all")

    def commit(self, message: str) -> None:
        self._record("commit", message)

    def remotes(self) -> list[str]:
        self._record("remotes")
        return list(self._remotes)

    def add_remote(self, name: str, url: str) -> None:
        self._record("add_remote", name, url)
        self._remotes.append(name)

    def ls_remote(self, remote: str = "origin") -> str:
        self._record("ls_remote", remote)
        return self.ls_remote_output

    def fetch(self, remote: str = "origin") -> None:
        self._record("fetch", remote)

    def merge(self, ref: str, *options: str) -> None:
        self._record("merge", ref, *options)

    def reset_hard(self, ref: str) -> None:
        self._record("reset_hard", ref)

    def pull(self, remote: str, branch: str) -> None:
        self._record("pull", remote, branch)

    def push(self, remote: str, branch: str, source: str = "") -> None:
        self._record("push", remote, f"{source}:{branch}" if source else branch)

    def stash_list(self) -> list[str]:
        self._record("stash_list")
        return list(self.stash)

    def stash_pop(self) -> None:
        self._record("stash_pop")
        self.stash.pop(0)

    def local_branches(self) -> list[str]:
        self._record("local_branches")
        return list(self.branches)

    def checkout(self, branch: str) -> None:
        self._record("checkout", branch)

    def checkout_new(self, branch: str) -> None:
        self._record("checkout_new", branch)
        self.branches.append(branch)

    def current_branch(self) -> str:
        self._record("current_branch")
        return self.branch

    def head_sha(self) -> str:
        self._record("head_sha")
        return self.head


class FakeProvider(HostingProvider):
    display_name = "Fake"

    def __init__(self) -> None:
        super().__init__()
        self.user: UserInfo | None = UserInfo(login="alice")
        self.orgs: list[OrgInfo] | None = []
        self.repos: dict[tuple[str, str], RepoInfo] = {}
        self.remote_url = "git@example.invalid:{login}/{name}.git"
        self.create_fails = False
        self.created: list[tuple[str, ...]] = []

    def get_user(self) -> UserInfo | None:
        return self.user

    def get_orgs(self, login: str) -> list[OrgInfo] | None:
        return self.orgs

    def get_repo(self, login: str, name: str) -> RepoInfo | None:
        return self.repos.get((login, name))

    def _make(self, owner: str, name: str) -> RepoInfo | None:
        if self.create_fails:
            return None
        repo = RepoInfo(owner=owner, name=name, html_url="", ssh_url="", default_branch="main")
        self.repos[(owner, name)] = repo
        return repo

    def create_repo(self, name: str) -> RepoInfo | None:
        self.created.append(("user", name))
        return self._make(self.user.login, name)

    def create_org_repo(self, name: str, login: str) -> RepoInfo | None:
        self.created.append(("org", name, login))
        return self._make(login, name)

    def get_remote_url(self, login: str, name: str) -> str:
        return self.remote_url.format(login=login, name=name)

    def get_token_url(self) -> str:
        return "https://example.invalid/tokens"


def git_error(*args: str) -> GitCommandError:
    return GitCommandError(["git", *args], 1, "boom")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    d = tmp_path / "project"
    d.mkdir()
    (d / "package.json").write_text(json.dumps({"name": "demo", "version": "1.0.0"}, indent=2) + "\n")
    return d


@pytest.fixture
def home(tmp_path: Path) -> Path:
    return tmp_path / "home"


@pytest.fixture
def settings(home: Path) -> Settings:
    return Settings(home_path=home)


@pytest.fixture
def context(project: Path, settings: Settings) -> RepositoryContext:
    return RepositoryContext.from_directory(project, settings)


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolated git identity and config for tests that run real git."""
    fake_home = tmp_path / "git-home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "gitpub-test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "gitpub-test@example.invalid")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "gitpub-test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "gitpub-test@example.invalid")


def run_git(cwd: Path, *args: str) -> str:
    return subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True).stdout
