from __future__ import annotations

import json

import pytest

from conftest import FakeGit, ScriptedPrompter
from gitpub.context import RepositoryContext
from gitpub.errors import ConfigurationError
from gitpub.versioning import (
    VERSION_DEVELOP,
    VERSION_RELEASE,
    VersionResolver,
    remote_versions,
    resolve_version,
)

LS_REMOTE = "\n".join(
    [
        "1111111111111111111111111111111111111111\trefs/heads/main",
        "2222222222222222222222222222222222222222\trefs/tags/release/1.0.0",
        "3333333333333333333333333333333333333333\trefs/tags/release/1.2.0",
        "4444444444444444444444444444444444444444\trefs/tags/release/1.10.0-beta",
        "5555555555555555555555555555555555555555\trefs/tags/release/01.0.0",
        "6666666666666666666666666666666666666666\trefs/tags/release/latest",
        "7777777777777777777777777777777777777777\trefs/heads/release/1.1.0",
        "8888888888888888888888888888888888888888\trefs/heads/dev/1.3.0",
        "9999999999999999999999999999999999999999\trefs/heads/dev/banana",
    ]
)


def _never(_release: str) -> str:
    raise AssertionError("increment should not be requested")


def test_remote_versions_drops_invalid_and_sorts_descending() -> None:
    assert remote_versions(LS_REMOTE, VERSION_RELEASE) == ["1.10.0", "1.2.0", "1.1.0", "1.0.0"]
    assert remote_versions(LS_REMOTE, VERSION_DEVELOP) == ["1.3.0"]
    assert remote_versions("", VERSION_RELEASE) == []


def test_no_release_keeps_local_version() -> None:
    res = resolve_version("1.0.0", [], _never)
    assert (res.branch, res.version, res.bumped) == ("dev/1.0.0", "1.0.0", False)


def test_local_ahead_keeps_local_version() -> None:
    res = resolve_version("2.0.0", ["1.2.0"], _never)
    assert (res.branch, res.version, res.release) == ("dev/2.0.0", "2.0.0", "1.2.0")


@pytest.mark.parametrize(
    ("kind", "expected"),
    [("patch", "1.2.1"), ("minor", "1.3.0"), ("major", "2.0.0")],
)
def test_release_not_lower_bumps_release(kind: str, expected: str) -> None:
    seen = []
    res = resolve_version("1.0.0", ["1.2.0", "1.0.0"], lambda r: seen.append(r) or kind)
    assert seen == ["1.2.0"]
    assert res.version == expected
    assert res.branch == f"dev/{expected}"
    assert res.bumped


def test_equal_release_also_bumps() -> None:
    res = resolve_version("1.2.0", ["1.2.0"], lambda r: "patch")
    assert res.version == "1.2.1"


def test_invalid_local_version_against_a_release() -> None:
    with pytest.raises(ConfigurationError):
        resolve_version("next", ["1.0.0"], _never)


@pytest.mark.parametrize("local", ["1.0.0-beta.1", "next", "1.0"])
def test_no_release_takes_any_local_version(local: str) -> None:
    res = resolve_version(local, [], _never)
    assert (res.branch, res.version) == (f"dev/{local}", local)


def test_prerelease_local_version() -> None:
    assert resolve_version("1.3.0-beta.1", ["1.2.0"], _never).version == "1.3.0-beta.1"
    res = resolve_version("1.2.0-beta.1", ["1.2.0"], lambda r: "minor")
    assert (res.version, res.bumped) == ("1.3.0", True)


def test_release_ref_with_prerelease_suffix_names_its_core() -> None:
    refs = "1\trefs/tags/release/1.2.3-rc.1\n2\trefs/tags/release/1.2.2\n"
    assert remote_versions(refs, VERSION_RELEASE) == ["1.2.3", "1.2.2"]


class TestVersionResolver:
    def test_no_release_scenario(self, context: RepositoryContext) -> None:
        git = FakeGit(ls_remote="1111\trefs/heads/main\n")
        res = VersionResolver(context, git, ScriptedPrompter()).get_correct_version()
        assert res.branch == "dev/1.0.0"
        assert context.branch == "dev/1.0.0"
        assert context.version == "1.0.0"

    def test_minor_bump_scenario_syncs_package_json(self, context: RepositoryContext) -> None:
        git = FakeGit(ls_remote="2222\trefs/tags/release/1.2.0\n")
        prompter = ScriptedPrompter(["minor"])
        VersionResolver(context, git, prompter).get_correct_version()

        assert context.version == "1.3.0"
        assert context.branch == "dev/1.3.0"
        pkg = json.loads((context.directory / "package.json").read_text())
        assert pkg["version"] == "1.3.0"

        kind, _message, choices = prompter.asked[0]
        assert kind == "select"
        assert [c.value for c in choices] == ["patch", "minor", "major"]
        assert "1.2.0 -> 1.2.1" in choices[0].label
        assert "1.2.0 -> 1.3.0" in choices[1].label
        assert "1.2.0 -> 2.0.0" in choices[2].label

    def test_local_ahead_scenario(self, context: RepositoryContext) -> None:
        context.version = "2.0.0"
        git = FakeGit(ls_remote="2222\trefs/tags/release/1.2.0\n")
        VersionResolver(context, git, ScriptedPrompter()).get_correct_version()
        assert context.branch == "dev/2.0.0"
        pkg = json.loads((context.directory / "package.json").read_text())
        assert pkg["version"] == "2.0.0"
