from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitpub.config import Settings
from gitpub.context import (
    RepositoryContext,
    normalize_name,
    read_component_manifest,
    sync_package_version,
)
from gitpub.errors import BuildValidationError, ConfigurationError


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("@pf-scaffold/component-test", "pf-scaffold_component-test"),
        ("plain", "plain"),
        ("@noslash", "@noslash"),
    ],
)
def test_normalize_name(raw: str, expected: str) -> None:
    assert normalize_name(raw) == expected


def test_from_directory(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(json.dumps({"name": "@s/pkg", "version": "0.1.0"}))
    settings = Settings(home_path=tmp_path / "h", build_cmd="make", ssh_user="u", ssh_ip="1.2.3.4", ssh_path="/srv")
    ctx = RepositoryContext.from_directory(tmp_path, settings)
    assert ctx.name == "s_pkg"
    assert ctx.version == "0.1.0"
    assert ctx.branch is None
    assert ctx.build_cmd == "make"
    assert ctx.ssh_target is not None and ctx.ssh_target.ip == "1.2.3.4"


def test_from_directory_requires_package_json(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        RepositoryContext.from_directory(tmp_path, Settings(home_path=tmp_path))


def test_sync_package_version_two_space_indent(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(json.dumps({"name": "x", "version": "1.0.0", "files": ["lib"]}))
    assert sync_package_version(tmp_path, "1.1.0") is True
    text = (tmp_path / "package.json").read_text()
    assert text == '{\n  "name": "x",\n  "version": "1.1.0",\n  "files": [\n    "lib"\n  ]\n}\n'
    assert sync_package_version(tmp_path, "1.1.0") is False


def test_component_manifest(tmp_path: Path) -> None:
    assert read_component_manifest(tmp_path) is None
    (tmp_path / ".componentrc").write_text('{"buildPath": "lib"}')
    assert read_component_manifest(tmp_path).build_path == "lib"
    (tmp_path / ".componentrc").write_text('{"other": 1}')
    with pytest.raises(BuildValidationError):
        read_component_manifest(tmp_path)
