"""
context.py

Responsibility: The per-run repository model and the project files it is read from.

- `package.json`: project name, version and publishable `files`
- `.componentrc`: optional JSON marker `{ "buildPath": ... }`
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gitpub.config import Settings
from gitpub.errors import BuildValidationError, ConfigurationError

PACKAGE_FILE = "package.json"
COMPONENT_FILE = ".componentrc"


def normalize_name(name: str) -> str:
    """Flatten scoped package names: `@scope/name` -> `scope_name`."""
    if name.startswith("@") and name.find("/") > 0:
        return "_".join(name.split("/")).replace("@", "")
    return name


@dataclass(frozen=True)
class SshTarget:
    user: str
    ip: str
    path: str


@dataclass(frozen=True)
class ComponentManifest:
    build_path: str


@dataclass
class RepositoryContext:
    """Mutable state of one workflow run; `version` and `branch` change as they resolve."""

    name: str
    version: str
    directory: Path
    home_path: Path
    branch: str | None = None
    build_cmd: str = ""
    prod: bool = False
    ssh_target: SshTarget | None = None

    @classmethod
    def from_directory(cls, directory: Path | str, settings: Settings) -> "RepositoryContext":
        directory = Path(directory).resolve()
        pkg = read_package_json(directory)
        name = str(pkg.get("name") or "").strip()
        version = str(pkg.get("version") or "").strip()
        if not name or not version:
            raise ConfigurationError(f"{PACKAGE_FILE} must define `name` and `version` ({directory})")

        ssh_target = None
        if settings.ssh_user and settings.ssh_ip and settings.ssh_path:
            ssh_target = SshTarget(settings.ssh_user, settings.ssh_ip, settings.ssh_path)

        return cls(
            name=normalize_name(name),
            version=version,
            directory=directory,
            home_path=settings.home_path,
            build_cmd=settings.build_cmd,
            prod=settings.prod,
            ssh_target=ssh_target,
        )


def read_package_json(directory: Path) -> dict[str, Any]:
    path = directory / PACKAGE_FILE
    if not path.is_file():
        raise ConfigurationError(f"{PACKAGE_FILE} does not exist in source directory: {directory}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object.")
    return data


def sync_package_version(directory: Path, version: str) -> bool:
    """Rewrite `package.json` `version` when it differs. Returns True if the file changed."""
    pkg = read_package_json(directory)
    if pkg.get("version") == version:
        return False
    pkg["version"] = version
    (directory / PACKAGE_FILE).write_text(json.dumps(pkg, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return True


def read_component_manifest(directory: Path) -> ComponentManifest | None:
    """Return the component marker, or None when the project is not a component."""
    path = directory / COMPONENT_FILE
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise BuildValidationError(f"Invalid JSON in {path}: {e}") from e
    if not data:
        return None
    build_path = data.get("buildPath") if isinstance(data, dict) else None
    if not isinstance(build_path, str) or not build_path.strip():
        raise BuildValidationError(f"{COMPONENT_FILE} must define `buildPath` ({path})")
    return ComponentManifest(build_path=build_path.strip())
