"""
config.py

Responsibility: Resolve runtime settings into a typed, immutable `Settings`.

Sources, lowest precedence first:
- built-in defaults
- optional YAML file `<home>/config.yml`
- CLI flags (applied by `cli.py` through `Settings.with_overrides`)

Only `Settings.from_env` looks at the process environment; everything else
receives the resolved `Settings` explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from gitpub.errors import ConfigurationError

HOME_ENV_VAR = "GITPUB_HOME"
DEFAULT_HOME_DIR = ".gitpub"
CONFIG_FILE = "config.yml"

DEFAULT_BUILD_CMD = "npm run build"


@dataclass(frozen=True)
class Settings:
    """Settings for one invocation."""

    home_path: Path
    refresh_server: bool = False
    refresh_token: bool = False
    refresh_owner: bool = False
    build_cmd: str = ""
    prod: bool = False
    ssh_user: str = ""
    ssh_ip: str = ""
    ssh_path: str = ""
    # Hard-reset onto origin/main when the initial unrelated-history merge fails.
    reset_on_merge_failure: bool = True
    commit_message_attempts: int = 3

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: Any) -> "Settings":
        env = os.environ if env is None else env
        home = resolve_home_path(env.get(HOME_ENV_VAR))
        settings = load_settings(home)
        return settings.with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> "Settings":
        # None means "flag not given on the command line".
        given = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(given) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return _validated(replace(self, **given))


def resolve_home_path(override: str | None = None) -> Path:
    if override and override.strip():
        return Path(override.strip()).expanduser()
    return Path.home() / DEFAULT_HOME_DIR


def ensure_home_path(home: Path) -> Path:
    """Create the home cache directory, failing if it still does not exist."""
    try:
        home.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create home directory {home}: {e}") from e
    if not home.is_dir():
        raise ConfigurationError(f"Home directory is not available: {home}")
    return home


def load_settings(home: Path) -> Settings:
    """
    Build `Settings` for `home`, reading `<home>/config.yml` when it exists.

    Unknown keys are ignored so the file can be shared across versions.
    """
    path = home / CONFIG_FILE
    data: dict[str, Any] = {}
    if path.is_file():
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level.")
        data = raw

    known = {f.name for f in fields(Settings)} - {"home_path"}
    values = {k: v for k, v in data.items() if k in known}
    return _validated(Settings(home_path=home, **values))


def _validated(settings: Settings) -> Settings:
    for name in ("refresh_server", "refresh_token", "refresh_owner", "prod", "reset_on_merge_failure"):
        if not isinstance(getattr(settings, name), bool):
            raise ConfigurationError(f"`{name}` must be a boolean.")
    for name in ("build_cmd", "ssh_user", "ssh_ip", "ssh_path"):
        if not isinstance(getattr(settings, name), str):
            raise ConfigurationError(f"`{name}` must be a string.")
    attempts = settings.commit_message_attempts
    if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
        raise ConfigurationError("`commit_message_attempts` must be a positive integer.")
    return settings
