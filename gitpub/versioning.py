"""
versioning.py

Responsibility: Work out which version and development branch local work belongs to.

Naming convention:
- release markers: `release/<x.y.z>` (tags, or branches under refs/heads/)
- development branches: `dev/<x.y.z>`

Rule: if the newest remote release is lower than the local version, keep the
local version; otherwise ask which part of the release version to bump.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from gitpub import semver
from gitpub.context import RepositoryContext, sync_package_version
from gitpub.errors import ConfigurationError
from gitpub.git import GitRepo
from gitpub.prompt import Choice, Prompter

logger = logging.getLogger(__name__)

VERSION_RELEASE = "release"
VERSION_DEVELOP = "dev"

_REF_PATTERNS = {
    VERSION_RELEASE: re.compile(r"refs/(?:tags|heads)/release/(\d+\.\d+\.\d+)"),
    VERSION_DEVELOP: re.compile(r"refs/heads/dev/(\d+\.\d+\.\d+)"),
}

_INCREMENT_LABELS = {"patch": "Patch", "minor": "Minor", "major": "Major"}


@dataclass(frozen=True)
class Resolution:
    branch: str
    version: str
    release: str | None = None
    bumped: bool = False


def dev_branch(version: str) -> str:
    return f"{VERSION_DEVELOP}/{version}"


def remote_versions(ls_remote_output: str, kind: str = VERSION_RELEASE) -> list[str]:
    """
    Versions named by remote refs of the given kind, highest first.

    Only the leading `x.y.z` of a ref name counts (`release/1.2.3-rc.1` names
    1.2.3); refs without one, or with leading zeros, are skipped.
    """
    pattern = _REF_PATTERNS[kind]
    found: list[str] = []
    for line in ls_remote_output.splitlines():
        m = pattern.search(line)
        if m and semver.valid(m.group(1)):
            found.append(m.group(1))
    return semver.sort_desc(found)


def resolve_version(
    local_version: str,
    releases: list[str],
    choose_increment: Callable[[str], str],
) -> Resolution:
    """
    Pick the development branch for `local_version` given remote `releases` (highest first).

    `choose_increment` is only called when the newest release is not lower
    than the local version; it receives that release and returns
    "patch", "minor" or "major".
    """
    if not releases:
        return Resolution(branch=dev_branch(local_version), version=local_version)
    if not semver.valid(local_version):
        raise ConfigurationError(f"Local version {local_version!r} is not a valid semantic version")

    release = releases[0]
    if semver.gt(local_version, release):
        return Resolution(branch=dev_branch(local_version), version=local_version, release=release)

    new_version = semver.inc(release, choose_increment(release))
    return Resolution(branch=dev_branch(new_version), version=new_version, release=release, bumped=True)


class VersionResolver:
    def __init__(self, context: RepositoryContext, git: GitRepo, prompter: Prompter) -> None:
        self.context = context
        self.git = git
        self.prompter = prompter

    def remote_versions(self, kind: str = VERSION_RELEASE) -> list[str]:
        return remote_versions(self.git.ls_remote(), kind)

    def _choose_increment(self, release: str) -> str:
        logger.info("Remote release %s is not lower than local version %s", release, self.context.version)
        choices = [
            Choice(f"{_INCREMENT_LABELS[kind]} ({release} -> {semver.inc(release, kind)})", kind)
            for kind in semver.INCREMENTS
        ]
        return self.prompter.select("Bump version, choose increment", choices, default="patch")

    def get_correct_version(self) -> Resolution:
        logger.info("Resolving development branch")
        releases = self.remote_versions(VERSION_RELEASE)
        logger.debug("Latest remote release: %s", releases[0] if releases else None)

        resolution = resolve_version(self.context.version, releases, self._choose_increment)
        if resolution.release and not resolution.bumped:
            logger.info("Local version %s is ahead of release %s", resolution.version, resolution.release)

        self.context.branch = resolution.branch
        self.context.version = resolution.version
        logger.info("Development branch: %s", resolution.branch)

        if sync_package_version(self.context.directory, self.context.version):
            logger.info("package.json version set to %s", self.context.version)
        return resolution
