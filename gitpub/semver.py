"""
semver.py

Semantic versions (semver 2.0.0): validation, precedence and increments.

Branch and tag names only ever carry `major.minor.patch`, but `package.json`
versions may have a pre-release part (`1.0.0-beta.1`). Build metadata is
accepted and ignored for precedence.
"""

from __future__ import annotations

import re
from functools import cmp_to_key

_NUM = r"0|[1-9]\d*"
_PRE_ID = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_SEMVER_RE = re.compile(
    rf"^({_NUM})\.({_NUM})\.({_NUM})"
    rf"(?:-({_PRE_ID}(?:\.{_PRE_ID})*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

INCREMENTS = ("patch", "minor", "major")


def parse(version: str) -> tuple[int, int, int, tuple[str, ...]] | None:
    """Return (major, minor, patch, prerelease ids), or None if `version` is not valid."""
    m = _SEMVER_RE.match(version.strip()) if version else None
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    return int(m.group(1)), int(m.group(2)), int(m.group(3)), pre


def valid(version: str) -> bool:
    return parse(version) is not None


def _must_parse(version: str) -> tuple[int, int, int, tuple[str, ...]]:
    parsed = parse(version)
    if parsed is None:
        raise ValueError(f"Invalid semantic version: {version!r}")
    return parsed


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _compare_pre(a: tuple[str, ...], b: tuple[str, ...]) -> int:
    # A version without pre-release ids ranks above any with them.
    if not a or not b:
        return _cmp(not a, not b)
    for x, y in zip(a, b):
        if x == y:
            continue
        if x.isdigit() and y.isdigit():
            return _cmp(int(x), int(y))
        if x.isdigit() != y.isdigit():
            return -1 if x.isdigit() else 1
        return _cmp(x, y)
    return _cmp(len(a), len(b))


def compare(a: str, b: str) -> int:
    """-1, 0 or 1 as `a` is lower than, equal to or greater than `b`."""
    pa, pb = _must_parse(a), _must_parse(b)
    return _cmp(pa[:3], pb[:3]) or _compare_pre(pa[3], pb[3])


def gt(a: str, b: str) -> bool:
    return compare(a, b) > 0


def inc(version: str, part: str) -> str:
    """
    Bump the major, minor, or patch part of a semver string.

    A pre-release is promoted to its release when that release is still the
    requested bump (`1.3.0-rc.1` + minor -> `1.3.0`), as npm does.
    """
    major, minor, patch, pre = _must_parse(version)
    if part == "major":
        if minor or patch or not pre:
            major += 1
        return f"{major}.0.0"
    if part == "minor":
        if patch or not pre:
            minor += 1
        return f"{major}.{minor}.0"
    if part == "patch":
        if not pre:
            patch += 1
        return f"{major}.{minor}.{patch}"
    raise ValueError(f"Unknown increment {part!r} (expected one of {', '.join(INCREMENTS)})")


def sort_desc(versions: list[str]) -> list[str]:
    """Highest version first; equal versions keep their input order."""
    return sorted(versions, key=cmp_to_key(lambda a, b: compare(b, a)))
