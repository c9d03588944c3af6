"""
gitignore.py

Responsibility: Seed a `.gitignore` into a project that has none.

The template ships as package data (`templates/gitignore.j2`) and is rendered
with Jinja2; an existing `.gitignore` is never touched.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from jinja2 import Environment, PackageLoader, StrictUndefined

logger = logging.getLogger(__name__)

GITIGNORE_FILE = ".gitignore"
DEFAULT_BUILD_DIR = "dist"

_env = Environment(
    loader=PackageLoader("gitpub", "templates"),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def render_gitignore(build_dir: str = DEFAULT_BUILD_DIR) -> str:
    """`/dist` is always ignored; a different component build dir is added below it."""
    build_dir = PurePosixPath(build_dir.strip()).as_posix().strip("/")
    extra_dir = build_dir if build_dir not in ("", ".", DEFAULT_BUILD_DIR) else None
    return _env.get_template("gitignore.j2").render(extra_dir=extra_dir)


def ensure_gitignore(directory: Path, build_dir: str = DEFAULT_BUILD_DIR) -> bool:
    """
    Write `.gitignore` if absent. Returns True when a file was written.

    Write failures are logged, not raised.
    """
    path = directory / GITIGNORE_FILE
    if path.exists():
        return False
    try:
        path.write_text(render_gitignore(build_dir), encoding="utf-8", newline="\n")
    except OSError as e:
        logger.warning("Could not write %s: %s", path, e)
        return False
    logger.info("Wrote %s", path)
    return True
