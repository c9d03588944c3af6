"""
gitpub package

This package prepares a local project directory for versioned publishing to a
hosting provider (GitHub / Gitee).

Key responsibilities are split across modules:
- `config.py`: settings resolution (defaults -> YAML file -> CLI overrides)
- `credentials.py`: small per-user credential cache under the home directory
- `hosting.py`: isolated provider REST API interactions (user / org / repo)
- `git.py`: the only place that shells out to `git`
- `versioning.py`: derive the development branch from remote release tags
- `sync.py`: stash / conflict / commit / checkout / pull / push gates
- `bootstrap.py`: remote repository + local wiring, run once before commits
- `workflow.py`: the fixed "commit" sequence
- `cli.py`: CLI entrypoint (prepare / commit)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
