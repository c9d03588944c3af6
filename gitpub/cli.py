"""
cli.py

Responsibility: CLI entrypoint for gitpub.

Commands:
- `prepare`: ensure the remote repository exists and the directory is wired to it
- `commit`: `prepare`, then resolve the development branch, sync and push

This module should orchestrate behavior but keep concerns isolated:
- Settings: `config.py`
- Remote + local wiring: `bootstrap.py`
- Branch workflow: `workflow.py`
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gitpub.bootstrap import RepositoryBootstrapper
from gitpub.config import Settings
from gitpub.context import RepositoryContext
from gitpub.errors import GitPubError
from gitpub.git import GitRepo
from gitpub.prompt import ConsolePrompter, Prompter
from gitpub.workflow import CommitWorkflow

logger = logging.getLogger("gitpub")


def configure_logging(verbose: bool = False, handler: logging.Handler | None = None) -> None:
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def _settings_from_args(args: argparse.Namespace) -> Settings:
    # store_true flags default to None so config.yml values survive when a flag is absent.
    return Settings.from_env(
        refresh_server=args.refresh_server,
        refresh_token=args.refresh_token,
        refresh_owner=args.refresh_owner,
        build_cmd=args.build_cmd,
        prod=args.prod,
        ssh_user=args.ssh_user,
        ssh_ip=args.ssh_ip,
        ssh_path=args.ssh_path,
        reset_on_merge_failure=args.reset_on_merge_failure,
        commit_message_attempts=args.commit_message_attempts,
    )


def _bootstrap(args: argparse.Namespace, prompter: Prompter) -> tuple[Settings, RepositoryContext, GitRepo]:
    settings = _settings_from_args(args)
    context = RepositoryContext.from_directory(Path(args.dir), settings)
    git = GitRepo(context.directory)
    RepositoryBootstrapper(context, settings, git, prompter).prepare()
    return settings, context, git


def prepare_cmd(args: argparse.Namespace, prompter: Prompter) -> int:
    _bootstrap(args, prompter)
    return 0


def commit_cmd(args: argparse.Namespace, prompter: Prompter) -> int:
    settings, context, git = _bootstrap(args, prompter)
    CommitWorkflow(
        context,
        git,
        prompter,
        commit_message_attempts=settings.commit_message_attempts,
    ).run()
    return 0


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--dir", default=".", help="Project directory (default: current directory)")
    p.add_argument("--refresh-server", action="store_true", default=None, help="Choose the hosting provider again")
    p.add_argument("--refresh-token", action="store_true", default=None, help="Enter the provider token again")
    p.add_argument("--refresh-owner", action="store_true", default=None, help="Choose the repository owner again")
    p.add_argument("--build-cmd", default=None, help="Component build command (default: npm run build)")
    p.add_argument("--prod", action="store_true", default=None, help="Production publish")
    p.add_argument("--ssh-user", default=None, help="SSH user of the publish target")
    p.add_argument("--ssh-ip", default=None, help="SSH host of the publish target")
    p.add_argument("--ssh-path", default=None, help="Path on the publish target")
    p.add_argument(
        "--no-reset-on-merge-failure",
        dest="reset_on_merge_failure",
        action="store_false",
        default=None,
        help="Fail instead of resetting to origin/main when the initial merge fails",
    )
    p.add_argument(
        "--commit-message-attempts",
        type=int,
        default=None,
        help="How many times to ask for a non-empty commit message (default: 3)",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gitpub", description="Version-aware branch sync for GitHub / Gitee projects")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    prep = sub.add_parser("prepare", help="Create/link the remote repository and make the initial commit")
    _add_common_args(prep)
    prep.set_defaults(func=prepare_cmd)

    commit = sub.add_parser("commit", help="Commit, merge main and the development branch, push")
    _add_common_args(commit)
    commit.set_defaults(func=commit_cmd)

    return p


def main(argv: list[str] | None = None, prompter: Prompter | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return int(args.func(args, prompter or ConsolePrompter()))
    except GitPubError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
