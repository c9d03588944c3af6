"""
sync.py

Responsibility: Gates that bring the local working copy in line with the remote.

Each method is one gate; callers run them in a fixed order and stop at the
first error. Status is re-read for every decision because the previous gate
may have changed the tree.
"""

from __future__ import annotations

import logging

from gitpub.context import RepositoryContext
from gitpub.errors import CommitMessageError, ConflictError, GitCommandError, RemoteSyncError
from gitpub.git import DEFAULT_BRANCH, GitRepo
from gitpub.prompt import Prompter
from gitpub.versioning import VERSION_DEVELOP, remote_versions

logger = logging.getLogger(__name__)

REMOTE = "origin"


class BranchSynchronizer:
    def __init__(
        self,
        context: RepositoryContext,
        git: GitRepo,
        prompter: Prompter,
        *,
        commit_message_attempts: int = 3,
    ) -> None:
        self.context = context
        self.git = git
        self.prompter = prompter
        self.commit_message_attempts = commit_message_attempts

    def check_conflicted(self) -> None:
        logger.info("Checking for conflicts")
        status = self.git.status()
        if status.conflicted:
            raise ConflictError(status.conflicted)
        logger.info("No conflicts")

    def check_not_committed(self) -> bool:
        """Stage and commit everything outstanding. Returns True if a commit was made."""
        status = self.git.status()
        if not status.has_uncommitted:
            return False
        logger.debug("status: %s", status)
        self.git.add_all()
        self.git.commit(self._ask_commit_message())
        logger.info("Committed local changes")
        return True

    def _ask_commit_message(self) -> str:
        for _ in range(self.commit_message_attempts):
            message = self.prompter.text("Commit message").strip()
            if message:
                return message
            logger.warning("Commit message must not be empty")
        raise CommitMessageError(self.commit_message_attempts)

    def check_stash(self) -> None:
        logger.info("Checking stash")
        if self.git.stash_list():
            self.git.stash_pop()
            logger.info("Popped latest stash entry")

    def checkout_branch(self, branch: str) -> None:
        if branch in self.git.local_branches():
            self.git.checkout(branch)
        else:
            self.git.checkout_new(branch)
        logger.info("Switched to branch %s", branch)

    def check_remote_main(self) -> bool:
        refs = self.git.ls_remote(REMOTE)
        return any(line.split("\t")[-1].strip() == f"refs/heads/{DEFAULT_BRANCH}" for line in refs.splitlines())

    def pull_remote_repo(self, branch: str) -> None:
        logger.info("Pulling remote branch %s", branch)
        try:
            self.git.pull(REMOTE, branch)
        except GitCommandError as e:
            status = self.git.status()
            if status.conflicted:
                raise ConflictError(status.conflicted) from e
            raise RemoteSyncError(branch, e.output.strip() or str(e)) from e

    def pull_remote_master_and_branch(self) -> None:
        branch = self.context.branch
        logger.info("Merging [%s] -> [%s]", DEFAULT_BRANCH, branch)
        self.pull_remote_repo(DEFAULT_BRANCH)
        self.check_conflicted()

        logger.info("Checking remote development branch")
        dev_versions = remote_versions(self.git.ls_remote(REMOTE), VERSION_DEVELOP)
        if self.context.version in dev_versions:
            logger.info("Merging [%s] -> [%s]", branch, branch)
            self.pull_remote_repo(branch)
            self.check_conflicted()
        else:
            logger.info("Remote branch [%s] does not exist yet", branch)

    def push_remote_repo(self, branch: str) -> None:
        self.git.push(REMOTE, branch)
        logger.info("Pushed %s to %s", branch, REMOTE)
