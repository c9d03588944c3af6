"""The "commit" sequence: resolve branch, sync with the remote, push."""

from __future__ import annotations

import logging

from gitpub.context import RepositoryContext
from gitpub.git import GitRepo
from gitpub.prompt import Prompter
from gitpub.sync import BranchSynchronizer
from gitpub.versioning import VersionResolver

logger = logging.getLogger(__name__)


class CommitWorkflow:
    def __init__(
        self,
        context: RepositoryContext,
        git: GitRepo,
        prompter: Prompter,
        *,
        resolver: VersionResolver | None = None,
        synchronizer: BranchSynchronizer | None = None,
        commit_message_attempts: int = 3,
    ) -> None:
        self.context = context
        self.resolver = resolver or VersionResolver(context, git, prompter)
        self.synchronizer = synchronizer or BranchSynchronizer(
            context, git, prompter, commit_message_attempts=commit_message_attempts
        )

    def run(self) -> str:
        """Run every step in order; the first error stops the run. Returns the pushed branch."""
        sync = self.synchronizer
        self.resolver.get_correct_version()
        branch = self.context.branch
        sync.check_stash()
        sync.check_conflicted()
        sync.check_not_committed()
        sync.checkout_branch(branch)
        sync.pull_remote_master_and_branch()
        sync.push_remote_repo(branch)
        logger.info("Branch %s is up to date with the remote", branch)
        return branch
