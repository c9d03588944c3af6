"""
bootstrap.py

Responsibility: Make sure a remote repository exists and the local directory is wired to it.

High-level flow (`RepositoryBootstrapper.prepare`), every step fatal:
1) Home cache directory
2) Hosting provider kind -> provider adapter
3) Provider token
4) Authenticated user + organizations
5) Owner kind (user / org) + login
6) Remote repository (look up, create if missing)
7) `.gitignore` seed (non-fatal)
8) Component build validation (only with `.componentrc`)
9) `git init` + `origin` remote
10) Initial commit, then merge remote `main` or push a new one
"""

from __future__ import annotations

import logging
import shlex
import subprocess

from gitpub.config import DEFAULT_BUILD_CMD, Settings, ensure_home_path
from gitpub.context import (
    RepositoryContext,
    read_component_manifest,
    read_package_json,
)
from gitpub.credentials import (
    LOGIN_FILE,
    OWNER_FILE,
    SERVER_FILE,
    TOKEN_FILE,
    CredentialStore,
    get_or_prompt,
)
from gitpub.errors import (
    AuthenticationError,
    BuildValidationError,
    GitCommandError,
    MergeRecoveryError,
    ProviderError,
    RemoteCreationError,
)
from gitpub.git import DEFAULT_BRANCH, GitRepo
from gitpub.gitignore import ensure_gitignore
from gitpub.hosting import HostingProvider, OrgInfo, RepoInfo, UserInfo, create_provider, provider_kinds
from gitpub.prompt import Choice, Prompter
from gitpub.sync import REMOTE, BranchSynchronizer

logger = logging.getLogger(__name__)

OWNER_USER = "user"
OWNER_ORG = "org"

_OWNER_LABELS = {OWNER_USER: "Personal account", OWNER_ORG: "Organization"}


class RepositoryBootstrapper:
    def __init__(
        self,
        context: RepositoryContext,
        settings: Settings,
        git: GitRepo,
        prompter: Prompter,
        *,
        store: CredentialStore | None = None,
        synchronizer: BranchSynchronizer | None = None,
    ) -> None:
        self.context = context
        self.settings = settings
        self.git = git
        self.prompter = prompter
        self.store = store or CredentialStore(context.home_path)
        self.synchronizer = synchronizer or BranchSynchronizer(
            context, git, prompter, commit_message_attempts=settings.commit_message_attempts
        )

        self.provider: HostingProvider | None = None
        self.user: UserInfo | None = None
        self.orgs: list[OrgInfo] = []
        self.owner: str | None = None
        self.login: str | None = None
        self.repo: RepoInfo | None = None
        self.remote_url: str | None = None

    def prepare(self) -> None:
        self.check_home_path()
        self.check_git_server()
        self.check_git_token()
        self.get_user_and_orgs()
        self.check_git_owner()
        self.check_repo()
        self.check_git_ignore()
        self.check_component()
        self.init()

    def check_home_path(self) -> None:
        ensure_home_path(self.context.home_path)
        logger.debug("home: %s", self.context.home_path)

    def check_git_server(self) -> None:
        def ask() -> str:
            choices = [Choice(create_provider(kind).display_name, kind) for kind in provider_kinds()]
            return self.prompter.select("Choose a git hosting platform", choices, default="github")

        kind = get_or_prompt(self.store, SERVER_FILE, ask, refresh=self.settings.refresh_server)
        self.provider = create_provider(kind)
        logger.info("Hosting provider: %s", self.provider.display_name)

    def check_git_token(self) -> None:
        provider = self.provider

        def ask() -> str:
            logger.warning(
                "%s token not found, create one at %s", provider.display_name, provider.get_token_url()
            )
            token = ""
            while not token:
                token = self.prompter.password(f"Paste your {provider.display_name} token")
            return token

        token = get_or_prompt(self.store, TOKEN_FILE, ask, refresh=self.settings.refresh_token)
        provider.set_token(token)
        logger.info("Token loaded from %s", self.store.path(TOKEN_FILE))

    def get_user_and_orgs(self) -> None:
        try:
            user = self.provider.get_user()
        except ProviderError as e:
            raise AuthenticationError(f"Failed to fetch {self.provider.display_name} user: {e}") from e
        if not user:
            raise AuthenticationError(f"Failed to fetch {self.provider.display_name} user")

        try:
            orgs = self.provider.get_orgs(user.login)
        except ProviderError as e:
            raise AuthenticationError(f"Failed to fetch organizations of {user.login}: {e}") from e
        if orgs is None:
            raise AuthenticationError(f"Failed to fetch organizations of {user.login}")

        self.user = user
        self.orgs = orgs
        logger.debug("user: %s, orgs: %s", user, orgs)
        logger.info("%s user and organizations loaded", self.provider.display_name)

    def check_git_owner(self) -> None:
        owner = self.store.read(OWNER_FILE)
        login = self.store.read(LOGIN_FILE)
        if owner and login and not self.settings.refresh_owner:
            logger.info("Repository owner: %s (%s)", login, owner)
        else:
            kinds = [OWNER_USER, OWNER_ORG] if self.orgs else [OWNER_USER]
            owner = self.prompter.select(
                "Choose the repository owner type",
                [Choice(_OWNER_LABELS[k], k) for k in kinds],
                default=OWNER_USER,
            )
            if owner == OWNER_USER:
                login = self.user.login
            else:
                login = self.prompter.select(
                    "Choose an organization",
                    [Choice(org.login, org.login) for org in self.orgs],
                )
            self.store.write(OWNER_FILE, owner)
            self.store.write(LOGIN_FILE, login)
            logger.info("Repository owner saved: %s (%s)", login, owner)
        self.owner = owner
        self.login = login

    def check_repo(self) -> None:
        name = self.context.name
        repo = self.provider.get_repo(self.login, name)
        if repo is None:
            logger.info("Creating remote repository %s/%s", self.login, name)
            try:
                if self.owner == OWNER_USER:
                    repo = self.provider.create_repo(name)
                else:
                    repo = self.provider.create_org_repo(name, self.login)
            except ProviderError as e:
                logger.error("%s", e)
            if repo is None:
                raise RemoteCreationError(self.login, name)
            logger.info("Remote repository created")
        else:
            logger.info("Remote repository found")
        logger.debug("repo: %s", repo)
        self.repo = repo

    def check_git_ignore(self) -> None:
        try:
            manifest = read_component_manifest(self.context.directory)
        except BuildValidationError:
            # Reported by check_component.
            manifest = None
        if manifest is not None:
            ensure_gitignore(self.context.directory, manifest.build_path)
        else:
            ensure_gitignore(self.context.directory)

    def check_component(self) -> None:
        manifest = read_component_manifest(self.context.directory)
        if manifest is None:
            return
        logger.info("Validating component build output")
        build_cmd = self.context.build_cmd or DEFAULT_BUILD_CMD
        try:
            subprocess.run(
                shlex.split(build_cmd),
                cwd=str(self.context.directory),
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except subprocess.CalledProcessError as e:
            raise BuildValidationError(f"Build command failed: {build_cmd}\n\n{e.stdout}") from e
        except OSError as e:
            raise BuildValidationError(f"Cannot run build command {build_cmd!r}: {e}") from e

        build_path = self.context.directory / manifest.build_path
        if not build_path.exists():
            raise BuildValidationError(f"Build output {build_path} does not exist")
        files = read_package_json(self.context.directory).get("files") or []
        if manifest.build_path not in files:
            raise BuildValidationError(
                f"package.json `files` does not list the build output [{manifest.build_path}], add it manually"
            )
        logger.info("Component build output is valid")

    def init(self) -> None:
        self.remote_url = self.provider.get_remote_url(self.login, self.context.name)
        if self.git.is_initialized:
            logger.info("Local git repository already initialized")
        else:
            logger.info("Initializing local git repository")
            self.git.init(DEFAULT_BRANCH)
        if REMOTE not in self.git.remotes():
            logger.info("Adding remote %s -> %s", REMOTE, self.remote_url)
            self.git.add_remote(REMOTE, self.remote_url)
        self.init_commit()

    def init_commit(self) -> None:
        self.synchronizer.check_conflicted()
        self.synchronizer.check_not_committed()
        if not self.synchronizer.check_remote_main():
            # The local branch may be called anything (`master` in older repos).
            self.git.push(REMOTE, DEFAULT_BRANCH, source="HEAD")
            logger.info("Pushed HEAD to %s/%s", REMOTE, DEFAULT_BRANCH)
            return

        remote_main = f"{REMOTE}/{DEFAULT_BRANCH}"
        try:
            self.git.fetch(REMOTE)
            self.git.merge(remote_main, "--allow-unrelated-histories")
        except GitCommandError as e:
            logger.error("Merging %s failed: %s", remote_main, e)
            if not self.settings.reset_on_merge_failure:
                raise MergeRecoveryError(f"Merging {remote_main} failed, resolve manually") from e
            branch = self.git.current_branch()
            if branch != DEFAULT_BRANCH:
                raise MergeRecoveryError(
                    f"Merging {remote_main} into {branch or 'detached HEAD'} failed, resolve manually"
                ) from e
            logger.warning(
                "Resetting %s to %s, discarding local HEAD %s",
                branch,
                remote_main,
                self.git.head_sha() or "(no commits)",
            )
            try:
                self.git.reset_hard(remote_main)
            except GitCommandError as reset_error:
                raise MergeRecoveryError(f"Reset to {remote_main} failed: {reset_error}") from reset_error
