"""gitpub error types."""

from __future__ import annotations


class GitPubError(RuntimeError):
    """Base error; the CLI reports these and exits non-zero."""


class ConfigurationError(GitPubError):
    """Home path, settings file or hosting provider cannot be resolved."""


class AuthenticationError(GitPubError):
    """User or organization information could not be fetched."""


class RemoteCreationError(GitPubError):
    """Remote repository does not exist and could not be created."""

    def __init__(self, login: str, name: str) -> None:
        super().__init__(f"Failed to create remote repository {login}/{name}")
        self.login = login
        self.name = name


class ConflictError(GitPubError):
    """Working tree has unresolved merge conflicts."""

    def __init__(self, paths: list[str] | tuple[str, ...]) -> None:
        super().__init__(
            "Unresolved conflicts, resolve and commit them manually before retrying: " + ", ".join(paths)
        )
        self.paths = list(paths)


class BuildValidationError(GitPubError):
    """Component build output is missing or not declared publishable."""


class MergeRecoveryError(GitPubError):
    """Initial merge with the remote main branch failed and was not recovered."""


class GitCommandError(GitPubError):
    """A git subprocess exited non-zero."""

    def __init__(self, args: list[str], returncode: int, output: str) -> None:
        super().__init__(f"Command failed: {' '.join(args)}\n\n{output}".rstrip())
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output


class RemoteSyncError(GitPubError):
    """Pulling a remote branch failed without leaving conflicts behind."""

    def __init__(self, branch: str, message: str) -> None:
        super().__init__(f"Failed to pull remote branch {branch}: {message}")
        self.branch = branch


class ProviderError(GitPubError):
    """Hosting provider API returned an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PromptCancelledError(GitPubError):
    """User aborted an interactive prompt."""


class CommitMessageError(GitPubError):
    """No non-empty commit message was given within the allowed attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"No commit message entered after {attempts} attempt(s)")
        self.attempts = attempts
