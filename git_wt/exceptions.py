"""Custom exceptions for git-wt"""

from typing import TYPE_CHECKING, Optional

from git_wt.constants import ExitCode

if TYPE_CHECKING:
    from git_wt.services.command_runner import CommandResult


class GitWtError(Exception):
    """Base exception for all git-wt errors."""

    exit_code = ExitCode.GENERAL_ERROR


class RepositoryError(GitWtError):
    """Base exception for repository detection problems."""


class NotARepositoryError(RepositoryError):
    """Raised when no repository encloses the starting directory."""

    exit_code = ExitCode.GIT_REPO_NOT_FOUND

    def __init__(self, start_dir: str):
        self.start_dir = start_dir
        super().__init__(
            f"No Git repository found from {start_dir}. "
            'Initialize a repository with "git init" or "wt init <git-url>".'
        )


class InvalidRepositoryError(RepositoryError):
    """Raised when a detected repository is not in a usable state."""

    exit_code = ExitCode.FILESYSTEM_ERROR


class GitOperationError(GitWtError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class WorktreeCreationError(GitWtError):
    """Raised when the worktree creation command fails.

    The repository is left in whatever state git left it; nothing is rolled back.
    """

    def __init__(self, branch_name: str, cause: "CommandResult"):
        self.branch_name = branch_name
        self.cause = cause
        super().__init__(
            f"Failed to create worktree for branch '{branch_name}' "
            f"(exit {cause.exit_code}): {cause.error_text()}"
        )


class WorktreeNotFoundError(GitWtError):
    """Raised when no worktree matches a branch name or path."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No worktree found for '{name}'")


class WorktreeInUseError(GitWtError):
    """Raised when asked to remove the worktree the process is running in."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot remove the worktree you are currently in: {path}")


class ConfigError(GitWtError):
    """Raised for unreadable, malformed or invalid configuration."""

    exit_code = ExitCode.FILESYSTEM_ERROR


class RepositoryInitError(GitWtError):
    """Raised when `wt init` cannot set up a repository."""

    def __init__(self, message: str, exit_code: int = ExitCode.GENERAL_ERROR):
        self.exit_code = exit_code
        super().__init__(message)


class NetworkError(RepositoryInitError):
    """Raised when cloning fails because the remote could not be reached."""

    def __init__(self, message: str):
        super().__init__(message, ExitCode.NETWORK_ERROR)
