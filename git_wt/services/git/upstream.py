"""Upstream tracking reconciliation for git-wt."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from git_wt.models.repository import RepositoryContext
from git_wt.services.command_runner import CommandRunner
from git_wt.services.git.branch_queries import BranchQueries
from git_wt.services.git.commands import GitCommands
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class UpstreamStatus(Enum):
    """Outcome of an upstream reconciliation."""
    ALREADY_SET = "already-set"
    SET = "set"
    NO_REMOTE_BRANCH = "no-remote-branch"
    FAILED = "failed"


@dataclass(frozen=True)
class UpstreamResult:
    """What reconcile did, for the caller to report."""
    branch_name: str
    status: UpstreamStatus
    upstream: Optional[str] = None
    error: Optional[str] = None


class UpstreamTracker:
    """Makes sure an existing local branch tracks its remote counterpart."""

    def __init__(self, runner: CommandRunner, log: Optional[logging.Logger] = None):
        self.runner = runner
        self.log = log or logger

    def get_upstream(self, context: RepositoryContext, branch_name: str) -> Optional[str]:
        """Get the configured upstream ref of a branch, if any."""
        return BranchQueries(GitCommands(context, self.runner)).get_upstream(branch_name)

    def reconcile(self, context: RepositoryContext, branch_name: str) -> UpstreamResult:
        """Set the upstream of `branch_name` when it has none and a remote carries it.

        Never raises: a failure to set the upstream is logged as a warning and
        reported through the returned status, since the worktree that prompted
        the call already exists.
        """
        git_commands = GitCommands(context, self.runner)
        queries = BranchQueries(git_commands)

        self.log.info(f"Checking upstream for branch '{branch_name}'")
        current = queries.get_upstream(branch_name)
        if current:
            self.log.info(f"Branch '{branch_name}' already tracks {current}")
            return UpstreamResult(branch_name, UpstreamStatus.ALREADY_SET, upstream=current)

        remote_name = queries.find_remote_for_branch(branch_name)
        if not remote_name:
            self.log.info(f"No matching remote branch found for '{branch_name}', skipping upstream setup")
            return UpstreamResult(branch_name, UpstreamStatus.NO_REMOTE_BRANCH)

        upstream = f"{remote_name}/{branch_name}"
        result = git_commands.run("branch", f"--set-upstream-to={upstream}", branch_name)
        if not result.ok:
            error = result.error_text()
            self.log.warning(f"Could not set upstream of '{branch_name}' to {upstream}: {error}")
            return UpstreamResult(branch_name, UpstreamStatus.FAILED, upstream=upstream, error=error)

        self.log.info(f"Set upstream tracking for branch '{branch_name}' to {upstream}")
        return UpstreamResult(branch_name, UpstreamStatus.SET, upstream=upstream)
