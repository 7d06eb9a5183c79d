"""Branch provenance resolution for git-wt."""

import logging
from typing import Optional

from git_wt.config import Settings
from git_wt.constants import LOCAL_BRANCH_PREFIX
from git_wt.models.branch import BranchProvenance
from git_wt.models.repository import RepositoryContext
from git_wt.services.command_runner import CommandRunner, FailureKind
from git_wt.services.git.branch_queries import BranchQueries
from git_wt.services.git.commands import GitCommands
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class BranchResolver:
    """Decides whether a requested branch is local, remote-only or new."""

    def __init__(self, runner: CommandRunner, log: Optional[logging.Logger] = None):
        self.runner = runner
        self.log = log or logger

    def resolve(
        self, context: RepositoryContext, branch_name: str, settings: Settings
    ) -> BranchProvenance:
        """Determine the provenance of `branch_name`.

        Steps, in order: optional fetch of all remotes, local branch lookup
        (with staleness check), remote-tracking lookup, otherwise new.

        Args:
            context: Repository to query
            branch_name: Requested branch
            settings: Invocation settings (auto_fetch is honoured)

        Returns:
            BranchProvenance for the branch
        """
        git_commands = GitCommands(context, self.runner)
        queries = BranchQueries(git_commands)

        if settings.auto_fetch:
            self.fetch_all(git_commands)

        if queries.local_branch_exists(branch_name):
            is_stale = self.is_stale(queries, branch_name)
            self.log.debug(f"Branch {branch_name} exists locally (stale={is_stale})")
            return BranchProvenance.local(is_stale=is_stale)

        remote_name = queries.find_remote_for_branch(branch_name)
        if remote_name:
            self.log.debug(f"Branch {branch_name} found on remote {remote_name}")
            return BranchProvenance.remote(remote_name)

        self.log.debug(f"Branch {branch_name} not found locally or on any remote")
        return BranchProvenance.new()

    def fetch_all(self, git_commands: GitCommands) -> bool:
        """Fetch all remotes; a failure is logged and otherwise ignored."""
        self.log.info("Fetching latest changes from all remotes")
        result = git_commands.run("fetch", "--all")
        if result.ok:
            return True

        if result.failure_kind is FailureKind.NETWORK:
            self.log.warning(f"Could not reach remote while fetching, using local refs: {result.error_text()}")
        else:
            self.log.warning(f"Fetch failed, using local refs: {result.error_text()}")
        return False

    def is_stale(self, queries: BranchQueries, branch_name: str) -> bool:
        """Check whether a local branch is strictly behind its upstream.

        Equal, ahead and diverged branches are not stale; neither is a branch
        without an upstream.
        """
        upstream = queries.get_upstream(branch_name)
        if not upstream:
            return False

        local_commit = queries.resolve_commit(f"{LOCAL_BRANCH_PREFIX}{branch_name}")
        upstream_commit = queries.resolve_commit(upstream)
        if not local_commit or not upstream_commit:
            return False
        if local_commit == upstream_commit:
            return False

        return queries.is_ancestor(local_commit, upstream_commit)
