"""Branch and ref queries for git-wt.

All existence checks here are optimistic: git reports "not found" through a
non-zero exit that looks the same as a transient failure for several of these
commands, so any failed query is read as a negative answer.
"""

from typing import List, Optional

from git_wt.constants import LOCAL_BRANCH_PREFIX, REMOTE_REFS_PREFIX
from git_wt.services.git.commands import GitCommands
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class BranchQueries:
    """Read-only queries about local branches and remote-tracking refs."""

    def __init__(self, git_commands: GitCommands):
        self.git = git_commands

    def local_branch_exists(self, branch_name: str) -> bool:
        """Check whether refs/heads/<branch_name> exists."""
        result = self.git.run("show-ref", "--verify", "--quiet", f"{LOCAL_BRANCH_PREFIX}{branch_name}")
        return result.ok

    def get_upstream(self, branch_name: str) -> Optional[str]:
        """Get the full upstream ref of a local branch (e.g. refs/remotes/origin/x)."""
        result = self.git.run(
            "for-each-ref", "--format=%(upstream)", f"{LOCAL_BRANCH_PREFIX}{branch_name}"
        )
        if not result.ok:
            logger.debug(f"Could not read upstream of {branch_name}: {result.error_text()}")
            return None
        upstream = result.stdout.strip()
        return upstream or None

    def resolve_commit(self, ref: str) -> Optional[str]:
        """Get the commit a ref points at, or None if it does not resolve."""
        result = self.git.run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        if not result.ok:
            return None
        return result.stdout.strip() or None

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Check whether `ancestor` is reachable from `descendant`."""
        result = self.git.run("merge-base", "--is-ancestor", ancestor, descendant)
        return result.ok

    def list_remote_refs(self) -> List[str]:
        """List remote-tracking refs in git's enumeration order (sorted by refname)."""
        result = self.git.run("for-each-ref", "--format=%(refname)", REMOTE_REFS_PREFIX.rstrip("/"))
        if not result.ok:
            logger.debug(f"Could not list remote refs: {result.error_text()}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def find_remotes_with_branch(self, branch_name: str) -> List[str]:
        """Find the remotes that carry a branch named `branch_name`.

        A ref refs/remotes/<remote>/<branch> matches when everything after the
        remote name equals `branch_name`. Remotes are returned in enumeration
        order; when several remotes carry the branch the first one wins for
        callers that only need one.
        """
        remotes = []
        for ref in self.list_remote_refs():
            if not ref.startswith(REMOTE_REFS_PREFIX):
                continue
            remote_name, _, remote_branch = ref[len(REMOTE_REFS_PREFIX):].partition("/")
            # refs/remotes/<remote>/HEAD is a symbolic pointer, not a branch
            if remote_branch == "HEAD":
                continue
            if remote_name and remote_branch == branch_name and remote_name not in remotes:
                remotes.append(remote_name)
        return remotes

    def find_remote_for_branch(self, branch_name: str) -> Optional[str]:
        """Return the first remote that carries `branch_name`, if any."""
        remotes = self.find_remotes_with_branch(branch_name)
        if len(remotes) > 1:
            logger.debug(
                f"Branch {branch_name} exists on several remotes {remotes}, using {remotes[0]}"
            )
        return remotes[0] if remotes else None

    def current_branch(self) -> Optional[str]:
        """Branch HEAD points at, or None when detached."""
        result = self.git.run("symbolic-ref", "--quiet", "--short", "HEAD")
        if not result.ok:
            return None
        return result.stdout.strip() or None

    def remote_default_branch(self, remote_name: str = "origin") -> Optional[str]:
        """Branch the remote's HEAD points at (from refs/remotes/<remote>/HEAD)."""
        result = self.git.run(
            "symbolic-ref", "--quiet", "--short", f"{REMOTE_REFS_PREFIX}{remote_name}/HEAD"
        )
        if not result.ok:
            return None
        short_ref = result.stdout.strip()
        prefix = f"{remote_name}/"
        if short_ref.startswith(prefix):
            return short_ref[len(prefix):] or None
        return short_ref or None
