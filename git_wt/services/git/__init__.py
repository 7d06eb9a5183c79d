"""Git-related services for git-wt."""

from .commands import GitCommands
from .branch_queries import BranchQueries
from .branch_resolver import BranchResolver
from .upstream import UpstreamTracker, UpstreamResult, UpstreamStatus
from .worktrees import WorktreeManager, CreateResult, parse_worktree_porcelain

__all__ = [
    "GitCommands",
    "BranchQueries",
    "BranchResolver",
    "UpstreamTracker",
    "UpstreamResult",
    "UpstreamStatus",
    "WorktreeManager",
    "CreateResult",
    "parse_worktree_porcelain",
]
