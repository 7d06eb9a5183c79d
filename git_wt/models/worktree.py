"""Worktree data models."""

from dataclasses import dataclass
from typing import Optional

from git_wt.constants import SHORT_HASH_LENGTH


@dataclass(frozen=True)
class WorktreeRecord:
    """One entry of `git worktree list --porcelain`."""

    path: str
    branch_name: Optional[str]  # None when detached or bare
    head_commit: str
    is_current: bool  # Path equals the repository root of this invocation
    is_bare: bool = False
    is_detached: bool = False
    is_locked: bool = False
    lock_reason: Optional[str] = None

    @property
    def short_commit(self) -> str:
        return self.head_commit[:SHORT_HASH_LENGTH]

    @property
    def display_branch(self) -> str:
        """Branch name for display, falling back to a short hash when detached."""
        if self.is_detached:
            return f"({self.short_commit})"
        if self.branch_name:
            return self.branch_name
        if self.is_bare:
            return "(bare)"
        return "unknown"

    def __str__(self) -> str:
        current_marker = " (current)" if self.is_current else ""
        return f"{self.display_branch} @ {self.path}{current_marker}"
