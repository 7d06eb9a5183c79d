"""Display formatting for git-wt."""

import os
from typing import List, Optional

from rich.table import Table
from rich.text import Text

from git_wt.config import CONFIG_KEYS, ConfigStore, Settings
from git_wt.constants import (
    CLI_COLORS,
    COLUMNS,
    MARKER_BARE,
    MARKER_DETACHED,
    MARKER_LOCKED,
    MARKER_MISSING,
    SYMBOL_CURRENT_WORKTREE,
)
from git_wt.models.branch import ProvenanceKind
from git_wt.models.repository import RepositoryContext
from git_wt.models.worktree import WorktreeRecord
from git_wt.services.git.upstream import UpstreamResult, UpstreamStatus
from git_wt.services.git.worktrees import CreateResult


def format_status_markers(record: WorktreeRecord, is_missing: bool = False) -> str:
    """
    Format the status markers of a worktree.

    Args:
        record: Worktree to describe
        is_missing: Whether the worktree directory no longer exists

    Returns:
        Space-separated markers such as "[locked] [detached]", or ""
    """
    markers = []
    if record.is_bare:
        markers.append(MARKER_BARE)
    if record.is_locked:
        markers.append(MARKER_LOCKED)
    if record.is_detached:
        markers.append(MARKER_DETACHED)
    if is_missing:
        markers.append(MARKER_MISSING)
    return " ".join(markers)


def format_relative_path(record: WorktreeRecord, context: RepositoryContext) -> str:
    """Path of a worktree relative to the repository root ("." for the root)."""
    relative = os.path.relpath(record.path, context.root_dir)
    return relative or "."


def get_row_style(record: WorktreeRecord, is_missing: bool = False) -> Optional[str]:
    """Rich style for a worktree row."""
    if is_missing:
        return CLI_COLORS["missing"]
    if record.is_current:
        return CLI_COLORS["current"]
    if record.is_bare:
        return CLI_COLORS["bare"]
    if record.is_detached:
        return CLI_COLORS["detached"]
    return None


def build_worktree_table(
    records: List[WorktreeRecord],
    context: RepositoryContext,
    missing: Optional[List[str]] = None,
) -> Table:
    """Build a rich table of worktrees (columns from COLUMNS)."""
    missing = missing or []
    table = Table(box=None, show_edge=False, pad_edge=False)
    for col in COLUMNS:
        table.add_column(col.label, min_width=col.width or None, no_wrap=col.key != "path")

    for record in records:
        is_missing = record.path in missing
        markers = format_status_markers(record, is_missing)
        path_text = format_relative_path(record, context)
        if markers:
            path_text = f"{path_text} {markers}"
        table.add_row(
            SYMBOL_CURRENT_WORKTREE if record.is_current else "",
            Text(os.path.basename(record.path)),
            Text(record.display_branch),
            Text(path_text),
            style=get_row_style(record, is_missing),
        )
    return table


def format_create_result(result: CreateResult) -> str:
    """One-line summary of a successful create."""
    provenance = result.provenance
    if provenance.kind is ProvenanceKind.LOCAL:
        return f"Created worktree for existing local branch '{result.branch_name}' at {result.path}"
    if provenance.kind is ProvenanceKind.REMOTE:
        return (
            f"Created worktree for remote branch '{provenance.remote_name}/{result.branch_name}' "
            f"with local tracking branch at {result.path}"
        )
    return f"Created worktree with new branch '{result.branch_name}' at {result.path}"


def format_upstream_result(result: UpstreamResult) -> str:
    """Describe what upstream reconciliation did."""
    if result.status is UpstreamStatus.SET:
        return f"Set upstream tracking for branch '{result.branch_name}' to {result.upstream}"
    if result.status is UpstreamStatus.ALREADY_SET:
        return f"Branch '{result.branch_name}' already tracks {result.upstream}"
    if result.status is UpstreamStatus.NO_REMOTE_BRANCH:
        return f"No matching remote branch found for '{result.branch_name}', skipping upstream setup"
    return f"Could not set upstream for '{result.branch_name}': {result.error}"


def format_config_value(value) -> str:
    """Render a settings value the way it is written in JSON."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_settings(settings: Settings) -> str:
    """All settings as "key: value" lines."""
    return "\n".join(
        f"{key}: {format_config_value(ConfigStore.get_value(settings, key))}" for key in CONFIG_KEYS
    )
