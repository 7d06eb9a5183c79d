"""Worktree lifecycle service for git-wt."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from git_wt.config import Settings
from git_wt.constants import LOCAL_BRANCH_PREFIX
from git_wt.exceptions import GitOperationError, WorktreeCreationError
from git_wt.models.branch import BranchProvenance, ProvenanceKind
from git_wt.models.repository import RepositoryContext
from git_wt.models.worktree import WorktreeRecord
from git_wt.services.command_runner import CommandRunner
from git_wt.services.git.branch_resolver import BranchResolver
from git_wt.services.git.commands import GitCommands
from git_wt.services.git.upstream import UpstreamResult, UpstreamTracker
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


def same_path(first: Union[str, Path], second: Union[str, Path]) -> bool:
    """Compare two paths after resolving symlinks and relative parts."""
    return Path(first).resolve() == Path(second).resolve()


def parse_worktree_porcelain(output: str, root_dir: Union[str, Path]) -> List[WorktreeRecord]:
    """Parse `git worktree list --porcelain` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or the bare token "detached")
        bare                            (only for the bare entry)
        locked [reason]
        (blank line between worktrees)

    A record starts at each "worktree" line and owns every line up to the
    next one. isCurrent is derived by comparing the path to `root_dir`.
    """
    records: Dict[str, WorktreeRecord] = {}
    current: Dict[str, Any] = {}

    def finish():
        path = current.get("path")
        if not path:
            return
        if path in records:
            logger.debug(f"Ignoring duplicate worktree entry for {path}")
            return
        records[path] = WorktreeRecord(
            path=path,
            branch_name=current.get("branch"),
            head_commit=current.get("HEAD", ""),
            is_current=same_path(path, root_dir),
            is_bare=current.get("bare", False),
            is_detached=current.get("detached", False),
            is_locked=current.get("locked", False),
            lock_reason=current.get("lock_reason"),
        )

    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            finish()
            current = {"path": value}
        elif key == "HEAD":
            current["HEAD"] = value
        elif key == "branch":
            # Extract branch name from "branch refs/heads/branch-name"
            if value.startswith(LOCAL_BRANCH_PREFIX):
                value = value[len(LOCAL_BRANCH_PREFIX):]
            current["branch"] = value
            current["detached"] = False
        elif key == "detached":
            current["detached"] = True
            current.pop("branch", None)
        elif key == "bare":
            current["bare"] = True
        elif key == "locked":
            current["locked"] = True
            current["lock_reason"] = value or None

    finish()
    return list(records.values())


@dataclass(frozen=True)
class CreateResult:
    """Outcome of a successful create."""
    branch_name: str
    path: str
    provenance: BranchProvenance
    upstream: Optional[UpstreamResult] = None


class WorktreeManager:
    """Creates, lists and removes worktrees."""

    def __init__(
        self,
        runner: CommandRunner,
        resolver: Optional[BranchResolver] = None,
        tracker: Optional[UpstreamTracker] = None,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize the worktree manager.

        Args:
            runner: CommandRunner used for every git call
            resolver: BranchResolver (built from runner when omitted)
            tracker: UpstreamTracker (built from runner when omitted)
            log: Logger for progress and warnings
        """
        self.runner = runner
        self.log = log or logger
        self.resolver = resolver or BranchResolver(runner, self.log)
        self.tracker = tracker or UpstreamTracker(runner, self.log)

    def create(
        self,
        context: RepositoryContext,
        branch_name: str,
        target_path: Union[str, Path],
        settings: Settings,
        commit_ish: Optional[str] = None,
    ) -> CreateResult:
        """Create a worktree for `branch_name` at `target_path`.

        Args:
            context: Repository to create the worktree in
            branch_name: Branch to check out
            target_path: Directory of the new worktree
            settings: Invocation settings
            commit_ish: Start point for a brand-new branch (defaults to HEAD)

        Returns:
            CreateResult describing what was done

        Raises:
            WorktreeCreationError: If git could not create the worktree
        """
        target = str(Path(target_path).resolve())
        provenance = self.resolver.resolve(context, branch_name, settings)
        if commit_ish and not provenance.is_new:
            self.log.warning(
                f"Ignoring start point '{commit_ish}': branch '{branch_name}' already exists"
            )

        self.materialize(context, branch_name, target, provenance, commit_ish)

        upstream = None
        if provenance.is_local:
            if provenance.is_stale:
                self.log.warning(
                    f"Branch '{branch_name}' is behind its upstream; pull to update it"
                )
            upstream = self.tracker.reconcile(context, branch_name)

        return CreateResult(branch_name, target, provenance, upstream)

    def materialize(
        self,
        context: RepositoryContext,
        branch_name: str,
        target_path: str,
        provenance: BranchProvenance,
        commit_ish: Optional[str] = None,
    ) -> None:
        """Run the `git worktree add` variant that matches `provenance`."""
        if provenance.kind is ProvenanceKind.NEW:
            args = ["worktree", "add", "-b", branch_name, target_path]
            if commit_ish:
                args.append(commit_ish)
        elif provenance.kind is ProvenanceKind.LOCAL:
            args = ["worktree", "add", target_path, branch_name]
        else:
            # Tracking is set up by --track as part of the same command
            args = [
                "worktree", "add", "--track", "-b", branch_name, target_path,
                f"{provenance.remote_name}/{branch_name}",
            ]

        result = GitCommands(context, self.runner).run(*args)
        if not result.ok:
            self.log.debug(f"git worktree add failed (exit {result.exit_code}): {result.error_text()}")
            raise WorktreeCreationError(branch_name, result)

        self.log.info(f"Created worktree for {provenance.kind.value} branch '{branch_name}' at {target_path}")

    def list(self, context: RepositoryContext) -> List[WorktreeRecord]:
        """Get detailed information about all worktrees.

        Returns:
            List of WorktreeRecord objects, one per worktree, in git's order

        Raises:
            GitOperationError: If git cannot list the worktrees
        """
        output = GitCommands(context, self.runner).output("worktree", "list", "--porcelain")
        records = parse_worktree_porcelain(output, context.root_dir)
        self.log.debug(f"Found {len(records)} worktrees")
        for record in records:
            self.log.debug(f"  {record}")
        return records

    def find_by_branch(self, context: RepositoryContext, branch_name: str) -> Optional[WorktreeRecord]:
        """Find the worktree that has `branch_name` checked out."""
        return next(
            (wt for wt in self.list(context) if wt.branch_name == branch_name),
            None,
        )

    def find_by_path(self, context: RepositoryContext, path: Union[str, Path]) -> Optional[WorktreeRecord]:
        """Find the worktree rooted at `path`."""
        return next(
            (wt for wt in self.list(context) if same_path(wt.path, path)),
            None,
        )

    def remove(self, context: RepositoryContext, path: Union[str, Path], force: bool = False) -> None:
        """Remove the worktree at `path`.

        Refusing to remove the worktree the process runs in is the caller's job.

        Args:
            context: Repository owning the worktree
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked

        Raises:
            GitOperationError: If git refuses to remove the worktree
        """
        args = ["worktree", "remove", str(path)]
        if force:
            args.append("--force")

        result = GitCommands(context, self.runner).run(*args)
        if not result.ok:
            error_msg = f"exit {result.exit_code}: {result.error_text()}"
            self.log.debug(f"Failed to remove worktree at {path}: {error_msg}")
            raise GitOperationError("worktree remove", message=error_msg)

        self.log.info(f"Removed worktree at {path}")

    def prune(self, context: RepositoryContext) -> None:
        """Prune worktree metadata whose directories no longer exist.

        Raises:
            GitOperationError: If git cannot prune
        """
        result = GitCommands(context, self.runner).run("worktree", "prune")
        if not result.ok:
            error_msg = f"exit {result.exit_code}: {result.error_text()}"
            self.log.debug(f"Failed to prune worktrees: {error_msg}")
            raise GitOperationError("worktree prune", message=error_msg)

        self.log.info("Pruned orphaned worktree metadata")

    @staticmethod
    def is_missing(record: WorktreeRecord) -> bool:
        """Check whether a listed worktree's directory is gone."""
        return not record.is_bare and not os.path.exists(record.path)
