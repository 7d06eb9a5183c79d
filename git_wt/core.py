"""Core functionality for git-wt"""

import os
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Union

from git_wt.config import ConfigStore, Settings, detect_defaults
from git_wt.exceptions import GitOperationError, GitWtError, WorktreeInUseError, WorktreeNotFoundError
from git_wt.models.repository import RepositoryContext
from git_wt.models.worktree import WorktreeRecord
from git_wt.services.command_runner import CommandRunner, GitPythonCommandRunner
from git_wt.services.git.branch_queries import BranchQueries
from git_wt.services.git.commands import GitCommands
from git_wt.services.git.worktrees import CreateResult, WorktreeManager
from git_wt.services.hooks import HookRunner
from git_wt.services.init_service import RepositoryInitializer
from git_wt.services.repository_locator import RepositoryLocator
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class WorktreeKeeper:
    """Entry point for every wt command.

    One instance serves one invocation: the repository context is located
    once and the settings are loaded once, then threaded through every call.
    """

    def __init__(
        self,
        start_dir: Optional[Union[str, Path]] = None,
        runner: Optional[CommandRunner] = None,
        config_store: Optional[ConfigStore] = None,
        locator: Optional[RepositoryLocator] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize WorktreeKeeper.

        Args:
            start_dir: Directory to start repository detection from (default: cwd)
            runner: CommandRunner for git and hooks
            config_store: Settings persistence
            locator: Repository detection
            settings: Explicit settings; skips loading from disk when given

        Raises:
            NotARepositoryError: If no repository encloses start_dir
            InvalidRepositoryError: If the repository is unusable
            ConfigError: If the config file is invalid
        """
        self.runner = runner or GitPythonCommandRunner()
        self.locator = locator or RepositoryLocator()
        self.config_store = config_store or ConfigStore()

        self.context: RepositoryContext = self.locator.locate(start_dir)
        self.locator.validate(self.context)
        logger.debug(f"Using repository {self.context}")

        self.manager = WorktreeManager(self.runner)
        self.hooks = HookRunner(self.runner)
        self.settings = settings or self._load_settings()

    def _load_settings(self) -> Settings:
        if self.config_store.exists(self.context):
            return self.config_store.load(self.context)
        return self.detect_settings()

    def detect_settings(self) -> Settings:
        """Settings derived from the existing worktree layout."""
        queries = BranchQueries(GitCommands(self.context, self.runner))
        try:
            records = self.manager.list(self.context)
        except GitOperationError as e:
            logger.debug(f"Could not list worktrees for default detection: {e}")
            records = []
        return detect_defaults(self.context, records, queries.remote_default_branch())

    # Worktrees

    def list_worktrees(self) -> List[WorktreeRecord]:
        return self.manager.list(self.context)

    def missing_worktrees(self, records: Sequence[WorktreeRecord]) -> List[str]:
        """Paths of listed worktrees whose directories are gone."""
        return [wt.path for wt in records if self.manager.is_missing(wt)]

    def create_worktree(self, branch_name: str, commit_ish: Optional[str] = None) -> CreateResult:
        """Create the worktree for `branch_name` under the configured directory."""
        target = self.settings.worktree_path(self.context, branch_name)
        result = self.manager.create(self.context, branch_name, target, self.settings, commit_ish)
        self.hooks.run(
            self.settings.post_create_hook,
            self.context,
            branch_name,
            result.path,
            cwd=result.path,
        )
        return result

    def find_worktree(self, name: str) -> WorktreeRecord:
        """Find a worktree by branch name, directory name or path.

        Raises:
            WorktreeNotFoundError: If nothing matches
        """
        records = self.list_worktrees()
        for record in records:
            if record.branch_name == name:
                return record
        for record in records:
            if not record.is_bare and os.path.basename(record.path) == name:
                return record
        candidate = Path(name)
        if not candidate.is_absolute():
            candidate = Path(os.getcwd()) / candidate
        if candidate.exists():
            record = self.manager.find_by_path(self.context, candidate)
            if record is not None:
                return record
        raise WorktreeNotFoundError(name)

    def worktree_dir(self, branch_name: str) -> str:
        """Directory of the worktree for `branch_name` (for `wt switch`)."""
        return self.find_worktree(branch_name).path

    def remove_worktree(self, name: str, force: bool = False, cwd: Optional[Union[str, Path]] = None) -> WorktreeRecord:
        """Remove a worktree unless the process is running inside it.

        Raises:
            WorktreeNotFoundError: If no worktree matches `name`
            WorktreeInUseError: If `cwd` lies inside the worktree
            GitOperationError: If git refuses the removal
        """
        record = self.find_worktree(name)
        if record.is_bare:
            raise GitOperationError("worktree remove", message=f"{record.path} is the bare repository")

        working_dir = Path(cwd or os.getcwd()).resolve()
        worktree_path = Path(record.path).resolve()
        if working_dir == worktree_path or worktree_path in working_dir.parents:
            raise WorktreeInUseError(record.path)

        self.manager.remove(self.context, record.path, force=force)
        self.hooks.run(
            self.settings.post_remove_hook,
            self.context,
            record.branch_name,
            record.path,
            cwd=str(self.context.root_dir),
        )
        return record

    def prune_worktrees(self) -> None:
        self.manager.prune(self.context)

    def run_in_worktree(self, branch_name: str, command: Sequence[str]) -> int:
        """Run `command` inside the worktree of `branch_name`, creating it if needed.

        Returns:
            The command's exit code
        """
        existing = self.manager.find_by_branch(self.context, branch_name)
        if existing is not None and not self.manager.is_missing(existing):
            path = existing.path
        else:
            path = self.create_worktree(branch_name).path

        logger.info(f"Running {' '.join(command)} in {path}")
        return self.runner.run_attached(command[0], list(command[1:]), cwd=path)

    # Settings

    def get_config_value(self, key: str):
        return ConfigStore.get_value(self.settings, key)

    def set_config_value(self, key: str, raw_value: Optional[str]) -> Settings:
        """Update and persist one setting; the new Settings replace the old ones."""
        self.settings = self.config_store.set_value(self.context, key, raw_value, defaults=self.settings)
        return self.settings

    # Initialisation

    @classmethod
    def initialize(
        cls,
        url: str,
        target_name: Optional[str] = None,
        parent_dir: Optional[Union[str, Path]] = None,
        runner: Optional[CommandRunner] = None,
    ) -> "WorktreeKeeper":
        """Clone `url` into the bare layout and create the default-branch worktree.

        A failure to create the default-branch worktree is logged as a warning;
        the repository itself is still usable.
        """
        runner = runner or GitPythonCommandRunner()
        context = RepositoryInitializer(runner).initialize(url, target_name, parent_dir)
        keeper = cls(start_dir=context.root_dir, runner=runner)

        default_branch = BranchQueries(GitCommands(keeper.context, runner)).current_branch()
        if not default_branch:
            default_branch = keeper.settings.default_branch_name
        keeper.settings = replace(keeper.settings, default_branch_name=default_branch, auto_fetch=False)

        try:
            keeper.create_worktree(default_branch)
        except GitWtError as e:
            logger.warning(f"Could not create worktree for default branch '{default_branch}': {e}")
        return keeper
