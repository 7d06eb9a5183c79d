"""Post-create and post-remove hooks for git-wt."""

import shlex
from pathlib import Path
from typing import Optional

from git_wt.models.repository import RepositoryContext
from git_wt.services.command_runner import CommandResult, CommandRunner
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class HookRunner:
    """Runs user-configured hook executables. Hook failures never fail the command."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def run(
        self,
        hook: Optional[str],
        context: RepositoryContext,
        branch_name: Optional[str],
        worktree_path: str,
        cwd: str,
    ) -> Optional[CommandResult]:
        """Run `hook` if one is configured.

        The hook sees WT_BRANCH, WT_WORKTREE_PATH and WT_ROOT_DIR in its
        environment. A relative executable path is looked up under the
        repository root first.

        Returns:
            The hook's CommandResult, or None when no hook is configured
        """
        if not hook:
            return None

        try:
            parts = shlex.split(hook)
        except ValueError as e:
            logger.warning(f"Could not parse hook '{hook}': {e}")
            return None
        if not parts:
            return None

        executable, args = parts[0], parts[1:]
        candidate = context.root_dir / executable
        if not Path(executable).is_absolute() and candidate.is_file():
            executable = str(candidate)

        env = {
            "WT_BRANCH": branch_name or "",
            "WT_WORKTREE_PATH": worktree_path,
            "WT_ROOT_DIR": str(context.root_dir),
        }
        logger.info(f"Running hook {hook}")
        result = self.runner.run(executable, args, cwd=cwd, env=env)
        if not result.ok:
            logger.warning(f"Hook '{hook}' failed (exit {result.exit_code}): {result.error_text()}")
        return result
