"""Git command execution bound to one repository."""

from pathlib import Path
from typing import Optional, Union

from git_wt.exceptions import GitOperationError
from git_wt.models.repository import RepositoryContext
from git_wt.services.command_runner import CommandResult, CommandRunner
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class GitCommands:
    """Runs git with the context's metadata directory as --git-dir."""

    def __init__(self, context: RepositoryContext, runner: CommandRunner, executable: str = "git"):
        """Initialize the git command wrapper.

        Args:
            context: Repository every command targets
            runner: CommandRunner used to start git
            executable: Name or path of the git binary
        """
        self.context = context
        self.runner = runner
        self.executable = executable

    def run(self, *args: str, cwd: Optional[Union[str, Path]] = None) -> CommandResult:
        """Run a git command and return its classified result."""
        result = self.runner.run(
            self.executable,
            ["--git-dir", str(self.context.metadata_dir), *args],
            cwd=str(cwd or self.context.root_dir),
        )
        return result.classified()

    def output(self, *args: str, branch: Optional[str] = None) -> str:
        """Run a git command and return stripped stdout.

        Raises:
            GitOperationError: If the command exits non-zero
        """
        result = self.run(*args)
        if not result.ok:
            raise GitOperationError(
                " ".join(args[:2]),
                branch,
                f"exit {result.exit_code}: {result.error_text()}",
            )
        return result.stdout.strip()
