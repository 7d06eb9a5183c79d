"""Process execution for git-wt.

Every external process goes through a CommandRunner. A runner never raises
because a process exited non-zero; the exit code is the only failure signal
callers look at. Callers classify failed results with `classify_failure` and
branch on the resulting FailureKind rather than on raw stderr text.
"""

import os
import subprocess
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional, Sequence

import git

from git_wt.logging_config import get_logger

logger = get_logger(__name__)


class FailureKind(Enum):
    """Why a command failed."""
    NONE = "none"
    NOT_FOUND = "not-found"  # The thing asked about does not exist
    NETWORK = "network"  # A remote could not be reached
    PROCESS = "process"  # The process could not be started at all
    COMMAND = "command"  # Any other non-zero exit


NETWORK_ERROR_PATTERNS = (
    "could not resolve host",
    "connection refused",
    "network is unreachable",
    "timeout",
    "connection timed out",
    "no route to host",
    "temporary failure in name resolution",
    "could not connect to",
    "failed to connect",
    "could not read from remote repository",
    "repository not found",
)

NOT_FOUND_PATTERNS = (
    "not a valid ref",
    "unknown revision",
    "not a valid object name",
    "no such ref",
    "no upstream configured",
    "does not exist",
)


@dataclass(frozen=True)
class CommandResult:
    """Output of one finished process."""

    stdout: str
    stderr: str
    exit_code: int
    failure_kind: FailureKind = FailureKind.NONE

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def error_text(self) -> str:
        """Best human-readable description of a failure."""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.exit_code}"

    def classified(self) -> "CommandResult":
        """Return a copy with failure_kind filled in from exit code and stderr."""
        return replace(self, failure_kind=classify_failure(self.exit_code, self.stderr))


def classify_failure(exit_code: int, stderr: str) -> FailureKind:
    """Map an exit code and stderr text to a FailureKind."""
    if exit_code == 0:
        return FailureKind.NONE
    if exit_code < 0:
        return FailureKind.PROCESS

    lowered = stderr.lower()
    if any(pattern in lowered for pattern in NETWORK_ERROR_PATTERNS):
        return FailureKind.NETWORK
    if any(pattern in lowered for pattern in NOT_FOUND_PATTERNS):
        return FailureKind.NOT_FOUND
    return FailureKind.COMMAND


class CommandRunner:
    """Interface for running external processes."""

    def run(
        self,
        executable: str,
        args: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """Run a process to completion and capture its output.

        Args:
            executable: Program to run
            args: Arguments passed to the program
            cwd: Working directory (defaults to the process working directory)
            env: Extra environment variables layered over os.environ

        Returns:
            CommandResult; never raises on a non-zero exit
        """
        raise NotImplementedError

    def run_attached(
        self,
        executable: str,
        args: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> int:
        """Run a process with inherited stdio and return its exit code."""
        raise NotImplementedError


class GitPythonCommandRunner(CommandRunner):
    """CommandRunner backed by GitPython's process execution."""

    def run(self, executable, args, cwd=None, env=None) -> CommandResult:
        command = [executable, *args]
        logger.debug(f"Running {' '.join(command)} (cwd={cwd or os.getcwd()})")
        try:
            status, stdout, stderr = git.Git(cwd).execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                env=dict(env) if env else None,
            )
        except (git.exc.GitCommandNotFound, OSError) as e:
            logger.debug(f"Could not start {executable}: {e}")
            return CommandResult(stdout="", stderr=f"Process error: {e}", exit_code=-1)

        if status != 0:
            logger.debug(f"{executable} exited with {status}: {stderr.strip()}")
        return CommandResult(stdout=stdout, stderr=stderr, exit_code=status)

    def run_attached(self, executable, args, cwd=None, env=None) -> int:
        command = [executable, *args]
        logger.debug(f"Running attached {' '.join(command)} (cwd={cwd or os.getcwd()})")
        full_env = {**os.environ, **env} if env else None
        try:
            completed = subprocess.run(command, cwd=cwd, env=full_env)
        except OSError as e:
            logger.error(f"Could not start {executable}: {e}")
            return 127
        return completed.returncode
