"""Repository initialisation for `wt init`.

Sets up the bare layout: <name>/.bare holds a bare clone and <name>/.git is a
link file pointing at it, so worktrees can live next to each other under
<name>/.
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import urlparse

from git_wt.constants import BARE_DIR_NAME, ExitCode, GIT_DIR_NAME
from git_wt.exceptions import NetworkError, RepositoryInitError
from git_wt.models.repository import LayoutKind, RepositoryContext
from git_wt.services.command_runner import CommandResult, CommandRunner, FailureKind
from git_wt.logging_config import get_logger

logger = get_logger(__name__)

INVALID_NAME_CHARS = ("/", "\\", "@")


def parse_git_url(url: str) -> Tuple[str, str]:
    """Validate a repository URL and derive a directory name from it.

    Supports HTTP(S), SSH (user@host:path) and local paths.

    Returns:
        Tuple of (url, repository name)

    Raises:
        RepositoryInitError: If the URL is empty or no usable name can be derived
    """
    if not url or not url.strip():
        raise RepositoryInitError("Git repository URL is required", ExitCode.INVALID_ARGUMENTS)

    url = url.strip()
    if url.startswith(("http://", "https://")):
        path = urlparse(url).path
        parts = [part for part in path.split("/") if part]
        if not parts:
            raise RepositoryInitError(
                "Invalid repository URL: no repository path in URL", ExitCode.INVALID_ARGUMENTS
            )
        name = parts[-1]
    elif "@" in url and ":" in url:
        path = url.rsplit(":", 1)[-1].strip()
        if not path:
            raise RepositoryInitError("Invalid repository URL: invalid SSH URL format", ExitCode.INVALID_ARGUMENTS)
        name = os.path.basename(path.rstrip("/"))
    else:
        name = os.path.basename(url.rstrip("/"))

    if name.endswith(".git"):
        name = name[:-len(".git")]

    if not name or any(char in name for char in INVALID_NAME_CHARS):
        raise RepositoryInitError(
            "Invalid repository URL: could not extract repository name", ExitCode.INVALID_ARGUMENTS
        )
    return url, name


def validate_target_name(name: str) -> str:
    """Validate an explicit target directory name."""
    trimmed = name.strip()
    if not trimmed:
        raise RepositoryInitError("Repository name cannot be empty", ExitCode.INVALID_ARGUMENTS)
    if any(char in trimmed for char in INVALID_NAME_CHARS):
        raise RepositoryInitError(
            "Invalid repository name: contains invalid characters", ExitCode.INVALID_ARGUMENTS
        )
    return trimmed


class RepositoryInitializer:
    """Clones a repository into the bare layout."""

    def __init__(self, runner: CommandRunner, executable: str = "git"):
        self.runner = runner
        self.executable = executable

    def initialize(
        self,
        url: str,
        target_name: Optional[str] = None,
        parent_dir: Optional[Union[str, Path]] = None,
    ) -> RepositoryContext:
        """Clone `url` into <parent_dir>/<name> using the bare layout.

        Returns:
            RepositoryContext of the new repository

        Raises:
            RepositoryInitError: On invalid input or git failure
            NetworkError: If the remote could not be reached
        """
        url, default_name = parse_git_url(url)
        name = validate_target_name(target_name) if target_name is not None else default_name

        target_dir = Path(parent_dir or os.getcwd()).resolve() / name
        if target_dir.exists() and any(target_dir.iterdir()):
            raise RepositoryInitError(
                f"Target directory already exists and is not empty: {target_dir}",
                ExitCode.FILESYSTEM_ERROR,
            )

        bare_dir = target_dir / BARE_DIR_NAME
        git_file = target_dir / GIT_DIR_NAME

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepositoryInitError(f"Failed to create {target_dir}: {e}", ExitCode.FILESYSTEM_ERROR)

        logger.info(f"Cloning {url} as bare repository")
        self._git(["clone", "--bare", url, str(bare_dir)], cwd=str(target_dir))

        logger.info("Setting up .git file")
        try:
            git_file.write_text(f"gitdir: ./{BARE_DIR_NAME}\n", encoding="utf-8")
        except OSError as e:
            raise RepositoryInitError(f"Failed to create .git file: {e}", ExitCode.FILESYSTEM_ERROR)

        logger.info("Configuring remote for worktrees")
        self._git(
            ["--git-dir", str(bare_dir), "config", "remote.origin.fetch", "+refs/heads/*:refs/remotes/origin/*"],
            cwd=str(target_dir),
        )

        logger.info("Fetching all remote branches")
        self._git(["--git-dir", str(bare_dir), "fetch", "origin"], cwd=str(target_dir))

        logger.info(f"Repository initialized in {target_dir}")
        return RepositoryContext(
            root_dir=target_dir,
            metadata_dir=bare_dir,
            layout_kind=LayoutKind.BARE,
            bare_dir=bare_dir,
        )

    def _git(self, args, cwd: str) -> CommandResult:
        result = self.runner.run(self.executable, args, cwd=cwd).classified()
        if result.ok:
            return result

        if result.failure_kind is FailureKind.NETWORK:
            raise NetworkError(f"Network error while cloning repository: {result.error_text()}")
        raise RepositoryInitError(f"Git error: {result.error_text()}")
