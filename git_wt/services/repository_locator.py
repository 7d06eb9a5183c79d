"""Repository detection for git-wt."""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

from git_wt.constants import BARE_DIR_NAME, GIT_DIR_NAME
from git_wt.exceptions import InvalidRepositoryError, NotARepositoryError
from git_wt.models.repository import LayoutKind, RepositoryContext
from git_wt.logging_config import get_logger

logger = get_logger(__name__)

GITDIR_PATTERN = re.compile(r"^gitdir:\s*(.+)$")


class RepositoryLocator:
    """Finds the repository enclosing a directory.

    At each level, walking upward, the checks run in a fixed order:

    1. a `.bare` directory (bare store, worktrees live next to it)
    2. a `.git` file containing `gitdir: <path>` (linked worktree)
    3. a `.git` directory (standard checkout)

    The order lets one root hold the bare store once while every sibling
    worktree carries only a link file.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def locate(self, start_dir: Optional[Union[str, Path]] = None) -> RepositoryContext:
        """Walk up from `start_dir` (default: cwd) to the enclosing repository.

        Raises:
            NotARepositoryError: If the filesystem root is reached without a match
        """
        start = Path(start_dir if start_dir is not None else os.getcwd()).resolve()
        self.log.debug(f"Starting repository detection from: {start}")

        current = start
        visited = set()
        while current not in visited:
            visited.add(current)
            context = self._check_directory(current)
            if context is not None:
                return context

            parent = current.parent
            if parent == current:
                break
            current = parent

        self.log.debug(f"No repository found above {start}")
        raise NotARepositoryError(str(start))

    def _check_directory(self, directory: Path) -> Optional[RepositoryContext]:
        self.log.debug(f"Checking directory: {directory}")

        bare_dir = directory / BARE_DIR_NAME
        if bare_dir.is_dir():
            self.log.debug(f"Found bare repository at: {bare_dir}")
            return RepositoryContext(
                root_dir=directory,
                metadata_dir=bare_dir,
                layout_kind=LayoutKind.BARE,
                bare_dir=bare_dir,
            )

        git_path = directory / GIT_DIR_NAME
        if git_path.is_file():
            gitdir = self._read_gitdir(git_path)
            if gitdir is not None:
                metadata_dir = Path(os.path.normpath(directory / gitdir))
                if metadata_dir.name == BARE_DIR_NAME:
                    self.log.debug(f"Found gitfile pointing to bare repository: {metadata_dir}")
                    return RepositoryContext(
                        root_dir=directory,
                        metadata_dir=metadata_dir,
                        layout_kind=LayoutKind.LINKED_FILE,
                        bare_dir=metadata_dir,
                    )

                self.log.debug(f"Found gitfile pointing to: {metadata_dir}")
                return RepositoryContext(
                    root_dir=directory,
                    metadata_dir=metadata_dir,
                    layout_kind=LayoutKind.LINKED_FILE,
                )

        if git_path.is_dir():
            self.log.debug(f"Found standard git repository at: {git_path}")
            return RepositoryContext(
                root_dir=directory,
                metadata_dir=git_path,
                layout_kind=LayoutKind.STANDARD,
            )

        return None

    def _read_gitdir(self, git_file: Path) -> Optional[str]:
        """Return the path from a `gitdir: <path>` link file, if it is one."""
        try:
            content = git_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            self.log.debug(f"Could not read {git_file}: {e}")
            return None

        match = GITDIR_PATTERN.match(content)
        if not match:
            self.log.debug(f"{git_file} is not a gitdir link file")
            return None
        return match.group(1).strip()

    def validate(self, context: RepositoryContext) -> None:
        """Check that a located repository is usable.

        Raises:
            InvalidRepositoryError: If the metadata directory is missing, or a
                bare store has no config file
        """
        self.log.debug(f"Validating repository: {context.metadata_dir}")

        if not context.metadata_dir.exists():
            message = f"Git directory not found: {context.metadata_dir}"
            self.log.debug(message)
            raise InvalidRepositoryError(message)

        if context.layout_kind is LayoutKind.BARE:
            config_file = (context.bare_dir or context.metadata_dir) / "config"
            if not config_file.exists():
                message = f"Invalid bare repository: missing config file at {config_file}"
                self.log.debug(message)
                raise InvalidRepositoryError(message)

        self.log.debug("Repository validation successful")
