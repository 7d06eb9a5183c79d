"""Shared constants for git-wt."""

from dataclasses import dataclass
from typing import List


# Repository layout markers
BARE_DIR_NAME = ".bare"
GIT_DIR_NAME = ".git"

# Ref namespaces
LOCAL_BRANCH_PREFIX = "refs/heads/"
REMOTE_REFS_PREFIX = "refs/remotes/"

# Per-repository settings file, stored at the repository root
CONFIG_FILE_NAME = ".wtconfig.json"

SHORT_HASH_LENGTH = 7


class ExitCode:
    """Process exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_ARGUMENTS = 2
    GIT_REPO_NOT_FOUND = 3
    NETWORK_ERROR = 4
    FILESYSTEM_ERROR = 5


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("current", "", 1),
    ColumnDefinition("name", "Name", 20),
    ColumnDefinition("branch", "Branch", 25),
    ColumnDefinition("path", "Path"),
]


SYMBOL_CURRENT_WORKTREE = "*"

# Status markers appended to the path column
MARKER_BARE = "[bare]"
MARKER_LOCKED = "[locked]"
MARKER_DETACHED = "[detached]"
MARKER_MISSING = "[missing]"


# Rich styles for worktree rows
CLI_COLORS = {
    "current": "green",
    "bare": "cyan",
    "detached": "yellow",
    "missing": "red",
}
