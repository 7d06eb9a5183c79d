"""Repository context model."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class LayoutKind(Enum):
    """How the repository metadata is laid out on disk."""
    BARE = "bare"  # <root>/.bare holds the metadata, worktrees are siblings
    LINKED_FILE = "linked-file"  # <root>/.git is a "gitdir: <path>" file
    STANDARD = "standard"  # <root>/.git is the metadata directory


@dataclass(frozen=True)
class RepositoryContext:
    """The one repository that governs a command invocation."""

    root_dir: Path
    metadata_dir: Path
    layout_kind: LayoutKind
    bare_dir: Optional[Path] = None  # Set when the metadata lives in a bare store

    def __str__(self) -> str:
        return f"{self.root_dir} ({self.layout_kind.value}, metadata at {self.metadata_dir})"
