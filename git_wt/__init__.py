"""
git-wt - Branch-per-directory worktree management for Git
"""

from .__version__ import __version__
from .core import WorktreeKeeper

__all__ = ["WorktreeKeeper", "__version__"]
