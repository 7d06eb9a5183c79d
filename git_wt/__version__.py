"""Version information for git-wt."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("git-wt")
except PackageNotFoundError:
    # Running from a source checkout without an installed distribution
    __version__ = "0.0.0+unknown"
