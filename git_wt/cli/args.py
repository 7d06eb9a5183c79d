"""Command-line argument parsing for git-wt."""

import argparse
from git_wt.__version__ import __version__
from git_wt.config import CONFIG_KEYS


def build_parser() -> argparse.ArgumentParser:
    """Build the `wt` argument parser."""
    parser = argparse.ArgumentParser(
        prog="wt",
        description="Branch-per-directory worktree management for Git",
        epilog="Run 'wt <command> --help' for command-specific options.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-wt {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    subparsers.add_parser("list", aliases=["ls"], help="List worktrees")

    create = subparsers.add_parser("create", help="Create a worktree for a branch")
    create.add_argument("branch", help="Branch name (local, remote or new)")
    create.add_argument(
        "commit_ish",
        nargs="?",
        help="Start point for a new branch (ignored for existing branches)",
    )

    remove = subparsers.add_parser("remove", aliases=["rm"], help="Remove a worktree")
    remove.add_argument("name", help="Branch name, directory name or path of the worktree")
    remove.add_argument(
        "--force", action="store_true", help="Remove even with uncommitted changes"
    )
    remove.add_argument(
        "-y", "--yes", action="store_true", help="Confirm removal when confirmDelete is set"
    )

    subparsers.add_parser("prune", help="Prune records of worktrees whose directories are gone")

    switch = subparsers.add_parser(
        "switch",
        aliases=["sw", "print-dir"],
        help="Print the directory of a branch's worktree",
    )
    switch.add_argument("branch", help="Branch name")

    run = subparsers.add_parser(
        "run", help="Run a command in a branch's worktree, creating it if needed"
    )
    run.add_argument("branch", help="Branch name")
    run.add_argument("cmd", nargs=argparse.REMAINDER, metavar="command", help="Command to run")

    config = subparsers.add_parser("config", help="Show or change repository settings")
    config_sub = config.add_subparsers(dest="config_command", metavar="<action>")
    config_sub.add_parser("show", help="Show all settings")
    config_get = config_sub.add_parser("get", help="Show one setting")
    config_get.add_argument("key", choices=list(CONFIG_KEYS), help="Setting key")
    config_set = config_sub.add_parser("set", help="Change one setting")
    config_set.add_argument("key", choices=list(CONFIG_KEYS), help="Setting key")
    config_set.add_argument("value", help="New value ('null' clears a hook)")

    init = subparsers.add_parser("init", help="Clone a repository into the bare worktree layout")
    init.add_argument("url", help="Repository URL (HTTP(S), SSH or local path)")
    init.add_argument("name", nargs="?", help="Directory name (default: derived from the URL)")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
