"""Command-line entry point for git-wt"""

import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from git_wt.cli.args import build_parser
from git_wt.config import ConfigStore
from git_wt.constants import ExitCode
from git_wt.core import WorktreeKeeper
from git_wt.exceptions import GitWtError
from git_wt.formatters import (
    build_worktree_table,
    format_config_value,
    format_create_result,
    format_settings,
    format_upstream_result,
)
from git_wt.services.git.upstream import UpstreamStatus
from git_wt.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def cmd_list(keeper: WorktreeKeeper, args) -> int:
    records = keeper.list_worktrees()
    missing = keeper.missing_worktrees(records)
    console.print(build_worktree_table(records, keeper.context, missing))
    return ExitCode.SUCCESS


def cmd_create(keeper: WorktreeKeeper, args) -> int:
    result = keeper.create_worktree(args.branch, args.commit_ish)
    console.print(format_create_result(result), soft_wrap=True, markup=False)
    if result.upstream is not None and result.upstream.status is UpstreamStatus.SET:
        console.print(format_upstream_result(result.upstream), soft_wrap=True, markup=False)
    return ExitCode.SUCCESS


def cmd_remove(keeper: WorktreeKeeper, args) -> int:
    if keeper.settings.confirm_before_delete and not args.yes:
        error_console.print(
            f"[red]Error: confirmDelete is enabled; re-run with --yes to remove '{escape(args.name)}'[/red]"
        )
        return ExitCode.INVALID_ARGUMENTS

    record = keeper.remove_worktree(args.name, force=args.force)
    console.print(f"Removed worktree at {record.path}", soft_wrap=True, markup=False)
    return ExitCode.SUCCESS


def cmd_prune(keeper: WorktreeKeeper, args) -> int:
    keeper.prune_worktrees()
    console.print("Pruned stale worktree records")
    return ExitCode.SUCCESS


def cmd_switch(keeper: WorktreeKeeper, args) -> int:
    # Plain output so shell wrappers can `cd "$(wt switch <branch>)"`
    console.print(keeper.worktree_dir(args.branch), soft_wrap=True, markup=False)
    return ExitCode.SUCCESS


def cmd_run(keeper: WorktreeKeeper, args) -> int:
    command = list(args.cmd)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        error_console.print("[red]Error: no command given[/red]")
        return ExitCode.INVALID_ARGUMENTS
    return keeper.run_in_worktree(args.branch, command)


def cmd_config(keeper: WorktreeKeeper, args) -> int:
    action = args.config_command or "show"
    if action == "show":
        console.print(format_settings(keeper.settings), markup=False)
        path = keeper.config_store.config_path(keeper.context)
        if not keeper.config_store.exists(keeper.context):
            console.print(f"[dim](no {path.name}; showing detected defaults)[/dim]")
    elif action == "get":
        console.print(format_config_value(keeper.get_config_value(args.key)), markup=False)
    elif action == "set":
        settings = keeper.set_config_value(args.key, args.value)
        value = format_config_value(ConfigStore.get_value(settings, args.key))
        console.print(f"Set {args.key} to {value}", markup=False)
    return ExitCode.SUCCESS


def cmd_init(args) -> int:
    keeper = WorktreeKeeper.initialize(args.url, args.name, parent_dir=os.getcwd())
    console.print(f"Repository initialized in {keeper.context.root_dir}", soft_wrap=True, markup=False)
    return ExitCode.SUCCESS


COMMANDS = {
    "list": cmd_list,
    "ls": cmd_list,
    "create": cmd_create,
    "remove": cmd_remove,
    "rm": cmd_remove,
    "prune": cmd_prune,
    "switch": cmd_switch,
    "sw": cmd_switch,
    "print-dir": cmd_switch,
    "run": cmd_run,
    "config": cmd_config,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = build_parser()
    try:
        parsed_args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits for --help, --version and usage errors
        return e.code if isinstance(e.code, int) else ExitCode.INVALID_ARGUMENTS

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if not parsed_args.command:
        parser.print_help()
        return ExitCode.INVALID_ARGUMENTS

    try:
        if parsed_args.command == "init":
            return cmd_init(parsed_args)

        keeper = WorktreeKeeper(os.getcwd())
        return COMMANDS[parsed_args.command](keeper, parsed_args)
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return ExitCode.GENERAL_ERROR
    except GitWtError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        error_console.print(f"[red]Error: {escape(str(e))}[/red]", soft_wrap=True)
        return e.exit_code
    except Exception as e:
        error_console.print(f"[red]Error: {escape(str(e))}[/red]", soft_wrap=True)
        if parsed_args.debug:
            error_console.print_exception()
        return ExitCode.GENERAL_ERROR


if __name__ == "__main__":
    sys.exit(main())
