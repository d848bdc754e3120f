"""omado command-line interface."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .logging_setup import setup_logging
from .models import Task, data_dir, default_task_path
from .storage import append_task, format_line, read_file

logger = logging.getLogger(__name__)

EXAMPLES = """\
examples:
  omado add "Buy groceries"
  omado add "work: Fix parser bug"
  omado add "personal: Call mom"
"""


def print_list(tasks: List[Task], show_done: bool) -> None:
    """Print tasks in file format, numbered."""
    for i, t in enumerate(tasks, start=1):
        if not show_done and t.done:
            continue
        print(f"{i:>3}. {format_line(t)}")


def cmd_add(args: argparse.Namespace) -> None:
    if not args.text.strip():
        sys.exit("Task text is empty.")
    try:
        task = append_task(args.file, args.text)
    except OSError as e:
        logger.error("add failed: %s", e)
        sys.exit(f"Error: {e}")
    if task.project is not None:
        print(f"Added task to project '{task.project}': {task.text}")
    else:
        print(f"Added task: {task.text}")


def cmd_list(args: argparse.Namespace) -> None:
    tasks = read_file(args.file)
    if not tasks:
        print("(no tasks yet)")
        return
    print_list(tasks, show_done=args.all)


def cmd_path(args: argparse.Namespace) -> None:
    print(os.path.abspath(args.file))


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="omado",
        description="Simple todo management. Run without a command to open the list.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "-f",
        "--file",
        default=None,
        help="Path to tasks file (default: $XDG_DATA_HOME/omado/todo.txt)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log to stderr")
    sub = p.add_subparsers(dest="cmd", metavar="command")

    s_add = sub.add_parser("add", help="Append a new task ('project: text' sets a project)")
    s_add.add_argument("text", help="Task text, quoted if it has spaces")
    s_add.set_defaults(func=cmd_add)

    s_list = sub.add_parser("list", help="Show tasks (default hides [x])")
    s_list.add_argument("--all", action="store_true", help="Show completed tasks too")
    s_list.set_defaults(func=cmd_list)

    s_path = sub.add_parser("path", help="Show the absolute path to the tasks file")
    s_path.set_defaults(func=cmd_path)

    s_help = sub.add_parser("help", help="Show this help")
    s_help.set_defaults(func=lambda args: p.print_help())

    return p


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point. Launches the TUI if no command is given."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(data_dir(), verbose=args.verbose)
    if args.file is None:
        args.file = default_task_path()

    if args.cmd is None:
        from .tui import main as tui_main

        tui_main(args.file)
    else:
        args.func(args)


if __name__ == "__main__":
    main()
