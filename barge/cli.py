# SPDX-License-Identifier: MIT
"""Command-line interface for barge."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from barge.core.descriptor import DESCRIPTOR_FILE
from barge.core.errors import BargeError, ProjectNotFoundError
from barge.core.project import Project
from barge.core.target import BuildTarget
from barge.output import ColorFormatter, OutputConfig

# Set up logging
logger = logging.getLogger("barge")


def setup_logging(
    verbose: bool = False, debug: bool = False, output: OutputConfig | None = None
) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    handler = logging.StreamHandler()
    if output is not None and output.color:
        handler.setFormatter(ColorFormatter(fmt))
    else:
        handler.setFormatter(logging.Formatter(fmt))
    logging.basicConfig(level=level, handlers=[handler])


def find_project_root(start: Path | None = None) -> Path:
    """Find the closest directory containing barge.json.

    Args:
        start: Directory to start searching from (default: current dir).

    Returns:
        The project root directory.

    Raises:
        ProjectNotFoundError: If no parent directory holds a barge.json.
    """
    if start is None:
        start = Path.cwd()
    start = start.absolute()

    for directory in (start, *start.parents):
        if (directory / DESCRIPTOR_FILE).is_file():
            return directory

    raise ProjectNotFoundError(
        f"could not find {DESCRIPTOR_FILE} in {start} or any parent directory"
    )


def split_program_args(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first '--' into barge and program arguments."""
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1 :]
    return argv, []


def load_project(args: argparse.Namespace) -> Project:
    root = find_project_root(args.directory)
    logger.debug("Project root: %s", root)
    return Project.load(root, output=args.output)


def cmd_build(args: argparse.Namespace) -> int:
    """Build the project."""
    project = load_project(args)
    project.build(BuildTarget.parse(args.target))
    return 0


def cmd_rebuild(args: argparse.Namespace) -> int:
    """Remove the target's artifacts and build again."""
    project = load_project(args)
    project.rebuild(BuildTarget.parse(args.target))
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Build and run the executable."""
    project = load_project(args)
    return project.run(BuildTarget.parse(args.target), args.program_args)


def cmd_debug(args: argparse.Namespace) -> int:
    """Build and run the executable in the debugger."""
    project = load_project(args)
    return project.debug(BuildTarget.parse(args.target), args.program_args)


def cmd_analyze(args: argparse.Namespace) -> int:
    """Run static analysis on the C/C++ sources."""
    project = load_project(args)
    project.analyze()
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    """Remove every build artifact."""
    project = load_project(args)
    project.clean()
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Print the synthesized build plan."""
    project = load_project(args)
    sys.stdout.write(project.plan(BuildTarget.parse(args.target)).render())
    return 0


def add_common_args(parser: argparse.ArgumentParser, subcommand: bool = False) -> None:
    """Add arguments common to all commands.

    Subcommands suppress the defaults so options given before the
    subcommand name are not reset.
    """
    suppress = {"default": argparse.SUPPRESS} if subcommand else {}
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output", **suppress
    )
    parser.add_argument("--debug", action="store_true", help="Debug output", **suppress)
    parser.add_argument(
        "-C",
        "--directory",
        type=Path,
        default=argparse.SUPPRESS if subcommand else None,
        help="Start searching for barge.json here instead of the current directory",
    )


def add_target_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "target",
        nargs="?",
        default=BuildTarget.DEBUG.value,
        help="Build target: debug or release (default: debug)",
    )


def build_parser() -> argparse.ArgumentParser:
    from barge import __version__

    parser = argparse.ArgumentParser(
        prog="barge",
        description="A build orchestrator for native C/C++/Fortran/COBOL projects.",
        epilog="Run 'barge <command> --help' for command-specific help.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    add_common_args(parser)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    commands = [
        ("build", "Build the project", cmd_build, True),
        ("rebuild", "Remove build artifacts, then build", cmd_rebuild, True),
        ("run", "Build and run the executable (arguments after --)", cmd_run, True),
        ("debug", "Build and debug the executable (arguments after --)", cmd_debug, True),
        ("analyze", "Run static analysis", cmd_analyze, False),
        ("clean", "Remove all build artifacts", cmd_clean, False),
        ("plan", "Print the generated Makefile", cmd_plan, True),
    ]
    for name, help_text, func, takes_target in commands:
        sub = subparsers.add_parser(name, help=help_text)
        add_common_args(sub, subcommand=True)
        if takes_target:
            add_target_arg(sub)
        sub.set_defaults(func=func)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the barge CLI."""
    if argv is None:
        argv = sys.argv[1:]
    argv, program_args = split_program_args(argv)

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    args.program_args = program_args
    args.output = OutputConfig.from_environment()
    setup_logging(args.verbose, args.debug, args.output)

    try:
        result: int = args.func(args)
    except BargeError as e:
        logger.error("%s", e.message)
        return 1
    except (OSError, UnicodeError) as e:
        logger.error("%s", e)
        return 1
    return result


if __name__ == "__main__":
    sys.exit(main())
