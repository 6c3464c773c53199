"""
Command-line interface for gkb.

Provides argument parsing and runs the kernel build workflow.
"""

import sys
import argparse
from pathlib import Path
from typing import Optional

from . import __version__
from .builder import KernelBuilder
from .config import DEFAULT_CONFIG_PATH, GKBConfig, find_config_file
from .errors import BuilderError
from .privileges import escalate_if_needed
from .prompts import assume_yes, confirm, select_version
from .reporter import Reporter, OutputLevel
from .scanner import SOURCE_ROOT, scan_versions, sort_versions


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="gkb",
        description="Build and install a Gentoo kernel from /usr/src",
        epilog=(
            "Exit codes: 0 success, 1 settings error or no sources, "
            "2 privileges, 3 .config missing, 4 linking, 5 build, 6 prompt"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        help=f"Settings file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--source-root",
        metavar="PATH",
        default=SOURCE_ROOT,
        help=f"Directory holding the kernel sources (default: {SOURCE_ROOT})",
    )

    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Install modules and generate the initramfs without asking",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    return parser


def _setup_reporter(args) -> Reporter:
    """
    Set up reporter based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Reporter: Configured reporter instance
    """
    if args.quiet:
        output_level = OutputLevel.QUIET
    elif args.verbose:
        output_level = OutputLevel.VERBOSE
    else:
        output_level = OutputLevel.NORMAL

    return Reporter(output_level)


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        int: Exit code:
            0 = build completed
            1 = settings error, or no kernel sources found
            2 = privilege escalation failed
            3 = kernel .config missing
            4 = symlink could not be updated
            5 = build stage failed
            6 = prompt failed
    """
    parser = create_parser()

    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    args = parser.parse_args(argv)

    if args.quiet and args.verbose:
        parser.error("--quiet and --verbose cannot be used together")

    try:
        reporter = _setup_reporter(args)

        config_path = find_config_file(Path(args.config) if args.config else None)
        config = GKBConfig.load(config_path)

        versions = sort_versions(scan_versions(args.source_root))

        if not versions:
            print(f"Error: No kernel sources found in {args.source_root}", file=sys.stderr)
            return 1

        builder = KernelBuilder(
            config,
            versions,
            select=select_version,
            confirm=assume_yes if args.yes else confirm,
            reporter=reporter,
            root=args.source_root,
        )

        # Root may not see the user's HOME, so pass the settings file explicitly
        escalate_if_needed(argv + ["--config", str(config_path.resolve())])

        if not args.quiet:
            print("GKB v{}".format(__version__))
        reporter.print_versions(versions, args.source_root)

        builder.build()
        return 0

    except BuilderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
