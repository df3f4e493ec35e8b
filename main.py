"""
main.py

labellift - Mermaid cluster label post-processor

Moves subgraph (cluster) labels of a Mermaid SVG to the end of the document
so they render above edges, optionally adding a white backdrop:
- Extracts <foreignObject> and <g> elements carrying the cluster-label class
- Re-inserts them before </svg>, rewriting the file in place
- Leaves the file untouched when there is nothing to move

Usage:
    python main.py <svg-path>
    python main.py --backdrop --debug diagram.svg
    python main.py --print-settings

Dependencies:
    pip install platformdirs tomli-w
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from debug_trace import close_log, configure, report, trace, trace_exception
from labellift.errors import MalformedDocumentError, UsageError
from labellift.reorder import process_file
from settings import SettingsManager, get_settings

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MALFORMED = 2


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Move Mermaid cluster labels to the top layer of an SVG file.",
    )
    parser.add_argument("svg_path", nargs="?", metavar="svg-path", help="SVG file to rewrite in place")
    parser.add_argument("--backdrop", action="store_true", help="add a white backdrop style for moved labels")
    parser.add_argument("--dry-run", action="store_true", help="report what would move without writing")
    parser.add_argument("--debug", action="store_true", help="print timestamped trace lines to stderr")
    parser.add_argument("--settings", metavar="PATH", help="settings file to use instead of the user config")
    parser.add_argument("--print-settings", action="store_true", help="print the effective settings as TOML and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point.

    Returns:
        Process exit code: 0 on success (including nothing to move),
        1 for usage and file errors, 2 for a document without ``</svg>``.
    """
    prog = os.path.basename(sys.argv[0]) or "labellift"
    args = build_parser(prog).parse_args(argv)

    try:
        check_arguments(args, prog)
    except UsageError as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR

    manager = SettingsManager(settings_file=Path(args.settings)) if args.settings else get_settings()
    settings = manager.settings
    if args.backdrop:
        settings.backdrop.enabled = True

    configure(args.debug or settings.trace.enabled, settings.trace.log_file)
    try:
        trace(f"Settings from {manager.get_settings_path()}", "MAIN")
        if manager.load_error:
            report(f"ignoring invalid settings file {manager.load_error}")

        if args.print_settings:
            sys.stdout.write(manager.to_toml())
            return EXIT_OK

        result = process_file(args.svg_path, settings, dry_run=args.dry_run)

        if result.moved:
            report(f"moved {result.moved} cluster label blocks to top layer")
            if args.dry_run:
                report("dry run: file not written")
        else:
            report("no cluster labels found to move")
        return EXIT_OK
    except MalformedDocumentError as e:
        report(f"error: {e}")
        return EXIT_MALFORMED
    except (OSError, UnicodeDecodeError) as e:
        trace_exception("File access failed")
        report(f"error: {e}")
        return EXIT_ERROR
    finally:
        close_log()


def check_arguments(args: argparse.Namespace, prog: str) -> None:
    """Raise UsageError unless an SVG path was given (or only settings are printed)."""
    if not args.svg_path and not args.print_settings:
        raise UsageError(f"Usage: {prog} <svg-path>")


if __name__ == "__main__":
    sys.exit(main())
