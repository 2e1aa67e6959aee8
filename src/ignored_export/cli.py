"""Command-line interface."""

import argparse
from dataclasses import replace
from pathlib import Path

from . import __version__
from .collector import CollectionPass, CollectionResult
from .config import ConfigError, ExportSettings, resolve_settings
from .export import ExportError, export_ignored
from .matcher import MatchKind, load_matcher
from .output import Output, set_output
from .session import DEFAULT_REFRESH_INTERVAL, ExtractSession


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (default sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error).
    """
    parser = argparse.ArgumentParser(
        prog="ignored-export",
        description="Collect the paths a .gitignore ignores and export them",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Global flags
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress informational output",
    )
    parser.add_argument(
        "--project-root", "-C",
        metavar="DIR",
        help="Project root (default: directory of .ignored-export.yaml, or cwd)",
    )
    parser.add_argument(
        "--rules",
        metavar="FILE",
        help="Ignore rule file (default: .gitignore in the project root)",
    )
    parser.add_argument(
        "--extra-root",
        action="append",
        metavar="NAME",
        help="Additional top-level directory to scan (repeatable)",
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("preview", help="List ignored directories and files")

    check_parser = subparsers.add_parser("check", help="Show which rule decides each path")
    check_parser.add_argument(
        "paths",
        nargs="+",
        help="Project-relative paths (a trailing / tests the path as a directory)",
    )

    export_parser = subparsers.add_parser("export", help="Copy ignored paths into a new folder")
    export_parser.add_argument(
        "--output-parent", "-o",
        metavar="DIR",
        help="Folder that receives the export (default: project root)",
    )
    export_parser.add_argument(
        "--name",
        help="Export folder name (made unique if it exists)",
    )
    export_parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Preview changes without executing",
    )

    watch_parser = subparsers.add_parser("watch", help="Re-print the preview whenever it changes")
    watch_parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_REFRESH_INTERVAL,
        help=f"Seconds between refreshes (default: {DEFAULT_REFRESH_INTERVAL})",
    )

    args = parser.parse_args(argv)

    # Set up output handler
    output = Output(no_color=args.no_color, quiet=args.quiet)
    set_output(output)

    if args.command is None:
        parser.print_help()
        return 0

    handlers = {
        "preview": lambda: cmd_preview(args, output),
        "check": lambda: cmd_check(args, output),
        "export": lambda: cmd_export(args, output),
        "watch": lambda: cmd_watch(args, output),
    }

    handler = handlers.get(args.command)
    if handler:
        return handler()

    return 0


def _get_settings(args, output: Output) -> ExportSettings | None:
    """Resolve settings and apply global flag overrides.

    Args:
        args: Parsed arguments
        output: Output handler

    Returns:
        ExportSettings or None on error
    """
    start_dir = Path(args.project_root) if args.project_root else None
    if start_dir is not None and not start_dir.is_dir():
        output.error(f"Project root not found: {start_dir}")
        return None

    try:
        settings = resolve_settings(start_dir)
    except ConfigError as e:
        output.error(str(e))
        return None

    if args.rules:
        settings = replace(settings, rules_file=Path(args.rules).resolve())
    if args.extra_root:
        settings = replace(settings, extra_roots=settings.extra_roots + tuple(args.extra_root))

    return settings


def _print_preview(result: CollectionResult, output: Output) -> None:
    output.header(f"Ignored paths: {len(result.dirs)} directories, {len(result.files)} files")
    if result.is_empty:
        output.info("(No ignored paths)")
        return
    for line in result.preview_lines():
        output.entry(line)


def _refresh_or_error(settings: ExportSettings, output: Output) -> CollectionResult | None:
    """Run one pass, reporting a missing rule file as an error."""
    session = ExtractSession(settings, output=output)
    result = session.refresh(force=True)
    if session.matcher is None:
        output.error(f"Rule file not found: {settings.rules_file}")
        return None
    return result


def cmd_preview(args, output: Output) -> int:
    """List ignored paths, directories first."""
    settings = _get_settings(args, output)
    if settings is None:
        return 1

    result = _refresh_or_error(settings, output)
    if result is None:
        return 1

    _print_preview(result, output)
    return 0


def cmd_check(args, output: Output) -> int:
    """Explain the decision for each given path."""
    settings = _get_settings(args, output)
    if settings is None:
        return 1

    matcher = load_matcher(settings.rules_file, output=output)
    if matcher is None:
        output.error(f"Rule file not found: {settings.rules_file}")
        return 1

    collection = CollectionPass(matcher, settings.project_root, settings.sidecar_suffix)

    for path in args.paths:
        if path.endswith("/"):
            ignored = collection.is_directory_ignored(path)
            status = "ignored" if ignored else "not ignored"
            print(f"{output.path(path)}\t{status} (directory)", file=output.stream)
            continue

        rule = matcher.match(path)
        kind = matcher.last_match_kind(path)
        if kind == MatchKind.NONE:
            print(f"{output.path(path)}\tnot matched", file=output.stream)
            continue

        status = "ignored" if kind == MatchKind.IGNORE else "negated"
        print(
            f"{output.path(path)}\t{status}\t{rule.source} (line {rule.order + 1})",
            file=output.stream,
        )

    return 0


def cmd_export(args, output: Output) -> int:
    """Collect ignored paths and copy them into a new folder."""
    settings = _get_settings(args, output)
    if settings is None:
        return 1

    output_parent = Path(args.output_parent).resolve() if args.output_parent else settings.export_parent
    folder_name = args.name or settings.output_name

    result = _refresh_or_error(settings, output)
    if result is None:
        return 1

    try:
        summary = export_ignored(
            result,
            settings.project_root,
            output_parent,
            folder_name,
            dry_run=args.dry_run,
            output=output,
        )
    except ExportError as e:
        output.error(str(e))
        return 1

    if args.dry_run:
        output.info(f"{output.dry_run_prefix()} {summary.dirs_created} directories, {summary.files_copied} files")
        return 0

    output.success(f"Exported to {summary.destination}")
    output.info(f"Created directories: {summary.dirs_created}")
    output.info(f"Copied files: {summary.files_copied}")
    return 0


def cmd_watch(args, output: Output) -> int:
    """Keep the preview current until interrupted."""
    settings = _get_settings(args, output)
    if settings is None:
        return 1

    if args.interval <= 0:
        output.error("Interval must be positive")
        return 1

    if not settings.rules_file.is_file():
        output.warning(f"Rule file not found yet: {settings.rules_file}")

    session = ExtractSession(settings, output=output)
    try:
        session.watch(lambda result: _print_preview(result, output), interval=args.interval)
    except KeyboardInterrupt:
        print(file=output.stream)  # Newline after ^C

    return 0
