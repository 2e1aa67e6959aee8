"""Export of collected paths into a fresh folder."""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from .collector import CollectionResult
from .output import Output, get_output
from .validation import ValidationError, validate_output_name


class ExportError(Exception):
    """Raised when export operations fail."""
    pass


@dataclass(frozen=True)
class ExportSummary:
    """Outcome of one export."""

    destination: Path
    dirs_created: int
    files_copied: int


def make_unique_folder(base: Path) -> Path:
    """Pick a folder path that does not exist yet.

    Appends " (1)", " (2)", ... to the name until it is free.

    Args:
        base: Preferred folder path

    Returns:
        base, or the first free numbered variant
    """
    if not base.exists():
        return base

    idx = 1
    while True:
        candidate = base.with_name(f"{base.name} ({idx})")
        if not candidate.exists():
            return candidate
        idx += 1


def export_ignored(
    result: CollectionResult,
    project_root: Path,
    output_parent: Path,
    folder_name: str,
    *,
    dry_run: bool = False,
    output: Output | None = None,
) -> ExportSummary:
    """Recreate the ignored directory skeleton and copy ignored files.

    Directories are created first so that empty ignored directories
    survive. Files that disappeared since collection are skipped. The
    source tree is only read.

    Args:
        result: Collected paths
        project_root: Project root the paths are relative to
        output_parent: Existing directory that receives the export folder
        folder_name: Name of the export folder
        dry_run: Preview changes without executing
        output: Output handler

    Returns:
        ExportSummary

    Raises:
        ExportError: If the target is invalid or copying fails
    """
    if output is None:
        output = get_output()

    try:
        validate_output_name(folder_name)
    except ValidationError as e:
        raise ExportError(str(e))

    if not output_parent.is_dir():
        raise ExportError(f"Output parent folder is invalid: {output_parent}")

    destination = make_unique_folder(output_parent / folder_name)

    if dry_run:
        existing = [rel for rel in result.files if os.path.isfile(project_root / rel)]
        output.info(f"{output.dry_run_prefix()} Would export to {output.path(str(destination))}")
        for rel_dir in result.dirs:
            output.info(f"{output.dry_run_prefix()} Would create {output.path(rel_dir + '/')}")
        for rel in existing:
            output.info(f"{output.dry_run_prefix()} Would copy {output.path(rel)}")
        return ExportSummary(destination, len(result.dirs), len(existing))

    dirs_created = 0
    files_copied = 0
    try:
        destination.mkdir(parents=True)

        for rel_dir in result.dirs:
            (destination / rel_dir).mkdir(parents=True, exist_ok=True)
            dirs_created += 1

        for rel in result.files:
            src = project_root / rel
            if not os.path.isfile(src):
                output.skipped(rel, "missing")
                continue

            dst = destination / rel
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
            files_copied += 1
            output.copied(rel)
    except OSError as e:
        raise ExportError(f"Export failed: {e}")

    return ExportSummary(destination, dirs_created, files_copied)
