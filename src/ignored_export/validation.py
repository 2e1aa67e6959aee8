"""Name validation for ignored-export."""

import os
from pathlib import PureWindowsPath
from typing import Iterable

from .output import Output, get_output


class ValidationError(Exception):
    """Raised when name validation fails."""
    pass


def validate_root_name(name: str) -> None:
    """Validate a top-level directory name for safety.

    Args:
        name: Directory name relative to the project root

    Raises:
        ValidationError: If the name escapes the project root
    """
    parts = name.replace("\\", "/").split("/")
    if ".." in parts:
        raise ValidationError(f"Root name cannot contain '..': {name}")

    if os.path.isabs(name) or PureWindowsPath(name).drive:
        raise ValidationError(f"Root name must be relative: {name}")


def validate_output_name(name: str) -> None:
    """Validate the export folder name.

    Args:
        name: Folder name created under the output parent

    Raises:
        ValidationError: If the name is empty or not a single path segment
    """
    if not name or not name.strip():
        raise ValidationError("Output folder name cannot be empty")

    if "/" in name or "\\" in name:
        raise ValidationError(f"Output folder name must be a single segment: {name}")

    if name in (".", ".."):
        raise ValidationError(f"Invalid output folder name: {name}")


def normalize_extra_roots(
    names: Iterable[str | None],
    primary_root: str,
    output: Output | None = None,
) -> list[str]:
    """Clean up the list of extra top-level directories.

    Surrounding whitespace and slashes are trimmed, empty entries and
    duplicates are dropped, and so is any entry naming the primary root
    (compared case-insensitively). Unsafe names are reported and skipped.

    Args:
        names: Raw directory names
        primary_root: Name of the primary root
        output: Output handler for warnings

    Returns:
        Normalized names in their original order
    """
    if output is None:
        output = get_output()

    result = []
    for raw in names:
        if raw is None:
            continue
        name = raw.strip().strip("/\\").replace("\\", "/")
        if not name:
            continue
        if name.lower() == primary_root.lower():
            continue

        try:
            validate_root_name(name)
        except ValidationError as e:
            output.warning(str(e))
            continue

        if name not in result:
            result.append(name)

    return result
