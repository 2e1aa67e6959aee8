"""Filesystem enumeration and the primary-root path index."""

import os
from pathlib import Path
from typing import Callable, Iterable, Iterator

# Provides every known path under the primary root, project-relative
PathIndex = Callable[[], Iterable[str]]


def is_special_name(name: str) -> bool:
    """Check if a name is hidden from the path index by convention.

    Args:
        name: Final path segment

    Returns:
        True for dot-prefixed names and names containing '~'
    """
    return name.startswith(".") or "~" in name


def make_project_relative(path: Path | str, project_root: Path) -> str:
    """Convert a path to a project-relative, forward-slash string.

    Paths outside the project root are returned unchanged apart from
    separator normalization.

    Args:
        path: Absolute path
        project_root: Project root directory

    Returns:
        Project-relative path
    """
    p = os.fspath(path).replace("\\", "/")
    root = os.fspath(project_root).replace("\\", "/").rstrip("/")
    if p.startswith(root + "/"):
        return p[len(root) + 1:]
    return p


def walk_entries(
    root: Path,
    skip_dir: Callable[[str], bool] | None = None,
) -> Iterator[tuple[Path, bool]]:
    """Walk everything below root, depth first.

    Uses an explicit stack. Directories that cannot be listed are
    skipped silently and the walk continues with their siblings.
    Symlinked directories are reported as files and not descended into.

    Args:
        root: Directory to walk (not yielded itself)
        skip_dir: Predicate on a directory name; matching directories
            are neither yielded nor descended into

    Yields:
        Tuples of (path, is_dir)
    """
    stack = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            continue

        subdirs = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue
            if is_dir and skip_dir is not None and skip_dir(entry.name):
                continue
            path = Path(entry.path)
            yield path, is_dir
            if is_dir:
                subdirs.append(path)

        # Reversed so the first directory is visited first
        stack.extend(reversed(subdirs))


def scan_primary_root(
    project_root: Path,
    primary_root: str,
    sidecar_suffix: str,
) -> list[str]:
    """Default index over the primary root.

    Lists the primary root itself plus every file and directory below
    it, except hidden or '~' names (and everything below them) and
    sidecar files. Those are the entries the supplemental scan has to
    recover.

    Args:
        project_root: Project root directory
        primary_root: Primary root name
        sidecar_suffix: Sidecar metadata suffix

    Returns:
        Sorted project-relative paths
    """
    root = project_root / primary_root
    if not os.path.isdir(root):
        return []

    paths = [make_project_relative(root, project_root)]
    for path, is_dir in walk_entries(root, skip_dir=is_special_name):
        if not is_dir and (is_special_name(path.name) or path.name.endswith(sidecar_suffix)):
            continue
        paths.append(make_project_relative(path, project_root))

    return sorted(paths)


def static_index(paths: Iterable[str]) -> PathIndex:
    """Wrap a fixed list of paths as an index.

    Args:
        paths: Project-relative paths

    Returns:
        Index callable returning a copy of the paths
    """
    frozen = tuple(paths)

    def index() -> list[str]:
        return list(frozen)

    return index
