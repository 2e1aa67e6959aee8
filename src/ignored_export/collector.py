"""Collection of ignored files and directories.

A collection pass classifies every entry under the configured roots
and then completes the result with ignored ancestor directories and
sidecar metadata files, so that an exporter can rebuild the directory
skeleton and copy the files without further matching.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .config import DEFAULT_SIDECAR_SUFFIX, ExportSettings
from .index import (
    PathIndex,
    is_special_name,
    make_project_relative,
    scan_primary_root,
    walk_entries,
)
from .matcher import IgnoreMatcher, MatchKind, normalize_path
from .output import Output, get_output
from .validation import normalize_extra_roots

# Appended to a directory path to test rules that only match its contents
PROBE_SEGMENT = "__probe__"


@dataclass(frozen=True)
class CollectionResult:
    """Final ignored paths of one pass, ordinal-sorted."""

    files: tuple[str, ...] = ()
    dirs: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.dirs

    def preview_lines(self) -> list[str]:
        """Directories first (with a trailing slash), then files."""
        return [d + "/" for d in self.dirs] + list(self.files)


def has_extension(rel: str) -> bool:
    """Check if the last segment has a dot that is not its last character."""
    name = rel.rstrip("/").rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return dot != -1 and dot != len(name) - 1


def iter_ancestors(rel: str) -> Iterator[str]:
    """Yield proper ancestors of a path, immediate parent first.

    The project root itself is never yielded.

    Args:
        rel: Project-relative path

    Yields:
        Ancestor directory paths
    """
    p = rel.strip("/")
    slash = p.rfind("/")
    while slash > 0:
        p = p[:slash]
        yield p
        slash = p.rfind("/")


class CollectionPass:
    """Mutable state of a single collection pass.

    Holds the two result sets and the directory-ignored cache. A new
    instance is created for every pass; the matcher is only read.
    """

    def __init__(
        self,
        matcher: IgnoreMatcher,
        project_root: Path,
        sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
    ):
        self.matcher = matcher
        self.project_root = project_root
        self.sidecar_suffix = sidecar_suffix
        self.ignored_files: set[str] = set()
        self.ignored_dirs: set[str] = set()
        self._dir_cache: dict[str, bool] = {}

    def is_directory_ignored(self, rel_dir: str) -> bool:
        """Check if a directory counts as ignored.

        A rule such as "Temp/" only matches paths below Temp, so besides
        the directory path itself a synthetic child path is probed.

        Args:
            rel_dir: Project-relative directory path

        Returns:
            True if the directory or its contents are ignored
        """
        rel = normalize_path(rel_dir).rstrip("/")
        if not rel:
            return False

        cached = self._dir_cache.get(rel)
        if cached is not None:
            return cached

        ignored = (
            self.matcher.is_ignored(rel)
            or self.matcher.is_ignored(f"{rel}/{PROBE_SEGMENT}")
        )
        self._dir_cache[rel] = ignored
        return ignored

    def _sidecar_exists(self, rel: str) -> bool:
        return os.path.isfile(self.project_root / (rel + self.sidecar_suffix))

    def _add_sidecar_unless_negated(self, rel: str) -> None:
        sidecar = rel + self.sidecar_suffix
        if not self._sidecar_exists(rel):
            return
        if self.matcher.last_match_kind(sidecar) != MatchKind.NEGATE:
            self.ignored_files.add(sidecar)

    def add_file(self, rel: str) -> bool:
        """Classify a file.

        The sidecar of an ignored file is added without a negation
        check, unlike directory sidecars.

        Args:
            rel: Project-relative file path

        Returns:
            True if the file is ignored
        """
        if not self.matcher.is_ignored(rel):
            return False

        self.ignored_files.add(rel)
        if self._sidecar_exists(rel):
            self.ignored_files.add(rel + self.sidecar_suffix)
        return True

    def add_directory(self, rel: str) -> bool:
        """Classify a directory and pick up its sidecar.

        Args:
            rel: Project-relative directory path

        Returns:
            True if the directory is ignored
        """
        if not self.is_directory_ignored(rel):
            return False

        self.ignored_dirs.add(rel)
        self._add_sidecar_unless_negated(rel)
        return True

    def _is_index_file(self, rel: str) -> bool:
        full = self.project_root / rel
        if has_extension(rel):
            return not os.path.isdir(full)
        return os.path.isfile(full)

    def add_index_entry(self, rel: str) -> None:
        """Classify one entry reported by the path index.

        Args:
            rel: Project-relative path
        """
        rel = normalize_path(rel).rstrip("/")
        if not rel:
            return

        if not self._is_index_file(rel):
            self.add_directory(rel)
            return

        self.add_file(rel)

        # Parent may be an otherwise empty ignored directory
        parent = rel.rsplit("/", 1)[0] if "/" in rel else ""
        if parent and self.is_directory_ignored(parent):
            self.ignored_dirs.add(parent)

    def collect_by_io(self, root: Path) -> None:
        """Classify every file and directory below root.

        Args:
            root: Absolute directory path inside the project
        """
        for path, is_dir in walk_entries(root):
            rel = make_project_relative(path, self.project_root)
            if is_dir:
                self.add_directory(rel)
            else:
                self.add_file(rel)

    def supplement_special_dirs(self, primary_root: Path, known: Iterable[str]) -> None:
        """Recover entries the path index leaves out.

        Dot-prefixed names and names containing '~' that the index did
        not report are classified from disk. Such a directory also has
        its contents collected; such a file is classified on its own.
        Sidecar files are left to their owners.

        Args:
            primary_root: Absolute path of the primary root
            known: Paths reported by the index
        """
        if not os.path.isdir(primary_root):
            return

        known = set(known)
        covered: list[str] = []

        for path, is_dir in walk_entries(primary_root):
            if not is_special_name(path.name):
                continue

            rel = make_project_relative(path, self.project_root)
            if rel in known or any(rel.startswith(c + "/") for c in covered):
                continue

            if not is_dir:
                if not rel.endswith(self.sidecar_suffix):
                    self.add_file(rel)
                continue

            covered.append(rel)
            self.add_directory(rel)
            self.collect_by_io(path)

    def ensure_ignored_ancestors(self) -> None:
        """Add every ignored ancestor of a collected path."""
        to_add = set()
        for rel in sorted(self.ignored_files | self.ignored_dirs):
            for ancestor in iter_ancestors(rel):
                if self.is_directory_ignored(ancestor):
                    to_add.add(ancestor)
        self.ignored_dirs |= to_add

    def include_ancestor_sidecars(self) -> None:
        """Add sidecars of every ancestor of a collected path.

        Skipped only when a '!' rule explicitly re-includes the sidecar.
        """
        checked = set()
        sidecars = set()
        for rel in sorted(self.ignored_files | self.ignored_dirs):
            for ancestor in iter_ancestors(rel):
                if ancestor in checked:
                    continue
                checked.add(ancestor)

                sidecar = ancestor + self.sidecar_suffix
                if not self._sidecar_exists(ancestor):
                    continue
                if self.matcher.last_match_kind(sidecar) != MatchKind.NEGATE:
                    sidecars.add(sidecar)
        self.ignored_files |= sidecars

    def complete_ancestors(self) -> None:
        self.ensure_ignored_ancestors()
        self.include_ancestor_sidecars()

    def result(self) -> CollectionResult:
        return CollectionResult(
            files=tuple(sorted(self.ignored_files)),
            dirs=tuple(sorted(self.ignored_dirs)),
        )


def collect_ignored(
    matcher: IgnoreMatcher | None,
    settings: ExportSettings,
    index: PathIndex | None = None,
    output: Output | None = None,
) -> CollectionResult:
    """Run a full collection pass.

    Args:
        matcher: Compiled rules, or None when no rule file is available
        settings: Project settings
        index: Path index for the primary root. Defaults to a disk scan.
        output: Output handler for warnings

    Returns:
        CollectionResult (empty when matcher is None)
    """
    if output is None:
        output = get_output()

    if matcher is None:
        return CollectionResult()

    project_root = settings.project_root
    collection = CollectionPass(matcher, project_root, settings.sidecar_suffix)

    if index is None:
        def index() -> list[str]:
            return scan_primary_root(project_root, settings.primary_root, settings.sidecar_suffix)

    # Paths reported by the index
    known = set()
    prefix = settings.primary_root + "/"
    for entry in index():
        rel = normalize_path(entry).rstrip("/")
        known.add(rel)
        if rel.startswith(prefix):
            collection.add_index_entry(rel)

    # Extra top-level directories straight from disk
    for name in normalize_extra_roots(settings.extra_roots, settings.primary_root, output):
        root = project_root / name
        if os.path.isdir(root):
            collection.collect_by_io(root)

    collection.supplement_special_dirs(settings.primary_root_path, known)
    collection.complete_ancestors()

    return collection.result()
