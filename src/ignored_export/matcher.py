"""Gitignore-style rule compilation and matching.

Rules are compiled once into anchored regular expressions and evaluated
with "last match wins" semantics against project-relative paths that use
forward slashes.

Supported syntax:
- blank lines and lines starting with # are skipped
- ! negates a rule (re-includes what earlier rules ignored)
- a trailing / makes the rule cover everything below the directory
- a leading / anchors the rule to the project root, otherwise it
  matches at any depth
- ** matches across directories, * and ? stay within one segment
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from .output import Output, get_output

# Characters that would otherwise carry meaning inside a regex
_REGEX_SPECIAL = "+()^$.{}[]|\\"


class MatchKind(Enum):
    """Kind of the last rule that matched a path."""

    NONE = "none"
    IGNORE = "ignore"
    NEGATE = "negate"


@dataclass(frozen=True)
class Rule:
    """A single compiled ignore rule."""

    pattern: re.Pattern
    negation: bool
    order: int
    source: str

    def matches(self, path: str) -> bool:
        """Check if a normalized path matches this rule."""
        return self.pattern.fullmatch(path) is not None


def normalize_path(path: str | os.PathLike) -> str:
    """Convert a path to the canonical matching form.

    Args:
        path: Project-relative path, with either separator

    Returns:
        Path with forward slashes and no leading slash
    """
    return os.fspath(path).replace("\\", "/").lstrip("/")


def glob_to_regex(glob: str) -> str:
    """Translate a glob into a regex body (without anchors).

    Args:
        glob: Glob using forward slashes

    Returns:
        Regex source string
    """
    parts = []
    i = 0
    while i < len(glob):
        c = glob[i]
        if c == "*":
            if glob.startswith("**/", i):
                # Zero or more whole directories
                parts.append("(?:.*/)?")
                i += 3
                continue
            if glob.startswith("**", i):
                parts.append(".*")
                i += 2
                continue
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c in _REGEX_SPECIAL:
            parts.append("\\" + c)
        else:
            parts.append(c)
        i += 1
    return "".join(parts)


def compile_rule(line: str, order: int) -> Rule | None:
    """Compile one line of an ignore file.

    Args:
        line: Raw line from the rule source
        order: Declaration index of the line

    Returns:
        Compiled Rule, or None for blank lines and comments

    Raises:
        re.error: If the translated pattern does not compile
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    negation = False
    if text.startswith("!"):
        negation = True
        text = text[1:]

    text = text.replace("\\", "/").strip()

    # A directory rule covers its whole subtree
    if text.endswith("/"):
        text += "**"

    if text.startswith("/"):
        text = text.lstrip("/")
    elif not text.startswith("**/"):
        text = "**/" + text

    pattern = re.compile(glob_to_regex(text))
    return Rule(pattern=pattern, negation=negation, order=order, source=line.strip())


def compile_rules(lines: Iterable[str], output: Output | None = None) -> tuple[Rule, ...]:
    """Compile rule lines in declaration order.

    Lines that fail to compile are dropped with a warning; the rest
    still apply.

    Args:
        lines: Raw lines from the rule source
        output: Output handler for diagnostics

    Returns:
        Tuple of compiled rules
    """
    rules = []
    for order, line in enumerate(lines):
        try:
            rule = compile_rule(line, order)
        except re.error as e:
            if output is None:
                output = get_output()
            output.warning(f"Skipping invalid ignore rule '{line.strip()}': {e}")
            continue
        if rule is not None:
            rules.append(rule)
    return tuple(rules)


class IgnoreMatcher:
    """Evaluates paths against an ordered, immutable rule set."""

    def __init__(self, lines: Iterable[str], output: Output | None = None):
        """Compile the given rule lines.

        Args:
            lines: Raw lines from the rule source
            output: Output handler for diagnostics
        """
        self._rules = compile_rules(lines, output=output)
        self._cache: dict[str, bool] = {}

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def match(self, path: str | os.PathLike) -> Rule | None:
        """Find the rule that decides a path.

        Args:
            path: Project-relative path

        Returns:
            The last declared rule matching the path, or None
        """
        rel = normalize_path(path)
        for rule in reversed(self._rules):
            if rule.matches(rel):
                return rule
        return None

    def is_ignored(self, path: str | os.PathLike) -> bool:
        """Check if a path is ignored.

        Args:
            path: Project-relative path

        Returns:
            True if the last matching rule is not a negation
        """
        rel = normalize_path(path)
        cached = self._cache.get(rel)
        if cached is not None:
            return cached

        rule = self.match(rel)
        ignored = rule is not None and not rule.negation
        self._cache[rel] = ignored
        return ignored

    def last_match_kind(self, path: str | os.PathLike) -> MatchKind:
        """Classify the last rule matching a path. Not cached."""
        rule = self.match(path)
        if rule is None:
            return MatchKind.NONE
        return MatchKind.NEGATE if rule.negation else MatchKind.IGNORE

    def clear_cache(self) -> None:
        self._cache.clear()


def read_rule_lines(rules_file: Path) -> list[str]:
    """Read raw lines from a rule file.

    A UTF-8 byte-order mark is stripped if present.

    Args:
        rules_file: Path to the rule file

    Returns:
        List of lines without line endings

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    with open(rules_file, encoding="utf-8-sig") as f:
        return f.read().splitlines()


def load_matcher(rules_file: Path, output: Output | None = None) -> IgnoreMatcher | None:
    """Build a matcher from a rule file.

    Args:
        rules_file: Path to the rule file
        output: Output handler for diagnostics

    Returns:
        IgnoreMatcher, or None if the file is missing or unreadable
    """
    if output is None:
        output = get_output()

    if not os.path.isfile(rules_file):
        return None

    try:
        lines = read_rule_lines(rules_file)
    except (OSError, UnicodeDecodeError) as e:
        output.warning(f"Could not read {rules_file}: {e}")
        return None

    return IgnoreMatcher(lines, output=output)
