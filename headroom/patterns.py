"""Ignore-file parsing and gitignore-style matching."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .errors import ParseError


@dataclass(frozen=True)
class Pattern:
    """A single parsed ignore rule."""

    raw: str
    body: str
    negate: bool = False
    anchored: bool = False
    directory_only: bool = False

    @property
    def has_slash(self) -> bool:
        return "/" in self.body

    @property
    def normalized(self) -> str:
        """Canonical text of the rule, used as the deduplication key."""
        escape = ""
        if not self.negate and not self.anchored and self.body[:1] in {"#", "!"}:
            escape = "\\"
        return "".join(
            (
                "!" if self.negate else "",
                "/" if self.anchored else "",
                escape,
                self.body,
                "/" if self.directory_only else "",
            )
        )

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.body:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            return _match_segments(self.body.split("/"), rel_path.split("/"))

        name = rel_path.rsplit("/", 1)[-1]
        return fnmatchcase(name, self.body)


@dataclass(frozen=True)
class PatternLine:
    """One line of an ignore file; ``pattern`` is None for comments and blanks."""

    text: str
    pattern: Pattern | None = None


def parse_pattern(line: str) -> Pattern | None:
    """Parse one ignore-file line, returning None for blanks and comments."""
    raw = line.rstrip("\r\n")
    text = raw.strip()
    if not text or text.startswith("#"):
        return None

    negate = False
    if text.startswith("\\#") or text.startswith("\\!"):
        text = text[1:]
    elif text.startswith("!"):
        negate = True
        text = text[1:]

    directory_only = text.endswith("/")
    if directory_only:
        text = text.rstrip("/")

    anchored = text.startswith("/")
    if anchored:
        text = text.lstrip("/")

    return Pattern(
        raw=raw,
        body=text,
        negate=negate,
        anchored=anchored,
        directory_only=directory_only,
    )


@dataclass(frozen=True)
class PatternSet:
    """Ordered ignore rules plus the comment and blank lines around them."""

    lines: Tuple[PatternLine, ...] = ()

    @classmethod
    def parse(cls, text: str | bytes) -> "PatternSet":
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise ParseError(f"Ignore file is not valid UTF-8: {exc}") from exc
        elif text.startswith("\ufeff"):
            text = text[1:]

        lines = [
            PatternLine(text=raw, pattern=parse_pattern(raw)) for raw in text.splitlines()
        ]
        return cls(lines=tuple(lines))

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> "PatternSet":
        return cls.parse("\n".join(patterns))

    @property
    def patterns(self) -> Tuple[Pattern, ...]:
        return tuple(line.pattern for line in self.lines if line.pattern is not None)

    def __len__(self) -> int:
        return len(self.patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def contains(self, candidate: str | Pattern) -> bool:
        pattern = parse_pattern(candidate) if isinstance(candidate, str) else candidate
        if pattern is None:
            return False
        return any(existing.normalized == pattern.normalized for existing in self.patterns)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        """Return True when ``rel_path`` is ignored by this set.

        A path below an ignored directory stays ignored, mirroring git, which
        cannot re-include a file whose parent directory is excluded.
        """
        parts = [part for part in rel_path.strip("/").split("/") if part]
        if not parts:
            return False
        for index in range(1, len(parts)):
            if self.evaluate("/".join(parts[:index]), True):
                return True
        return self.evaluate("/".join(parts), is_dir)

    def evaluate(self, rel_path: str, is_dir: bool) -> bool:
        """Scan every rule in order; the last matching rule decides."""
        ignored = False
        for pattern in self.patterns:
            if pattern.matches(rel_path, is_dir):
                ignored = not pattern.negate
        return ignored

    def add(self, candidate: str | Pattern) -> Tuple["PatternSet", bool]:
        """Append ``candidate`` unless a rule with the same normalized form exists."""
        pattern = parse_pattern(candidate) if isinstance(candidate, str) else candidate
        if pattern is None or self.contains(pattern):
            return self, False
        line = PatternLine(text=pattern.normalized, pattern=pattern)
        return PatternSet(lines=self.lines + (line,)), True

    def deduplicate(self) -> Tuple["PatternSet", List[str]]:
        """Drop repeated rules, keeping the first occurrence of each."""
        seen: set[str] = set()
        kept: List[PatternLine] = []
        removed: List[str] = []
        for line in self.lines:
            if line.pattern is None:
                kept.append(line)
                continue
            key = line.pattern.normalized
            if key in seen:
                removed.append(line.text)
                continue
            seen.add(key)
            kept.append(line)
        return PatternSet(lines=tuple(kept)), removed

    def to_text(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(line.text for line in self.lines) + "\n"

    def to_bytes(self) -> bytes:
        return self.to_text().encode("utf-8")


class PatternMatcher:
    """Classifies walked paths, caching verdicts for directories."""

    def __init__(self, pattern_set: PatternSet) -> None:
        self.pattern_set = pattern_set
        self._dir_cache: Dict[str, bool] = {}

    def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        parts = [part for part in rel_path.strip("/").split("/") if part]
        if not parts:
            return False
        for index in range(1, len(parts)):
            if self._directory_ignored("/".join(parts[:index])):
                return True
        target = "/".join(parts)
        if is_dir:
            return self._directory_ignored(target)
        return self.pattern_set.evaluate(target, False)

    def _directory_ignored(self, rel_dir: str) -> bool:
        cached = self._dir_cache.get(rel_dir)
        if cached is None:
            cached = self.pattern_set.evaluate(rel_dir, True)
            self._dir_cache[rel_dir] = cached
        return cached


def parse_patterns(text: str | bytes) -> PatternSet:
    """Parse ignore-file contents into a :class:`PatternSet`."""
    return PatternSet.parse(text)


def load_pattern_file(path: Path) -> PatternSet:
    """Read an ignore file from disk; a missing file yields an empty set."""
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        return PatternSet()
    return PatternSet.parse(data)


def _match_segments(pattern_parts: Sequence[str], path_parts: Sequence[str]) -> bool:
    if not pattern_parts:
        return not path_parts

    head = pattern_parts[0]
    if head == "**":
        rest = pattern_parts[1:]
        if not rest:
            # "dir/**" covers everything inside dir, not dir itself.
            return bool(path_parts)
        return any(
            _match_segments(rest, path_parts[index:]) for index in range(len(path_parts) + 1)
        )

    if not path_parts:
        return False
    if not fnmatchcase(path_parts[0], head):
        return False
    return _match_segments(pattern_parts[1:], path_parts[1:])


__all__ = [
    "Pattern",
    "PatternLine",
    "PatternMatcher",
    "PatternSet",
    "load_pattern_file",
    "parse_pattern",
    "parse_patterns",
]
