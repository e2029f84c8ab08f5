"""Core data models shared across headroom components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class PathCost:
    """Estimated context cost of a single visited path."""

    path: str
    is_directory: bool
    cost: int
    is_symlink: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "path": self.path,
            "is_directory": self.is_directory,
            "token_cost": self.cost,
        }
        if self.is_symlink:
            payload["symlink"] = True
        return payload


@dataclass(frozen=True)
class PathUnreadableWarning:
    """Non-fatal problem recorded while walking a tree."""

    path: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "reason": self.reason}


@dataclass(frozen=True)
class BucketDef:
    """Caller-defined view over unignored files below a sub-root."""

    label: str
    sub_root: str
    top_k: int = 20

    def contains(self, rel_path: str) -> bool:
        prefix = self.sub_root.strip("/")
        if not prefix or prefix == ".":
            return True
        return rel_path == prefix or rel_path.startswith(f"{prefix}/")


@dataclass(frozen=True)
class Bucket:
    """Sorted, truncated entries that fell inside a :class:`BucketDef`."""

    label: str
    sub_root: str
    entries: Tuple[PathCost, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "sub_root": self.sub_root,
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass(frozen=True)
class AnalysisReport:
    """Partitioned cost report for one analysis run.

    ``ignored`` and ``unignored`` together hold every path the walker visited,
    each exactly once. ``hogs`` and ``buckets`` are derived views over the
    unignored files and never filter the partition itself.
    """

    root: str
    targets: Tuple[str, ...]
    ignored: Tuple[PathCost, ...]
    unignored: Tuple[PathCost, ...]
    hogs: Tuple[PathCost, ...] = ()
    buckets: Tuple[Bucket, ...] = ()
    warnings: Tuple[PathUnreadableWarning, ...] = ()
    budget: int = 200000
    hog_threshold: int = 1000
    ignore_pattern_count: int = 0

    @property
    def visited(self) -> int:
        return len(self.ignored) + len(self.unignored)

    @property
    def raw_cost(self) -> int:
        """Cost of every visited file, ignored or not."""
        return _file_cost(self.ignored) + _file_cost(self.unignored)

    @property
    def total_cost(self) -> int:
        """Cost of the files that would still reach the context window."""
        return _file_cost(self.unignored)

    @property
    def headroom(self) -> int:
        return self.budget - self.total_cost

    @property
    def savings(self) -> int:
        return self.raw_cost - self.total_cost

    def bucket(self, label: str) -> Bucket | None:
        for bucket in self.buckets:
            if bucket.label == label:
                return bucket
        return None

    def summary(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "targets": list(self.targets),
            "budget": self.budget,
            "total_estimated_tokens": self.total_cost,
            "raw_estimated_tokens": self.raw_cost,
            "headroom": self.headroom,
            "savings": self.savings,
            "visited": self.visited,
            "ignored_count": len(self.ignored),
            "unignored_count": len(self.unignored),
            "ignore_pattern_count": self.ignore_pattern_count,
        }

    def to_dict(self) -> Dict[str, Any]:
        payload = self.summary()
        payload.update(
            {
                "hog_threshold": self.hog_threshold,
                "ignored": [entry.to_dict() for entry in self.ignored],
                "unignored": [entry.to_dict() for entry in self.unignored],
                "hogs": [entry.to_dict() for entry in self.hogs],
                "buckets": {bucket.label: bucket.to_dict() for bucket in self.buckets},
                "warnings": [warning.to_dict() for warning in self.warnings],
            }
        )
        return payload


@dataclass(frozen=True)
class ChangeSummary:
    """Outcome of a verb computation, identical for preview and apply."""

    verb: str
    target: str
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()
    count: int = 0
    note: str | None = None
    proposals: Tuple[Dict[str, Any], ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "verb": self.verb,
            "target": self.target,
            "added": list(self.added),
            "removed": list(self.removed),
            "count": self.count,
            "changed": self.changed,
        }
        if self.note is not None:
            payload["note"] = self.note
        if self.proposals:
            payload["proposals"] = [dict(item) for item in self.proposals]
        return payload


def _file_cost(entries: Tuple[PathCost, ...]) -> int:
    return sum(entry.cost for entry in entries if not entry.is_directory)


def sort_by_cost(entries: List[PathCost]) -> List[PathCost]:
    """Sort descending by cost, breaking ties by path ascending."""
    return sorted(entries, key=lambda entry: (-entry.cost, entry.path))


__all__ = [
    "AnalysisReport",
    "Bucket",
    "BucketDef",
    "ChangeSummary",
    "PathCost",
    "PathUnreadableWarning",
    "sort_by_cost",
]
