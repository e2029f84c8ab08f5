"""Builds cost reports by combining the tree walker and ignore rules."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Sequence

from .logging import get_logger
from .models import AnalysisReport, Bucket, BucketDef, PathCost, sort_by_cost
from .patterns import PatternMatcher, PatternSet, load_pattern_file
from .walker import TreeWalker

DEFAULT_BUDGET = 200000
DEFAULT_HOG_THRESHOLD = 1000
DEFAULT_TOP_N = 5


class AnalysisEngine:
    """Walks a project once and partitions every path into ignored/unignored."""

    def __init__(self, walker_factory: Callable[[], TreeWalker] = TreeWalker) -> None:
        self._walker_factory = walker_factory
        self.logger = get_logger("analysis")

    def analyze(
        self,
        root: Path | str,
        pattern_set: PatternSet,
        bucket_defs: Sequence[BucketDef] = (),
        *,
        hog_threshold: int = DEFAULT_HOG_THRESHOLD,
        top_n: int = DEFAULT_TOP_N,
        budget: int = DEFAULT_BUDGET,
        targets: Sequence[str] = (),
        exclude: Sequence[str] = (),
    ) -> AnalysisReport:
        root_path = Path(root).expanduser().resolve()
        walker = self._walker_factory()
        matcher = PatternMatcher(pattern_set)

        ignored: List[PathCost] = []
        unignored: List[PathCost] = []
        for entry in walker.walk(root_path, exclude=exclude):
            if matcher.is_ignored(entry.path, entry.is_directory):
                ignored.append(entry)
            else:
                unignored.append(entry)

        self.logger.debug(
            "Classified %d paths under %s (%d ignored, %d unignored)",
            len(ignored) + len(unignored),
            root_path,
            len(ignored),
            len(unignored),
        )

        unignored_files = [entry for entry in unignored if not entry.is_directory]
        hogs = [entry for entry in unignored_files if entry.cost >= hog_threshold]
        hogs = sort_by_cost(hogs)[: max(top_n, 0)]

        buckets = [_build_bucket(definition, unignored_files) for definition in bucket_defs]

        return AnalysisReport(
            root=str(root_path),
            targets=tuple(targets),
            ignored=tuple(sort_by_cost(ignored)),
            unignored=tuple(sort_by_cost(unignored)),
            hogs=tuple(hogs),
            buckets=tuple(buckets),
            warnings=tuple(walker.warnings),
            budget=budget,
            hog_threshold=hog_threshold,
            ignore_pattern_count=len(pattern_set),
        )


def _build_bucket(definition: BucketDef, files: Sequence[PathCost]) -> Bucket:
    matched = [entry for entry in files if definition.contains(entry.path)]
    ranked = sort_by_cost(matched)[: max(definition.top_k, 0)]
    return Bucket(label=definition.label, sub_root=definition.sub_root, entries=tuple(ranked))


def analyze(
    root: Path | str,
    ignore_file: Path | str,
    bucket_defs: Sequence[BucketDef] = (),
    *,
    hog_threshold: int = DEFAULT_HOG_THRESHOLD,
    top_n: int = DEFAULT_TOP_N,
    budget: int = DEFAULT_BUDGET,
    targets: Sequence[str] | None = None,
    exclude: Sequence[str] = (),
    engine: AnalysisEngine | None = None,
) -> AnalysisReport:
    """Load ``ignore_file`` (relative paths resolve under ``root``) and analyze ``root``."""
    root_path = Path(root).expanduser().resolve()
    ignore_path = Path(ignore_file)
    if not ignore_path.is_absolute():
        ignore_path = root_path / ignore_path
    pattern_set = load_pattern_file(ignore_path)
    if targets is None:
        targets = (_relative_name(root_path, ignore_path),)
    return (engine or AnalysisEngine()).analyze(
        root_path,
        pattern_set,
        bucket_defs,
        hog_threshold=hog_threshold,
        top_n=top_n,
        budget=budget,
        targets=targets,
        exclude=exclude,
    )


def _relative_name(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


__all__ = ["AnalysisEngine", "DEFAULT_BUDGET", "DEFAULT_HOG_THRESHOLD", "DEFAULT_TOP_N", "analyze"]
