"""Lazy project tree enumeration with per-path cost estimates."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Callable, FrozenSet, Generator, Iterable, Iterator, List

from .cost import estimate_cost
from .logging import get_logger
from .models import PathCost, PathUnreadableWarning

# Version-control metadata is always skipped, whatever the ignore file says.
EXCLUDED_DIRS = frozenset({".git", ".hg", ".svn", ".bzr"})

_FILE = "file"
_DIR = "dir"
_SYMLINK = "symlink"


def _is_readable(path: str) -> bool:
    return os.access(path, os.R_OK)


class TreeWalker:
    """Walks a project root and yields a :class:`PathCost` per visited path.

    Files are yielded as they are seen; each directory is yielded after its
    contents, carrying the summed cost of every file below it. The sequence is
    a generator and can only be consumed once. Problems with individual paths
    are collected in :attr:`warnings` rather than raised.
    """

    def __init__(self, estimator: Callable[[int], int] = estimate_cost) -> None:
        self.estimator = estimator
        self.warnings: List[PathUnreadableWarning] = []
        self._exclude: FrozenSet[str] = frozenset()
        self.logger = get_logger("walker")

    def walk(self, root: Path | str, *, exclude: Iterable[str] = ()) -> Iterator[PathCost]:
        """Walk ``root``; paths listed in ``exclude`` (relative, POSIX) are skipped entirely."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project root is not a directory: {root}")
        normalised = (posixpath.normpath(path.replace("\\", "/")) for path in exclude if path)
        self._exclude = frozenset(path for path in normalised if path != ".")
        return self._walk_root(root_path)

    def _walk_root(self, root_path: Path) -> Iterator[PathCost]:
        self.warnings = []
        total = yield from self._walk_dir(str(root_path), "")
        self.logger.debug("Walked %s (aggregate cost %d)", root_path, total)

    def _walk_dir(self, path: str, rel_dir: str) -> Generator[PathCost, None, int]:
        try:
            with os.scandir(path) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            self._warn(rel_dir or ".", exc)
            return 0

        total = 0
        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if rel_path in self._exclude:
                self.logger.debug("Skipping excluded path %s", rel_path)
                continue
            try:
                kind = _classify(entry)
            except OSError as exc:
                self._warn(rel_path, exc)
                continue

            if kind == _SYMLINK:
                yield PathCost(path=rel_path, is_directory=False, cost=0, is_symlink=True)
                continue

            if kind == _DIR:
                if entry.name in EXCLUDED_DIRS:
                    self.logger.debug("Skipping excluded directory %s", rel_path)
                    continue
                subtotal = yield from self._walk_dir(entry.path, rel_path)
                total += subtotal
                yield PathCost(path=rel_path, is_directory=True, cost=subtotal)
                continue

            if kind != _FILE:
                continue

            if not _is_readable(entry.path):
                self._warn(rel_path, "permission denied")
                continue
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as exc:
                self._warn(rel_path, exc)
                continue

            cost = self.estimator(size)
            total += cost
            yield PathCost(path=rel_path, is_directory=False, cost=cost)

        return total

    def _warn(self, rel_path: str, reason: object) -> None:
        message = reason.strerror if isinstance(reason, OSError) and reason.strerror else str(reason)
        self.logger.warning("Skipping unreadable path %s: %s", rel_path, message)
        self.warnings.append(PathUnreadableWarning(path=rel_path, reason=message))


def _classify(entry: os.DirEntry) -> str | None:
    if entry.is_symlink():
        return _SYMLINK
    if entry.is_dir(follow_symlinks=False):
        return _DIR
    if entry.is_file(follow_symlinks=False):
        return _FILE
    return None


__all__ = ["EXCLUDED_DIRS", "TreeWalker"]
