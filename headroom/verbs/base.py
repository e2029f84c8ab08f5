"""Base classes and collaborators for mutation verbs."""

from __future__ import annotations

import glob
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Generic, List, Mapping, Protocol, Tuple, TypeVar

from ..models import ChangeSummary

IGNORE_TARGET = "ignore"
SETTINGS_TARGET = "settings"

StateT = TypeVar("StateT")


class Filesystem(Protocol):
    """Read-only view of the project used by verbs that consult the disk."""

    def exists(self, path: str) -> bool:
        ...

    def glob(self, pattern: str) -> List[str]:
        ...


class LocalFilesystem:
    """Resolves relative paths and globs against a project root."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser().resolve()

    def exists(self, path: str) -> bool:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.root / candidate
        return os.path.lexists(candidate)

    def glob(self, pattern: str) -> List[str]:
        if os.path.isabs(pattern):
            return sorted(glob.glob(pattern, recursive=True))
        return sorted(glob.glob(pattern, root_dir=self.root, recursive=True))


@dataclass(frozen=True)
class VerbContext:
    """Per-invocation inputs that are not part of the target's state."""

    target: str
    fs: Filesystem


class Verb(ABC, Generic[StateT]):
    """A named mutation with one decision procedure for preview and apply."""

    name: ClassVar[str]
    target_kind: ClassVar[str]
    description: ClassVar[str] = ""

    @abstractmethod
    def compute(
        self, state: StateT, args: Mapping[str, Any], context: VerbContext
    ) -> Tuple[StateT, ChangeSummary]:
        """Return the new state and a summary; ``state`` itself is never modified."""


def string_list(args: Mapping[str, Any], key: str) -> List[str]:
    """Read ``args[key]`` as a list of strings, accepting a bare string."""
    value = args.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    raise ValueError(f"Argument '{key}' must be a string or a list of strings")


__all__ = [
    "Filesystem",
    "IGNORE_TARGET",
    "LocalFilesystem",
    "SETTINGS_TARGET",
    "Verb",
    "VerbContext",
    "string_list",
]
