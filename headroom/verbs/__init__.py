"""Registry of mutation verbs."""

from __future__ import annotations

from typing import Callable, Dict, List

from ..errors import UnknownVerbError
from .base import (
    IGNORE_TARGET,
    SETTINGS_TARGET,
    Filesystem,
    LocalFilesystem,
    Verb,
    VerbContext,
)
from .ignore_file import AppendRecommendedPatterns, DeduplicatePatterns
from .settings_file import AddPermissionsDeny, PruneAlwaysInclude, TightenAutoInclude

_BUILTIN_VERBS: Dict[str, Callable[[], Verb]] = {
    AppendRecommendedPatterns.name: AppendRecommendedPatterns,
    DeduplicatePatterns.name: DeduplicatePatterns,
    PruneAlwaysInclude.name: PruneAlwaysInclude,
    AddPermissionsDeny.name: AddPermissionsDeny,
    TightenAutoInclude.name: TightenAutoInclude,
}


def resolve_verb(name: str) -> Verb:
    """Return a fresh instance of the verb registered under ``name``."""
    factory = _BUILTIN_VERBS.get(name)
    if factory is None:
        raise UnknownVerbError(name)
    return factory()


def available_verbs() -> List[str]:
    return list(_BUILTIN_VERBS)


__all__ = [
    "AddPermissionsDeny",
    "AppendRecommendedPatterns",
    "DeduplicatePatterns",
    "Filesystem",
    "IGNORE_TARGET",
    "LocalFilesystem",
    "PruneAlwaysInclude",
    "SETTINGS_TARGET",
    "TightenAutoInclude",
    "Verb",
    "VerbContext",
    "available_verbs",
    "resolve_verb",
]
