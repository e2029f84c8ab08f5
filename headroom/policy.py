"""Which verbs may touch which target files."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Dict, List

from .errors import PolicyError

IGNORE_VERBS: List[str] = ["append_recommended_patterns", "deduplicate_patterns"]
SETTINGS_VERBS: List[str] = [
    "prune_alwaysInclude",
    "add_permissions_deny",
    "tighten_auto_include",
]


def normalise_target(target: str) -> str:
    """Return ``target`` as a POSIX path with ``.`` and ``..`` segments collapsed."""
    text = target.replace("\\", "/")
    if not text:
        return text
    return posixpath.normpath(text)


def default_editable(
    ignore_file: str = ".claudeignore", settings_file: str = ".claude/settings.json"
) -> Dict[str, List[str]]:
    """Allow-lists for the configured ignore and settings targets."""
    return {
        normalise_target(ignore_file): list(IGNORE_VERBS),
        normalise_target(settings_file): list(SETTINGS_VERBS),
    }


DEFAULT_EDITABLE: Dict[str, List[str]] = default_editable()


@dataclass
class Policy:
    """Per-target verb allow-lists plus globs of files that must never change.

    A target missing from ``editable`` accepts any verb. Targets are compared
    after normalisation, so ``./a/../b`` and ``b`` name the same file.
    """

    editable: Dict[str, List[str]] = field(default_factory=default_editable)
    immutable: List[str] = field(default_factory=list)

    @classmethod
    def for_targets(cls, ignore_file: str, settings_file: str) -> "Policy":
        return cls(editable=default_editable(ignore_file, settings_file))

    def is_immutable(self, target: str) -> bool:
        normalised = normalise_target(target)
        return any(
            fnmatchcase(normalised, normalise_target(pattern)) for pattern in self.immutable
        )

    def allowed_verbs(self, target: str) -> List[str] | None:
        normalised = normalise_target(target)
        for key, verbs in self.editable.items():
            if normalise_target(key) == normalised:
                return verbs
        return None

    def check(self, target: str, verb: str) -> None:
        if self.is_immutable(target):
            raise PolicyError(f"Target '{target}' is immutable by policy")
        allowed = self.allowed_verbs(target)
        if allowed is not None and verb not in allowed:
            raise PolicyError(f"Verb '{verb}' not allowed on '{target}' by policy")


__all__ = ["DEFAULT_EDITABLE", "IGNORE_VERBS", "Policy", "SETTINGS_VERBS", "default_editable", "normalise_target"]
