"""Verbs that edit the JSON settings file."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from ..models import ChangeSummary
from ..settings import SettingsDocument
from .base import SETTINGS_TARGET, Verb, VerbContext, string_list

DEFAULT_MATCH_THRESHOLD = 50
MAX_SUGGESTIONS = 8


class PruneAlwaysInclude(Verb[SettingsDocument]):
    """Drop ``alwaysInclude`` entries whose path no longer exists."""

    name = "prune_alwaysInclude"
    target_kind = SETTINGS_TARGET
    description = "Remove non-existent paths from alwaysInclude"

    def compute(
        self, state: SettingsDocument, args: Mapping[str, Any], context: VerbContext
    ) -> Tuple[SettingsDocument, ChangeSummary]:
        kept: List[Any] = []
        removed: List[str] = []
        for entry in state.always_include:
            # Non-string entries are not paths we understand; leave them be.
            if isinstance(entry, str) and not context.fs.exists(entry):
                removed.append(entry)
            else:
                kept.append(entry)

        updated = state
        if removed:
            updated = state.copy()
            updated.set_always_include(kept)
        summary = ChangeSummary(
            verb=self.name,
            target=context.target,
            removed=tuple(removed),
            count=len(removed),
        )
        return updated, summary


class AddPermissionsDeny(Verb[SettingsDocument]):
    """Append capability patterns to ``permissions.deny`` when missing."""

    name = "add_permissions_deny"
    target_kind = SETTINGS_TARGET
    description = "Add permissions.deny entries to block heavy paths"

    def compute(
        self, state: SettingsDocument, args: Mapping[str, Any], context: VerbContext
    ) -> Tuple[SettingsDocument, ChangeSummary]:
        existing = state.permissions_deny
        additions: List[str] = []
        for candidate in string_list(args, "patterns"):
            if candidate in existing or candidate in additions:
                continue
            additions.append(candidate)

        updated = state
        if additions:
            updated = state.copy()
            updated.set_permissions_deny(existing + additions)
        summary = ChangeSummary(
            verb=self.name,
            target=context.target,
            added=tuple(additions),
            count=len(additions),
        )
        return updated, summary


class TightenAutoInclude(Verb[SettingsDocument]):
    """Report narrower replacements for broad ``autoInclude`` globs.

    This verb is advisory. ``autoInclude`` is never rewritten, so applying it
    leaves the settings file exactly as it was; the summary carries a note and
    the proposals for a human to act on.
    """

    name = "tighten_auto_include"
    target_kind = SETTINGS_TARGET
    description = "Propose narrower autoInclude patterns (review manually; never writes)"

    def compute(
        self, state: SettingsDocument, args: Mapping[str, Any], context: VerbContext
    ) -> Tuple[SettingsDocument, ChangeSummary]:
        threshold = _as_threshold(args.get("match_threshold"))
        proposals: List[Dict[str, Any]] = []
        for pattern in _auto_include_patterns(state.auto_include):
            matches = context.fs.glob(pattern)
            if len(matches) <= threshold:
                continue
            proposals.append(
                {
                    "pattern": pattern,
                    "count": len(matches),
                    "suggest": _narrower_patterns(pattern, matches),
                }
            )

        if proposals:
            note = (
                f"{len(proposals)} autoInclude pattern(s) match more than {threshold} files; "
                "review the proposals and edit the settings file manually. "
                "This verb never modifies autoInclude."
            )
        else:
            note = "No autoInclude proposals. This verb never modifies autoInclude."
        summary = ChangeSummary(
            verb=self.name,
            target=context.target,
            count=len(proposals),
            note=note,
            proposals=tuple(proposals),
        )
        return state, summary


def _auto_include_patterns(value: Any) -> List[str]:
    if isinstance(value, dict):
        value = value.get("patterns")
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _narrower_patterns(pattern: str, matches: List[str]) -> List[str]:
    head = pattern.split("/**", 1)[0]
    subdirs = set()
    for match in matches:
        parts = match.split("/")
        if len(parts) > 2 and parts[0] == head:
            subdirs.add(parts[1])
    return [f"{head}/{name}/**/*" for name in sorted(subdirs)[:MAX_SUGGESTIONS]]


def _as_threshold(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_MATCH_THRESHOLD
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return DEFAULT_MATCH_THRESHOLD
    return DEFAULT_MATCH_THRESHOLD


__all__ = ["AddPermissionsDeny", "PruneAlwaysInclude", "TightenAutoInclude"]
