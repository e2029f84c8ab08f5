"""Verbs that edit the ignore-pattern file."""

from __future__ import annotations

from typing import Any, List, Mapping, Tuple

from ..models import ChangeSummary
from ..patterns import PatternSet, parse_pattern
from .base import IGNORE_TARGET, Verb, VerbContext, string_list


class AppendRecommendedPatterns(Verb[PatternSet]):
    """Append recommended patterns that are not already present."""

    name = "append_recommended_patterns"
    target_kind = IGNORE_TARGET
    description = "Append recommended ignore patterns that are missing"

    def compute(
        self, state: PatternSet, args: Mapping[str, Any], context: VerbContext
    ) -> Tuple[PatternSet, ChangeSummary]:
        updated = state
        added: List[str] = []
        for candidate in string_list(args, "patterns"):
            pattern = parse_pattern(candidate)
            if pattern is None:
                continue
            updated, inserted = updated.add(pattern)
            if inserted:
                added.append(pattern.normalized)
        summary = ChangeSummary(
            verb=self.name,
            target=context.target,
            added=tuple(added),
            count=len(added),
        )
        return updated, summary


class DeduplicatePatterns(Verb[PatternSet]):
    """Remove repeated patterns while leaving comments and order alone."""

    name = "deduplicate_patterns"
    target_kind = IGNORE_TARGET
    description = "Remove duplicate ignore patterns, keeping the first occurrence"

    def compute(
        self, state: PatternSet, args: Mapping[str, Any], context: VerbContext
    ) -> Tuple[PatternSet, ChangeSummary]:
        updated, removed = state.deduplicate()
        summary = ChangeSummary(
            verb=self.name,
            target=context.target,
            removed=tuple(removed),
            count=len(removed),
        )
        return updated, summary


__all__ = ["AppendRecommendedPatterns", "DeduplicatePatterns"]
