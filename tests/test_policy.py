"""Tests for headroom.policy."""

from __future__ import annotations

import pytest

from headroom.errors import PolicyError
from headroom.policy import Policy


def test_default_policy_allows_registered_pairs() -> None:
    policy = Policy()

    policy.check(".claudeignore", "append_recommended_patterns")
    policy.check("./.claude/settings.json", "add_permissions_deny")


def test_default_policy_rejects_cross_target_verbs() -> None:
    with pytest.raises(PolicyError):
        Policy().check(".claudeignore", "prune_alwaysInclude")


def test_unlisted_targets_accept_any_verb() -> None:
    policy = Policy()

    assert policy.allowed_verbs("other/.claudeignore") is None
    policy.check("other/.claudeignore", "deduplicate_patterns")


def test_immutable_globs_win_over_allow_lists() -> None:
    policy = Policy(immutable=[".claude/*.json"])

    assert policy.is_immutable(".claude/settings.json") is True
    with pytest.raises(PolicyError):
        policy.check(".claude/settings.json", "add_permissions_deny")


def test_targets_are_normalised_before_lookup() -> None:
    policy = Policy()

    assert policy.allowed_verbs("docs/../.claude/./settings.json") == policy.allowed_verbs(
        ".claude/settings.json"
    )
    with pytest.raises(PolicyError):
        policy.check("docs/../.claudeignore", "add_permissions_deny")


def test_policy_for_custom_targets() -> None:
    policy = Policy.for_targets(".aiignore", "conf/settings.json")

    policy.check(".aiignore", "deduplicate_patterns")
    with pytest.raises(PolicyError):
        policy.check("conf/settings.json", "deduplicate_patterns")
