"""Tests for headroom.patterns."""

from __future__ import annotations

from pathlib import Path

import pytest

from headroom.errors import ParseError
from headroom.patterns import (
    PatternMatcher,
    load_pattern_file,
    parse_pattern,
    parse_patterns,
)


def test_parse_keeps_comments_and_blank_lines_out_of_matching() -> None:
    pattern_set = parse_patterns("# build output\n\nbuild/\n*.log\n")

    assert [pattern.normalized for pattern in pattern_set] == ["build/", "*.log"]
    assert len(pattern_set.lines) == 4
    assert pattern_set.to_text() == "# build output\n\nbuild/\n*.log\n"


def test_parse_rejects_invalid_utf8() -> None:
    with pytest.raises(ParseError):
        parse_patterns(b"build/\n\xff\xfe\n")


def test_malformed_glob_is_kept_as_literal_pattern() -> None:
    pattern_set = parse_patterns("[unclosed\n")

    assert len(pattern_set) == 1
    assert pattern_set.matches("[unclosed", False) is True
    assert pattern_set.matches("src/app.py", False) is False


def test_empty_input_matches_nothing() -> None:
    pattern_set = parse_patterns("")

    assert len(pattern_set) == 0
    assert pattern_set.matches("anything.txt", False) is False
    assert pattern_set.to_text() == ""


def test_normalization_collapses_trailing_slashes_and_whitespace() -> None:
    pattern = parse_pattern("  build//  ")

    assert pattern is not None
    assert pattern.normalized == "build/"
    assert pattern.directory_only is True


def test_escaped_hash_is_a_pattern_not_a_comment() -> None:
    pattern_set = parse_patterns("\\#notes.md\n")

    assert len(pattern_set) == 1
    assert pattern_set.matches("#notes.md", False) is True
    assert next(iter(pattern_set)).normalized == "\\#notes.md"


def test_directory_pattern_only_matches_directories() -> None:
    pattern_set = parse_patterns("logs/\n")

    assert pattern_set.matches("logs", True) is True
    assert pattern_set.matches("logs", False) is False
    assert pattern_set.matches("logs/today.txt", False) is True
    assert pattern_set.matches("app/logs/today.txt", False) is True


def test_basename_pattern_matches_at_any_depth() -> None:
    pattern_set = parse_patterns("*.log\n")

    assert pattern_set.matches("debug.log", False) is True
    assert pattern_set.matches("deep/nested/debug.log", False) is True
    assert pattern_set.matches("debug.txt", False) is False


def test_slash_pattern_is_anchored_to_root() -> None:
    pattern_set = parse_patterns("docs/archive\n/dist\n")

    assert pattern_set.matches("docs/archive", True) is True
    assert pattern_set.matches("docs/archive/old.md", False) is True
    assert pattern_set.matches("site/docs/archive", True) is False
    assert pattern_set.matches("dist", True) is True
    assert pattern_set.matches("pkg/dist", True) is False


def test_single_star_does_not_cross_directories() -> None:
    pattern_set = parse_patterns("docs/*.md\n")

    assert pattern_set.matches("docs/readme.md", False) is True
    assert pattern_set.matches("docs/sub/readme.md", False) is False


def test_double_star_spans_directories() -> None:
    pattern_set = parse_patterns("**/fixtures\nreports/**\n")

    assert pattern_set.matches("fixtures", True) is True
    assert pattern_set.matches("tests/unit/fixtures", True) is True
    assert pattern_set.matches("reports/2024/q1.csv", False) is True
    assert pattern_set.matches("reports", True) is False


def test_last_matching_pattern_wins_with_negation() -> None:
    pattern_set = parse_patterns("*.md\n!keep.md\n")

    assert pattern_set.matches("notes.md", False) is True
    assert pattern_set.matches("keep.md", False) is False


def test_later_pattern_overrides_earlier_negation() -> None:
    pattern_set = parse_patterns("!keep.md\n*.md\n")

    assert pattern_set.matches("keep.md", False) is True


def test_negation_cannot_reinclude_file_under_ignored_directory() -> None:
    pattern_set = parse_patterns("build/\n!build/keep.txt\n")

    assert pattern_set.matches("build/keep.txt", False) is True


def test_star_at_root_matches_everything() -> None:
    pattern_set = parse_patterns("*\n")

    assert pattern_set.matches("a.txt", False) is True
    assert pattern_set.matches("src", True) is True
    assert pattern_set.matches("src/deep/file.py", False) is True


def test_add_appends_only_new_normalized_forms() -> None:
    pattern_set = parse_patterns("node_modules/\n")

    unchanged, added = pattern_set.add("node_modules//")
    assert added is False
    assert unchanged is pattern_set

    updated, added = pattern_set.add("dist/")
    assert added is True
    assert [pattern.normalized for pattern in updated] == ["node_modules/", "dist/"]
    assert len(pattern_set) == 1


def test_add_treats_negated_form_as_distinct() -> None:
    pattern_set = parse_patterns("*.md\n")

    updated, added = pattern_set.add("!*.md")

    assert added is True
    assert updated.to_text() == "*.md\n!*.md\n"


def test_add_ignores_comments_and_blanks() -> None:
    pattern_set = parse_patterns("dist/\n")

    for candidate in ("", "   ", "# comment"):
        updated, added = pattern_set.add(candidate)
        assert added is False
        assert updated is pattern_set


def test_deduplicate_keeps_first_occurrence_and_comments() -> None:
    pattern_set = parse_patterns("# deps\nnode_modules/\n*.log\n# again\nnode_modules/\n!*.log\n*.log\n")

    deduped, removed = pattern_set.deduplicate()

    assert removed == ["node_modules/", "*.log"]
    assert deduped.to_text() == "# deps\nnode_modules/\n*.log\n# again\n!*.log\n"


def test_matcher_agrees_with_pattern_set() -> None:
    pattern_set = parse_patterns("node_modules/\n*.log\n!important.log\n")
    matcher = PatternMatcher(pattern_set)
    cases = [
        ("node_modules", True),
        ("node_modules/pkg/index.js", False),
        ("src/app.js", False),
        ("logs/app.log", False),
        ("logs/important.log", False),
    ]

    for path, is_dir in cases:
        assert matcher.is_ignored(path, is_dir) == pattern_set.matches(path, is_dir)


def test_load_pattern_file_missing_returns_empty(tmp_path: Path) -> None:
    assert len(load_pattern_file(tmp_path / ".claudeignore")) == 0


def test_load_pattern_file_strips_bom(tmp_path: Path) -> None:
    path = tmp_path / ".claudeignore"
    path.write_bytes("\ufeffdist/\n".encode("utf-8"))

    pattern_set = load_pattern_file(path)

    assert [pattern.normalized for pattern in pattern_set] == ["dist/"]
