"""Tests for headroom.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from headroom.config import (
    DEFAULT_DENY_PATTERNS,
    DEFAULT_IGNORE_PATTERNS,
    ConfigError,
    load_config,
)


def test_load_config_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.root == tmp_path.resolve()
    assert config.budget == 200000
    assert config.ignore_file == ".claudeignore"
    assert config.settings_file == ".claude/settings.json"
    assert config.analysis.hog_threshold == 1000
    assert config.analysis.top_n == 5
    assert [bucket.label for bucket in config.analysis.bucket_defs()] == ["commands", "docs"]
    assert config.recommendations.ignore_patterns == DEFAULT_IGNORE_PATTERNS
    assert config.recommendations.deny_patterns == DEFAULT_DENY_PATTERNS
    assert config.backups.enabled is True
    assert config.backup_dir == tmp_path.resolve() / ".claude" / "backups"


def test_load_config_overrides(tmp_path: Path) -> None:
    (tmp_path / ".headroom.yml").write_text(
        """
budget: 50000
ignore_file: .aiignore
analysis:
  hog_threshold: 250
  top_n: 3
  buckets:
    prompts: prompts
recommendations:
  ignore_patterns:
    - vendor/
  auto_include_match_threshold: 10
policy:
  editable:
    .aiignore: [deduplicate_patterns]
  immutable:
    - .claude/settings.json
backups:
  enabled: false
  dir: .backups
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.budget == 50000
    assert config.ignore_path == tmp_path.resolve() / ".aiignore"
    assert config.analysis.hog_threshold == 250
    assert config.analysis.top_n == 3
    assert config.analysis.buckets == {"prompts": "prompts"}
    assert config.recommendations.ignore_patterns == ["vendor/"]
    assert config.recommendations.deny_patterns == DEFAULT_DENY_PATTERNS
    assert config.recommendations.auto_include_match_threshold == 10
    assert config.policy.allowed_verbs(".aiignore") == ["deduplicate_patterns"]
    assert config.policy.is_immutable(".claude/settings.json") is True
    assert config.backups.enabled is False
    assert config.backup_dir == tmp_path.resolve() / ".backups"


def test_load_config_accepts_explicit_file(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("budget: 1234\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.budget == 1234
    assert config.root == tmp_path.resolve()


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".headroom.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).budget == 200000


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    (tmp_path / ".headroom.yml").write_text("budget: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_config_raises(tmp_path: Path) -> None:
    (tmp_path / ".headroom.yml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_custom_target_names_get_default_allow_lists(tmp_path: Path) -> None:
    (tmp_path / ".headroom.yml").write_text(
        "ignore_file: .aiignore\nsettings_file: conf/settings.json\n", encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.policy.allowed_verbs(".aiignore") == [
        "append_recommended_patterns",
        "deduplicate_patterns",
    ]
    assert "deduplicate_patterns" not in config.policy.allowed_verbs("conf/settings.json")
    assert config.policy.allowed_verbs(".claudeignore") is None


def test_non_utf8_config_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".headroom.yml").write_bytes(b"budget: \xff\xfe\n")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
