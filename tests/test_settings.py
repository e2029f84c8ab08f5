"""Tests for headroom.settings."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from headroom.errors import InvalidJSONError, NotFoundError
from headroom.settings import SettingsDocument


def test_round_trip_preserves_unknown_keys_and_order() -> None:
    text = json.dumps(
        {
            "model": "default",
            "alwaysInclude": ["README.md"],
            "hooks": {"pre": ["lint"], "post": []},
            "permissions": {"allow": ["Read(./src/**)"], "deny": []},
        },
        indent=2,
    ) + "\n"

    document = SettingsDocument.from_text(text)

    assert document.to_text() == text
    assert list(document.data) == ["model", "alwaysInclude", "hooks", "permissions"]


def test_indent_style_is_detected() -> None:
    tabbed = json.dumps({"a": [1]}, indent="\t")
    four = json.dumps({"a": [1]}, indent=4)
    compact = '{"a": [1]}'

    assert SettingsDocument.from_text(tabbed).indent == "\t"
    assert SettingsDocument.from_text(four).indent == 4
    assert SettingsDocument.from_text(compact).indent is None
    assert SettingsDocument.from_text(compact).to_text() == compact


def test_missing_trailing_newline_is_kept_missing() -> None:
    text = json.dumps({"a": 1}, indent=2)

    document = SettingsDocument.from_text(text)

    assert document.trailing_newline is False
    assert document.to_text() == text


def test_non_ascii_text_is_written_unescaped() -> None:
    document = SettingsDocument.from_text('{\n  "name": "café"\n}\n')

    assert "café" in document.to_text()
    assert document.serialize().decode("utf-8") == document.to_text()


def test_invalid_json_raises() -> None:
    with pytest.raises(InvalidJSONError):
        SettingsDocument.from_text("{not json")


def test_non_object_root_raises() -> None:
    with pytest.raises(InvalidJSONError) as excinfo:
        SettingsDocument.from_text("[1, 2]")

    assert "object" in excinfo.value.reason


def test_load_missing_file_raises_not_found(tmp_path: Path) -> None:
    target = tmp_path / ".claude" / "settings.json"

    with pytest.raises(NotFoundError) as excinfo:
        SettingsDocument.load(target)

    assert excinfo.value.path == target
    assert not target.exists()


def test_load_rejects_non_utf8(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_bytes(b'{"a": "\xff"}')

    with pytest.raises(InvalidJSONError):
        SettingsDocument.load(target)


def test_field_accessors_tolerate_absent_members() -> None:
    document = SettingsDocument.from_text("{}")

    assert document.always_include == []
    assert document.permissions_deny == []
    assert document.auto_include is None


def test_set_permissions_deny_creates_permissions_object() -> None:
    document = SettingsDocument.from_text('{\n  "other": true\n}\n')

    document.set_permissions_deny(["Read(./logs/**)"])

    assert document.data == {"other": True, "permissions": {"deny": ["Read(./logs/**)"]}}


def test_set_permissions_deny_rejects_wrong_shape() -> None:
    document = SettingsDocument.from_text('{"permissions": {"deny": "nope"}}')

    with pytest.raises(InvalidJSONError):
        document.set_permissions_deny(["Read(./logs/**)"])


def test_copy_is_independent() -> None:
    document = SettingsDocument.from_text('{"alwaysInclude": ["a"]}')

    clone = document.copy()
    clone.set_always_include([])

    assert document.always_include == ["a"]
    assert clone.always_include == []
