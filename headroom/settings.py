"""Round-trip preserving model of the JSON settings file."""

from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import InvalidJSONError, NotFoundError

ALWAYS_INCLUDE_KEY = "alwaysInclude"
PERMISSIONS_KEY = "permissions"
DENY_KEY = "deny"
AUTO_INCLUDE_KEY = "autoInclude"

_INDENT_PATTERN = re.compile(r"\n([ \t]+)\S")


class SettingsDocument:
    """Settings JSON held as the parsed mapping, edited in place.

    Only ``alwaysInclude``, ``permissions.deny`` and ``autoInclude`` are
    interpreted; every other member is carried through untouched and written
    back in its original position.
    """

    def __init__(
        self,
        data: Dict[str, Any],
        *,
        path: Path | None = None,
        indent: int | str | None = 2,
        trailing_newline: bool = True,
    ) -> None:
        self._data = data
        self.path = path
        self.indent = indent
        self.trailing_newline = trailing_newline

    @classmethod
    def load(cls, path: Path | str) -> "SettingsDocument":
        """Read and parse ``path``; never creates the file."""
        settings_path = Path(path)
        try:
            raw = settings_path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(settings_path) from exc
        except IsADirectoryError as exc:
            raise NotFoundError(settings_path) from exc
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise InvalidJSONError(settings_path, f"not UTF-8 ({exc.reason})") from exc
        return cls.from_text(text, path=settings_path)

    @classmethod
    def from_text(cls, text: str, *, path: Path | None = None) -> "SettingsDocument":
        label = path if path is not None else "<settings>"
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidJSONError(label, exc.msg) from exc
        if not isinstance(data, dict):
            raise InvalidJSONError(label, "top-level value must be an object")
        return cls(
            data,
            path=path,
            indent=_detect_indent(text),
            trailing_newline=text.endswith("\n"),
        )

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def copy(self) -> "SettingsDocument":
        return SettingsDocument(
            copy.deepcopy(self._data),
            path=self.path,
            indent=self.indent,
            trailing_newline=self.trailing_newline,
        )

    @property
    def always_include(self) -> List[Any]:
        value = self._data.get(ALWAYS_INCLUDE_KEY)
        return list(value) if isinstance(value, list) else []

    def set_always_include(self, entries: List[Any]) -> None:
        self._data[ALWAYS_INCLUDE_KEY] = list(entries)

    @property
    def permissions_deny(self) -> List[Any]:
        permissions = self._data.get(PERMISSIONS_KEY)
        if not isinstance(permissions, dict):
            return []
        value = permissions.get(DENY_KEY)
        return list(value) if isinstance(value, list) else []

    def set_permissions_deny(self, entries: List[Any]) -> None:
        permissions = self._data.get(PERMISSIONS_KEY)
        if permissions is None:
            permissions = {}
            self._data[PERMISSIONS_KEY] = permissions
        elif not isinstance(permissions, dict):
            raise InvalidJSONError(
                self.path or "<settings>", f"'{PERMISSIONS_KEY}' must be an object"
            )
        existing = permissions.get(DENY_KEY)
        if existing is not None and not isinstance(existing, list):
            raise InvalidJSONError(
                self.path or "<settings>", f"'{PERMISSIONS_KEY}.{DENY_KEY}' must be an array"
            )
        permissions[DENY_KEY] = list(entries)

    @property
    def auto_include(self) -> Optional[Any]:
        return copy.deepcopy(self._data.get(AUTO_INCLUDE_KEY))

    def to_text(self) -> str:
        text = json.dumps(self._data, indent=self.indent, ensure_ascii=False)
        if self.trailing_newline:
            text += "\n"
        return text

    def serialize(self) -> bytes:
        return self.to_text().encode("utf-8")


def _detect_indent(text: str) -> int | str | None:
    if "\n" not in text.strip():
        return None
    match = _INDENT_PATTERN.search(text)
    if match is None:
        return 2
    whitespace = match.group(1)
    if "\t" in whitespace:
        return "\t"
    return len(whitespace)


__all__ = ["SettingsDocument"]
