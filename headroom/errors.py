"""Typed errors raised by the analyzer and mutation layers."""

from __future__ import annotations

from pathlib import Path


class HeadroomError(Exception):
    """Base class for errors surfaced to callers of the core."""


class ParseError(HeadroomError):
    """Raised when an ignore file cannot be decoded as UTF-8 text."""


class NotFoundError(HeadroomError):
    """Raised when a settings file is absent."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Settings file not found: {path}")
        self.path = Path(path)


class InvalidJSONError(HeadroomError):
    """Raised when a settings file exists but is not a JSON object."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Invalid JSON in {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class UnknownVerbError(HeadroomError):
    """Raised when a verb name is not present in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown verb: {name}")
        self.name = name


class PersistError(HeadroomError):
    """Raised when a target file cannot be written atomically."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class PolicyError(HeadroomError):
    """Raised when policy forbids running a verb against a target."""


__all__ = [
    "HeadroomError",
    "InvalidJSONError",
    "NotFoundError",
    "ParseError",
    "PersistError",
    "PolicyError",
    "UnknownVerbError",
]
