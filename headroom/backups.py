"""Timestamped copies of target files taken before an apply."""

from __future__ import annotations

import shutil
from datetime import UTC, datetime
from pathlib import Path

from .logging import get_logger


class BackupStore:
    """Copies a file into the backup directory before it is overwritten."""

    def __init__(self, directory: Path, *, enabled: bool = True) -> None:
        self.directory = directory
        self.enabled = enabled
        self.logger = get_logger("backups")

    def backup(self, path: Path) -> Path | None:
        """Return the backup location, or None when disabled or nothing exists yet."""
        if not self.enabled or not path.is_file():
            return None
        self.directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.directory / f"{path.stem or path.name}_{stamp}.bak"
        shutil.copy2(path, target)
        self.logger.info("Backed up %s to %s", path, target)
        return target


__all__ = ["BackupStore"]
