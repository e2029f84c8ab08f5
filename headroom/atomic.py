"""Crash-safe replacement of a file's contents."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .errors import PersistError


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a synced temp file renamed over the target.

    Readers see either the old contents or the new ones, never a partial file.
    On failure the temp file is removed and the original is left as it was.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = tempfile.NamedTemporaryFile(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as exc:
        raise PersistError(path, exc.strerror or str(exc)) from exc

    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        _copy_mode(path, temp_path)
        os.replace(temp_path, path)
    except OSError as exc:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        raise PersistError(path, exc.strerror or str(exc)) from exc

    _fsync_directory(path.parent)


def _copy_mode(source: Path, temp_path: Path) -> None:
    try:
        mode = stat.S_IMODE(source.stat().st_mode)
    except FileNotFoundError:
        # New files get the permissions a plain open() would have produced.
        umask = os.umask(0)
        os.umask(umask)
        mode = 0o666 & ~umask
    os.chmod(temp_path, mode)


def _fsync_directory(directory: Path) -> None:
    if os.name != "posix":
        return
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


__all__ = ["atomic_write_bytes"]
