"""Resolves verbs against target files and runs them in preview or apply mode."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .atomic import atomic_write_bytes
from .backups import BackupStore
from .errors import PersistError, PolicyError
from .logging import get_logger
from .models import ChangeSummary
from .patterns import PatternSet, load_pattern_file
from .policy import Policy, normalise_target
from .settings import SettingsDocument
from .verbs import (
    IGNORE_TARGET,
    SETTINGS_TARGET,
    Filesystem,
    LocalFilesystem,
    Verb,
    VerbContext,
    resolve_verb,
)

PREVIEW = "preview"
APPLY = "apply"
MODES = (PREVIEW, APPLY)


class Stage(str, Enum):
    """Lifecycle of a single verb invocation."""

    IDLE = "idle"
    LOADED = "loaded"
    COMPUTED = "computed"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class DispatchResult:
    """What a dispatch did; ``summary`` has the same shape in both modes."""

    summary: ChangeSummary
    mode: str
    stage: Stage
    persisted: bool = False
    backup_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = self.summary.to_dict()
        payload.update(
            {
                "mode": self.mode,
                "stage": self.stage.value,
                "persisted": self.persisted,
                "backup": str(self.backup_path) if self.backup_path else None,
            }
        )
        return payload


@dataclass(frozen=True)
class _Computed:
    verb: Verb
    path: Path
    state: Any
    summary: ChangeSummary


class Dispatcher:
    """Runs registered verbs against files below a project root.

    State is loaded from disk on every call, so an apply never writes back
    anything remembered from an earlier preview.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        policy: Policy | None = None,
        backups: BackupStore | None = None,
        fs: Filesystem | None = None,
        ignore_file: str = ".claudeignore",
        settings_file: str = ".claude/settings.json",
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.policy = policy or Policy.for_targets(ignore_file, settings_file)
        self.target_kinds = {
            normalise_target(ignore_file): IGNORE_TARGET,
            normalise_target(settings_file): SETTINGS_TARGET,
        }
        self.backups = backups
        self.fs = fs or LocalFilesystem(self.root)
        self.logger = get_logger("dispatcher")

    def dispatch(
        self,
        target_file: str,
        verb_name: str,
        args: Mapping[str, Any] | None = None,
        mode: str = PREVIEW,
    ) -> DispatchResult:
        verb = resolve_verb(verb_name)
        if mode not in MODES:
            raise ValueError(f"Unknown dispatch mode '{mode}'; expected one of {', '.join(MODES)}")

        path = self._resolve_target(target_file)
        target = self._relative_target(path)
        self.policy.check(target, verb.name)
        self._check_kind(verb, target)

        state = self._load(verb, path)
        stage = Stage.LOADED
        self.logger.debug("%s: loaded %s (%s)", verb.name, path, stage.value)

        computed = self._compute(verb, path, target, state, args or {})
        stage = Stage.COMPUTED
        self.logger.debug("%s: %s (%s)", verb.name, computed.summary.to_dict(), stage.value)

        if mode == PREVIEW:
            return DispatchResult(summary=computed.summary, mode=mode, stage=stage)

        if not computed.summary.changed:
            self.logger.info("%s: no changes for %s", verb.name, target)
            return DispatchResult(summary=computed.summary, mode=mode, stage=stage)

        backup_path = self._persist(computed)
        return DispatchResult(
            summary=computed.summary,
            mode=mode,
            stage=Stage.PERSISTED,
            persisted=True,
            backup_path=backup_path,
        )

    def preview(
        self, target_file: str, verb_name: str, args: Mapping[str, Any] | None = None
    ) -> DispatchResult:
        return self.dispatch(target_file, verb_name, args, mode=PREVIEW)

    def apply(
        self, target_file: str, verb_name: str, args: Mapping[str, Any] | None = None
    ) -> DispatchResult:
        return self.dispatch(target_file, verb_name, args, mode=APPLY)

    def _resolve_target(self, target_file: str) -> Path:
        path = Path(target_file).expanduser()
        if not path.is_absolute():
            path = self.root / path
        return Path(os.path.normpath(path))

    def _relative_target(self, path: Path) -> str:
        for candidate in (path, path.resolve()):
            try:
                return candidate.relative_to(self.root).as_posix()
            except ValueError:
                continue
        return path.as_posix()

    def target_kind(self, target: str) -> str:
        """Return whether ``target`` is an ignore file or a settings file."""
        normalised = normalise_target(target)
        kind = self.target_kinds.get(normalised)
        if kind is not None:
            return kind
        return SETTINGS_TARGET if normalised.endswith(".json") else IGNORE_TARGET

    def _check_kind(self, verb: Verb, target: str) -> None:
        kind = self.target_kind(target)
        if verb.target_kind != kind:
            raise PolicyError(
                f"Verb '{verb.name}' edits {verb.target_kind} files; '{target}' is a {kind} file"
            )

    def _load(self, verb: Verb, path: Path) -> PatternSet | SettingsDocument:
        if verb.target_kind == IGNORE_TARGET:
            return load_pattern_file(path)
        return SettingsDocument.load(path)

    def _compute(
        self,
        verb: Verb,
        path: Path,
        target_file: str,
        state: Any,
        args: Mapping[str, Any],
    ) -> _Computed:
        context = VerbContext(target=target_file, fs=self.fs)
        new_state, summary = verb.compute(state, args, context)
        return _Computed(verb=verb, path=path, state=new_state, summary=summary)

    def _persist(self, computed: _Computed) -> Optional[Path]:
        # Serialize before touching the disk so a failure leaves the target intact.
        if isinstance(computed.state, PatternSet):
            data = computed.state.to_bytes()
        else:
            data = computed.state.serialize()

        backup_path = None
        if self.backups is not None:
            try:
                backup_path = self.backups.backup(computed.path)
            except OSError as exc:
                raise PersistError(computed.path, f"backup failed: {exc}") from exc
        atomic_write_bytes(computed.path, data)
        self.logger.info(
            "%s: updated %s%s",
            computed.verb.name,
            computed.path,
            f" (backup: {backup_path})" if backup_path else "",
        )
        return backup_path


__all__ = ["APPLY", "DispatchResult", "Dispatcher", "MODES", "PREVIEW", "Stage"]
