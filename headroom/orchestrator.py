"""Non-interactive actions built on the analysis engine and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List

from .analysis import AnalysisEngine, analyze
from .backups import BackupStore
from .ci import CIReport
from .config import HeadroomConfig, load_config
from .dispatcher import APPLY, PREVIEW, Dispatcher
from .errors import InvalidJSONError, NotFoundError
from .logging import get_logger
from .models import AnalysisReport
from .settings import SettingsDocument

ACTIONS = (
    "analyze.quick",
    "analyze.deep",
    "suggest.ignores",
    "suggest.settings",
    "suggest.commands",
    "suggest.docs",
    "apply.ignores",
    "apply.settings",
    "tools.validate_json",
)


@dataclass
class ActionOutcome:
    """Result of running one action by ID."""

    action_id: str
    payload: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action_id, **self.payload}


class Orchestrator:
    """Coordinates analysis and verb dispatch for a single project root."""

    def __init__(
        self,
        root: Path | str,
        config: HeadroomConfig | None = None,
        *,
        engine: AnalysisEngine | None = None,
        dispatcher: Dispatcher | None = None,
        report: CIReport | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.config = config or load_config(self.root)
        self.engine = engine or AnalysisEngine()
        self.dispatcher = dispatcher or Dispatcher(
            self.root,
            policy=self.config.policy,
            backups=BackupStore(self.config.backup_dir, enabled=self.config.backups.enabled),
            ignore_file=self.config.ignore_file,
            settings_file=self.config.settings_file,
        )
        self.report = report
        self.logger = get_logger("orchestrator")
        self._handlers: Dict[str, Callable[[bool], Dict[str, Any]]] = {
            "analyze.quick": self._analyze_quick,
            "analyze.deep": self._analyze_deep,
            "suggest.ignores": self._suggest_ignores,
            "suggest.settings": self._suggest_settings,
            "suggest.commands": lambda _dry_run: self._suggest_bucket("commands"),
            "suggest.docs": lambda _dry_run: self._suggest_bucket("docs"),
            "apply.ignores": self._apply_ignores,
            "apply.settings": self._apply_settings,
            "tools.validate_json": self._validate_json,
        }

    @staticmethod
    def list_actions() -> List[str]:
        return list(ACTIONS)

    def run(self, action_id: str, *, dry_run: bool = False) -> ActionOutcome:
        """Run ``action_id``; ``dry_run`` turns apply actions into previews."""
        handler = self._handlers.get(action_id)
        if handler is None:
            raise ValueError(f"Unknown action: {action_id}")
        self.logger.info("Running action %s%s", action_id, " (dry-run)" if dry_run else "")
        return ActionOutcome(action_id=action_id, payload=handler(dry_run))

    def analyze(self) -> AnalysisReport:
        """Return a fresh report for the project root."""
        analysis = self.config.analysis
        report = analyze(
            self.root,
            self.config.ignore_path,
            analysis.bucket_defs(),
            hog_threshold=analysis.hog_threshold,
            top_n=analysis.top_n,
            budget=self.config.budget,
            targets=(self.config.ignore_file, self.config.settings_file),
            exclude=self._own_paths(),
            engine=self.engine,
        )
        for warning in report.warnings:
            self._finding("warning", "analysis", f"Unreadable path {warning.path}: {warning.reason}")
        if report.headroom < 0:
            self._finding(
                "warning",
                "budget",
                f"Estimated tokens {report.total_cost} exceed the budget of {report.budget}",
            )
        return report

    # ------------------------------------------------------------------
    # Actions

    def _analyze_quick(self, dry_run: bool) -> Dict[str, Any]:
        return self.analyze().summary()

    def _analyze_deep(self, dry_run: bool) -> Dict[str, Any]:
        return self.analyze().to_dict()

    def _suggest_ignores(self, dry_run: bool) -> Dict[str, Any]:
        report = self.analyze()
        for hog in report.hogs:
            self._finding("info", "ignore", f"Unignored path {hog.path} costs {hog.cost} tokens")

        preview = self.dispatcher.dispatch(
            self.config.ignore_file,
            "append_recommended_patterns",
            {"patterns": self.config.recommendations.ignore_patterns},
            mode=PREVIEW,
        )
        for pattern in preview.summary.added:
            self._finding("info", "ignore", f"Recommended ignore pattern missing: {pattern}")
        return {
            "hog_threshold": report.hog_threshold,
            "hogs": [hog.to_dict() for hog in report.hogs],
            "recommended": list(preview.summary.added),
        }

    def _suggest_settings(self, dry_run: bool) -> Dict[str, Any]:
        target = self.config.settings_file
        try:
            document = SettingsDocument.load(self.config.settings_path)
        except NotFoundError as exc:
            return {"skipped": True, "reason": str(exc)}

        prune = self.dispatcher.dispatch(target, "prune_alwaysInclude", mode=PREVIEW)
        deny = self.dispatcher.dispatch(
            target,
            "add_permissions_deny",
            {"patterns": self.config.recommendations.deny_patterns},
            mode=PREVIEW,
        )
        tighten = self.dispatcher.dispatch(
            target,
            "tighten_auto_include",
            {"match_threshold": self.config.recommendations.auto_include_match_threshold},
            mode=PREVIEW,
        )
        for path in prune.summary.removed:
            self._finding("warning", "settings", f"alwaysInclude entry does not exist: {path}")
        for pattern in deny.summary.added:
            self._finding("info", "settings", f"Recommended permissions.deny entry missing: {pattern}")
        return {
            "autoInclude": document.auto_include,
            "stale_always_include": list(prune.summary.removed),
            "missing_deny": list(deny.summary.added),
            "auto_include_proposals": [dict(item) for item in tighten.summary.proposals],
            "note": "Review proposals; apply with apply.settings or edit the file manually.",
        }

    def _suggest_bucket(self, label: str) -> Dict[str, Any]:
        report = self.analyze()
        bucket = report.bucket(label)
        if bucket is None:
            return {"bucket": label, "entries": [], "note": f"No '{label}' bucket configured"}
        return {"bucket": label, **bucket.to_dict()}

    def _apply_ignores(self, dry_run: bool) -> Dict[str, Any]:
        mode = PREVIEW if dry_run else APPLY
        target = self.config.ignore_file
        steps = [
            self.dispatcher.dispatch(
                target,
                "append_recommended_patterns",
                {"patterns": self.config.recommendations.ignore_patterns},
                mode=mode,
            ),
            self.dispatcher.dispatch(target, "deduplicate_patterns", mode=mode),
        ]
        return {"mode": mode, "steps": [step.to_dict() for step in steps]}

    def _apply_settings(self, dry_run: bool) -> Dict[str, Any]:
        mode = PREVIEW if dry_run else APPLY
        target = self.config.settings_file
        recommendations = self.config.recommendations
        plan = [
            ("prune_alwaysInclude", {}),
            ("add_permissions_deny", {"patterns": recommendations.deny_patterns}),
            (
                "tighten_auto_include",
                {"match_threshold": recommendations.auto_include_match_threshold},
            ),
        ]
        steps = []
        for verb, args in plan:
            try:
                result = self.dispatcher.dispatch(target, verb, args, mode=mode)
            except NotFoundError as exc:
                self.logger.warning("Skipping settings edits: %s", exc)
                return {"mode": mode, "skipped": True, "reason": str(exc), "steps": steps}
            steps.append(result.to_dict())
        return {"mode": mode, "steps": steps}

    def _validate_json(self, dry_run: bool) -> Dict[str, Any]:
        path = self.config.settings_path
        try:
            SettingsDocument.load(path)
        except NotFoundError:
            return {"path": str(path), "valid": False, "error": "file not found"}
        except InvalidJSONError as exc:
            self._finding("error", "settings", str(exc))
            return {"path": str(path), "valid": False, "error": exc.reason}
        return {"path": str(path), "valid": True}

    # ------------------------------------------------------------------
    # Internal helpers

    def _own_paths(self) -> List[str]:
        # Backups written by apply actions are not part of the project context.
        try:
            return [self.config.backup_dir.resolve().relative_to(self.root).as_posix()]
        except ValueError:
            return []

    def _finding(self, severity: str, category: str, message: str) -> None:
        if self.report is not None:
            self.report.add_finding(severity, category, message)


__all__ = ["ACTIONS", "ActionOutcome", "Orchestrator"]
