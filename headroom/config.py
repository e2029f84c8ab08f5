"""Configuration loading for headroom (.headroom.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import BucketDef
from .policy import Policy

CONFIG_FILENAME = ".headroom.yml"

DEFAULT_IGNORE_PATTERNS: List[str] = [
    "node_modules/",
    ".next/",
    "dist/",
    "build/",
    "out/",
    "_build/",
    "coverage/",
    "logs/",
    "public/export/",
    "docs/archive/",
    "docs/kb/",
]

DEFAULT_DENY_PATTERNS: List[str] = [
    "Read(./node_modules/**)",
    "Read(./.next/**)",
    "Read(./logs/**)",
    "Read(./public/export/**)",
    "Read(./docs/archive/**)",
    "Read(./_build/**)",
]

DEFAULT_BUCKETS: Dict[str, str] = {
    "commands": ".claude/commands",
    "docs": "docs",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AnalysisConfig:
    """Thresholds and bucket definitions for analysis reports."""

    hog_threshold: int = 1000
    top_n: int = 5
    bucket_top_k: int = 20
    buckets: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BUCKETS))

    def bucket_defs(self) -> List[BucketDef]:
        return [
            BucketDef(label=label, sub_root=sub_root, top_k=self.bucket_top_k)
            for label, sub_root in self.buckets.items()
        ]


@dataclass
class RecommendationConfig:
    """Candidate edits offered by the suggest/apply actions."""

    ignore_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    deny_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_DENY_PATTERNS))
    auto_include_match_threshold: int = 50


@dataclass
class BackupConfig:
    """Where pre-apply copies of target files go."""

    enabled: bool = True
    dir: str = ".claude/backups"


@dataclass
class HeadroomConfig:
    """Represents the settings defined in .headroom.yml."""

    root: Path
    budget: int = 200000
    ignore_file: str = ".claudeignore"
    settings_file: str = ".claude/settings.json"
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    policy: Policy = field(default_factory=Policy)
    backups: BackupConfig = field(default_factory=BackupConfig)

    @property
    def ignore_path(self) -> Path:
        return self.root / self.ignore_file

    @property
    def settings_path(self) -> Path:
        return self.root / self.settings_file

    @property
    def backup_dir(self) -> Path:
        return self.root / self.backups.dir


def load_config(config_path: Path) -> HeadroomConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return HeadroomConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = HeadroomConfig(root=root)
    budget = _as_int(data.get("budget"))
    if budget is not None:
        config.budget = budget
    config.ignore_file = _as_str(data.get("ignore_file")) or config.ignore_file
    config.settings_file = _as_str(data.get("settings_file")) or config.settings_file
    config.policy = Policy.for_targets(config.ignore_file, config.settings_file)

    analysis_data = _as_dict(data.get("analysis"))
    if analysis_data:
        analysis = config.analysis
        analysis.hog_threshold = _as_int(analysis_data.get("hog_threshold"), analysis.hog_threshold)
        analysis.top_n = _as_int(analysis_data.get("top_n"), analysis.top_n)
        analysis.bucket_top_k = _as_int(analysis_data.get("bucket_top_k"), analysis.bucket_top_k)
        if "buckets" in analysis_data:
            analysis.buckets = _as_str_dict(analysis_data.get("buckets"))

    rec_data = _as_dict(data.get("recommendations"))
    if rec_data:
        rec = config.recommendations
        if "ignore_patterns" in rec_data:
            rec.ignore_patterns = _as_str_list(rec_data.get("ignore_patterns"))
        if "deny_patterns" in rec_data:
            rec.deny_patterns = _as_str_list(rec_data.get("deny_patterns"))
        rec.auto_include_match_threshold = _as_int(
            rec_data.get("auto_include_match_threshold"), rec.auto_include_match_threshold
        )

    policy_data = _as_dict(data.get("policy"))
    if policy_data:
        if "editable" in policy_data:
            editable = _as_dict(policy_data.get("editable"))
            config.policy.editable = {
                str(target): _as_str_list(verbs) for target, verbs in editable.items()
            }
        if "immutable" in policy_data:
            config.policy.immutable = _as_str_list(policy_data.get("immutable"))

    backup_data = _as_dict(data.get("backups"))
    if backup_data:
        enabled = _as_bool(backup_data.get("enabled"))
        if enabled is not None:
            config.backups.enabled = enabled
        config.backups.dir = _as_str(backup_data.get("dir")) or config.backups.dir

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid UTF-8: {exc.reason}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


def _as_str_dict(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items() if isinstance(item, str)}


__all__ = [
    "AnalysisConfig",
    "BackupConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_DENY_PATTERNS",
    "DEFAULT_IGNORE_PATTERNS",
    "HeadroomConfig",
    "RecommendationConfig",
    "load_config",
]
