"""Machine-readable findings report and exit codes for CI runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List

from . import __version__

EXIT_OK = 0
EXIT_FINDINGS = 8
EXIT_POLICY = 16
EXIT_RUNTIME = 32

TOOL_NAME = "TokenHeadroom"


@dataclass(frozen=True)
class Finding:
    id: int
    severity: str
    category: str
    message: str


class CIReport:
    """Collects findings raised while running actions."""

    def __init__(self, *, timestamp: datetime | None = None) -> None:
        moment = timestamp or datetime.now(UTC)
        self.timestamp = moment.strftime("%Y-%m-%dT%H:%M:%SZ")
        self.findings: List[Finding] = []

    def add_finding(self, severity: str, category: str, message: str) -> Finding:
        finding = Finding(
            id=len(self.findings) + 1,
            severity=severity,
            category=category,
            message=message,
        )
        self.findings.append(finding)
        return finding

    def exit_code(self) -> int:
        return EXIT_FINDINGS if self.findings else EXIT_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": TOOL_NAME,
            "version": __version__,
            "timestamp": self.timestamp,
            "findings": [asdict(finding) for finding in self.findings],
        }

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")


__all__ = [
    "CIReport",
    "EXIT_FINDINGS",
    "EXIT_OK",
    "EXIT_POLICY",
    "EXIT_RUNTIME",
    "Finding",
]
