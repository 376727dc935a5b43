#!/usr/bin/env python3
"""
Build Report - per-artifact outcomes and timings of one site build.

A failed artifact is recorded with its error text; it never stops the
others. The report is written as JSON next to the build data.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

STATUS_BUILT = "built"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


@dataclass
class ArtifactResult:
    """Outcome of generating one output file."""

    name: str
    status: str = STATUS_BUILT
    duration_ms: float = 0.0
    path: Optional[str] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED


class BuildReport:
    """Collects artifact results and counters for one build run."""

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.run_id: Optional[str] = None
        self.started_at: Optional[datetime] = None
        self.context: Dict[str, Any] = {}
        self.counters: Dict[str, Any] = {}
        self.artifacts: List[ArtifactResult] = []

    def start(self, context: Optional[Dict[str, Any]] = None) -> str:
        """Begin a new build run."""
        self._reset()
        self.run_id = str(uuid.uuid4())
        self.started_at = datetime.now(timezone.utc)
        self.context = dict(context or {})
        return self.run_id

    def record(self, result: ArtifactResult) -> None:
        self.artifacts.append(result)

    def set_counter(self, key: str, value: Any) -> None:
        self.counters[key] = value

    def increment_counter(self, key: str, amount: int = 1) -> None:
        current = self.counters.get(key, 0)
        if not isinstance(current, (int, float)):
            current = 0
        self.counters[key] = current + amount

    @property
    def failures(self) -> List[ArtifactResult]:
        return [a for a in self.artifacts if a.status == STATUS_FAILED]

    @property
    def success(self) -> bool:
        return not self.failures and not self.counters.get("content_errors")

    def to_dict(self) -> Dict[str, Any]:
        if not self.run_id or not self.started_at:
            self.start()

        finished_at = datetime.now(timezone.utc)
        return self._normalize_value(
            {
                "run_id": self.run_id,
                "started_at": self.started_at,
                "finished_at": finished_at,
                "duration_ms": round((finished_at - self.started_at).total_seconds() * 1000, 2),
                "success": self.success,
                "context": self.context,
                "counters": self.counters,
                "artifacts": [artifact.__dict__ for artifact in self.artifacts],
            }
        )

    def finalize(self, output_path: Path) -> Path:
        """Write the report as JSON and return its path."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return output_path

    def _normalize_value(self, value: Any) -> Any:
        """Convert non-JSON-native values recursively into serializable values."""
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, dict):
            return {str(k): self._normalize_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._normalize_value(v) for v in value]
        return value
