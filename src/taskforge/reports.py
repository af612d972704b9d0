"""JSON session logs for pipeline runs."""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


@dataclass
class StageEntry:
    """Outcome of one pipeline stage."""

    stage: str
    status: str
    detail: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionLog:
    """Stage-by-stage record of one run, written as JSON for operators."""

    issue_number: int | None = None
    session_id: int = field(default_factory=lambda: int(time.time() * 1000))
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    entries: list[StageEntry] = field(default_factory=list)

    def record(self, stage: str, status: str, detail: str = "", **data: Any) -> None:
        self.entries.append(StageEntry(stage=stage, status=status, detail=detail, data=data))

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "issue_number": self.issue_number,
            "started_at": self.started_at,
            "entries": [vars(entry) for entry in self.entries],
        }

    def write(self, log_dir: Path | str) -> Path | None:
        """Write the log under ``log_dir``. Failures are logged, not raised."""
        directory = Path(log_dir)
        suffix = f"issue-{self.issue_number}" if self.issue_number is not None else "run"
        path = directory / f"session-{suffix}-{self.session_id}.json"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.to_dict(), indent=2, default=str), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write session log {path}: {e}")
            return None
        return path
