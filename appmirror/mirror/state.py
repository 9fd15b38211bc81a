"""
Run State — Per-app outcomes of an import or update run.

A ``RunReport`` is returned by every orchestrator run and can be saved as
JSON (e.g. for CI artifacts). It is separate from the mirror itself, so
reports never affect what a later run does.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

MODE_IMPORT = "import"
MODE_UPDATE = "update"

# App outcome statuses
STATUS_FETCHED = "fetched"
STATUS_UPDATED = "updated"
STATUS_UP_TO_DATE = "up_to_date"
STATUS_LOCAL_NEWER = "local_newer"
STATUS_UNRESOLVED = "unresolved"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class AppOutcome:
    """What happened to one app during a run."""

    app: str
    status: str
    upstream: Optional[str] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status not in (STATUS_FAILED, STATUS_UNRESOLVED, STATUS_SKIPPED)


@dataclass
class RunReport:
    """Ordered outcomes of a single run."""

    mode: str
    root: str
    started_at: str = field(default_factory=_now_iso)
    finished_at: Optional[str] = None
    outcomes: List[AppOutcome] = field(default_factory=list)

    def record(
        self,
        app: str,
        status: str,
        upstream: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> AppOutcome:
        outcome = AppOutcome(app=app, status=status, upstream=upstream, detail=detail)
        self.outcomes.append(outcome)
        return outcome

    def finish(self) -> "RunReport":
        self.finished_at = _now_iso()
        return self

    def get(self, app: str) -> Optional[AppOutcome]:
        for outcome in self.outcomes:
            if outcome.app == app:
                return outcome
        return None

    def counts(self) -> Dict[str, int]:
        """Count outcomes by status."""
        counts: Dict[str, int] = {}
        for outcome in self.outcomes:
            counts[outcome.status] = counts.get(outcome.status, 0) + 1
        return counts

    @property
    def problems(self) -> List[AppOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def to_dict(self) -> Dict:
        return {
            "mode": self.mode,
            "root": self.root,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "counts": self.counts(),
            "outcomes": [asdict(o) for o in self.outcomes],
        }

    def save(self, path: Path) -> None:
        """Save the report as JSON (temp file, then rename)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")

        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
            f.write("\n")

        temp_path.replace(path)
        logger.info(f"Run report saved → {path}")
