"""
Mirror Verification — Read-only structural checks of the local mirror.

Every entry directory must contain a config.json and a
docker-compose.json that both parse as JSON. Nothing is written and no
network access happens.

## Usage

    from appmirror.mirror.verify import check_all

    result = check_all(Path("apps"))
    if not result.passed:
        for failure in result.failures:
            print(failure)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import LocalReadError
from ..validation import ValidationError, validate_json_file
from .models import REQUIRED_ARTIFACTS, ArtifactKind
from .store import MirrorStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationFailure:
    """One failed check: which app, which file, and why."""

    app: str
    file: str
    reason: str

    def __str__(self) -> str:
        return f"[FAIL] {self.app} {self.file}: {self.reason}"


@dataclass
class VerifyResult:
    """Outcome of verifying a whole mirror."""

    checked: int = 0
    failures: List[ValidationFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict:
        return {
            "passed": self.passed,
            "checked": self.checked,
            "failures": [asdict(f) for f in self.failures],
        }


def check_entry(entry_dir: Path) -> List[ValidationFailure]:
    """Check one entry's required artifacts."""
    failures = []
    for kind in REQUIRED_ARTIFACTS:
        path = entry_dir / kind.value
        if not path.exists():
            failures.append(ValidationFailure(entry_dir.name, kind.value, "missing"))
            continue
        try:
            validate_json_file(path, kind.value)
        except ValidationError as e:
            failures.append(ValidationFailure(entry_dir.name, kind.value, e.message))
    return failures


def check_all(mirror_root: Path) -> VerifyResult:
    """
    Verify every entry under the mirror root.

    Raises:
        MirrorRootMissing: If the mirror root does not exist
    """
    store = MirrorStore(mirror_root)
    result = VerifyResult()

    for name in store.entry_names():
        result.checked += 1
        for failure in check_entry(store.entry_path(name)):
            logger.error(str(failure), extra={"app": name, "mode": "verify"})
            result.failures.append(failure)

    if result.passed:
        logger.info(f"All {result.checked} apps verified successfully")
    else:
        logger.error(f"Verification failed: {len(result.failures)} problem(s)")
    return result


@dataclass
class EntrySummary:
    """Read-only summary of one entry for status listings."""

    app: str
    version: Optional[str]
    artifacts: List[str]
    error: Optional[str] = None


def list_entries(mirror_root: Path) -> List[EntrySummary]:
    """
    Summarize every entry: local version and which artifacts exist.

    Raises:
        MirrorRootMissing: If the mirror root does not exist
    """
    store = MirrorStore(mirror_root)
    summaries = []

    for name in store.entry_names():
        present = [kind.value for kind in ArtifactKind if store.has_artifact(name, kind)]
        try:
            version: Optional[str] = store.load_config(name).version
            error = None
        except LocalReadError as e:
            version = None
            error = e.reason
        summaries.append(EntrySummary(app=name, version=version, artifacts=present, error=error))

    return summaries
