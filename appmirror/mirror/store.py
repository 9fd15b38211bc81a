"""
Mirror Store — Filesystem access for the local mirror.

All artifact writes are atomic (write to a temp file, then rename), so a
failed run never leaves a half-written artifact behind. The store counts
the writes and directory creations it performs; a run that changes
nothing on disk leaves ``writes`` at zero.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..errors import LocalReadError, MirrorRootMissing
from ..validation import ValidationError, parse_json_bytes, validate_file_readable
from .models import METADATA_DIR, AppConfigDocument, ArtifactKind

logger = logging.getLogger(__name__)


class MirrorStore:
    """Read and write mirror entries under a root directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.writes = 0

    def require_root(self) -> None:
        """Raise MirrorRootMissing unless the root is an existing directory."""
        if not self.root.is_dir():
            raise MirrorRootMissing(self.root)

    def ensure_root(self) -> None:
        if not self.root.is_dir():
            self.root.mkdir(parents=True)
            self.writes += 1
            logger.info(f"Created mirror root {self.root}")

    def entry_names(self) -> List[str]:
        """Entry directory names, sorted for a stable processing order."""
        self.require_root()
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def entry_path(self, name: str) -> Path:
        return self.root / name

    def artifact_path(self, name: str, kind: ArtifactKind) -> Path:
        return self.root / name / kind.value

    def ensure_entry(self, name: str) -> Path:
        """Create the entry directory and its metadata subdirectory if absent."""
        entry = self.entry_path(name)
        for directory in (entry, entry / METADATA_DIR):
            if not directory.is_dir():
                directory.mkdir(parents=True)
                self.writes += 1
        return entry

    def has_artifact(self, name: str, kind: ArtifactKind) -> bool:
        return self.artifact_path(name, kind).is_file()

    def write_artifact(self, name: str, kind: ArtifactKind, content: bytes) -> Path:
        """Atomically replace one artifact."""
        path = self.artifact_path(name, kind)
        path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = path.with_name(f".{path.name}.tmp")
        try:
            temp_path.write_bytes(content)
            temp_path.replace(path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

        self.writes += 1
        logger.debug(f"Wrote {path} ({len(content)} bytes)")
        return path

    def load_config(self, name: str) -> AppConfigDocument:
        """
        Load and parse an entry's config.json.

        Raises:
            LocalReadError: If the file is missing, unreadable or malformed
        """
        path = self.artifact_path(name, ArtifactKind.CONFIG)
        try:
            content = validate_file_readable(path, ArtifactKind.CONFIG.value)
            data = parse_json_bytes(content, ArtifactKind.CONFIG.value)
        except ValidationError as e:
            raise LocalReadError(path, e.message, app=name)

        return parse_config_document(data, path, app=name)


def parse_config_document(data, path: Union[Path, str], app: Optional[str] = None) -> AppConfigDocument:
    """Validate parsed config JSON as an AppConfigDocument."""
    if not isinstance(data, dict):
        raise LocalReadError(path, "config is not a JSON object", app=app)
    try:
        return AppConfigDocument.model_validate(data)
    except PydanticValidationError as e:
        raise LocalReadError(path, f"config does not match schema: {e.error_count()} error(s)", app=app)
