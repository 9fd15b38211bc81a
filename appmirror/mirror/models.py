"""
Mirror Models — App identifiers, artifacts and entries.

On-disk layout (identical upstream and locally):

    <root>/<app>/config.json
    <root>/<app>/docker-compose.json
    <root>/<app>/metadata/description.md
    <root>/<app>/metadata/logo.jpg
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..registry.versions import DEFAULT_VERSION, VersionTag

METADATA_DIR = "metadata"


class ArtifactKind(str, Enum):
    """Files that make up an app definition, by relative path."""
    CONFIG = "config.json"
    COMPOSE = "docker-compose.json"
    DESCRIPTION = "metadata/description.md"
    LOGO = "metadata/logo.jpg"

    @property
    def required(self) -> bool:
        return self in (ArtifactKind.CONFIG, ArtifactKind.COMPOSE)

    @property
    def label(self) -> str:
        return self.value.rsplit("/", 1)[-1]


REQUIRED_ARTIFACTS = tuple(kind for kind in ArtifactKind if kind.required)
OPTIONAL_ARTIFACTS = tuple(kind for kind in ArtifactKind if not kind.required)


@dataclass(frozen=True)
class AppIdentifier:
    """
    Names an app goes by.

    For imported entries ``local_directory_name`` is always the resolved
    upstream name, so later updates can find the app upstream.
    """

    requested_name: str
    local_directory_name: str
    resolved_upstream_name: Optional[str] = None

    @classmethod
    def for_import(cls, requested: str, resolved: str) -> "AppIdentifier":
        return cls(
            requested_name=requested,
            local_directory_name=resolved,
            resolved_upstream_name=resolved,
        )


@dataclass
class ArtifactSet:
    """Artifact contents; None means absent."""

    config: Optional[bytes] = None
    compose: Optional[bytes] = None
    description: Optional[bytes] = None
    logo: Optional[bytes] = None

    _FIELDS = {
        ArtifactKind.CONFIG: "config",
        ArtifactKind.COMPOSE: "compose",
        ArtifactKind.DESCRIPTION: "description",
        ArtifactKind.LOGO: "logo",
    }

    def get(self, kind: ArtifactKind) -> Optional[bytes]:
        return getattr(self, self._FIELDS[kind])

    def put(self, kind: ArtifactKind, content: Optional[bytes]) -> None:
        setattr(self, self._FIELDS[kind], content)

    def present(self) -> Dict[ArtifactKind, bytes]:
        """Artifacts that have content, in layout order."""
        found: Dict[ArtifactKind, bytes] = {}
        for kind in ArtifactKind:
            content = self.get(kind)
            if content is not None:
                found[kind] = content
        return found


@dataclass
class MirrorEntry:
    """One mirrored app."""

    identifier: AppIdentifier
    path: Path
    artifacts: ArtifactSet = field(default_factory=ArtifactSet)


class AppConfigDocument(BaseModel):
    """
    Parsed config.json.

    Only ``version`` is interpreted; every other field is kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    version: str = DEFAULT_VERSION

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> str:
        if value is None or value == "":
            return DEFAULT_VERSION
        return str(value)

    @property
    def version_tag(self) -> VersionTag:
        return VersionTag.parse(self.version)
