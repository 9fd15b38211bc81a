"""
Version Comparator — Coarse, major-version-aware update decisions.

The rule is deliberately conservative only against major regressions:

- identical raw strings → UP_TO_DATE
- local major > upstream major → LOCAL_NEWER_UNSAFE (keep local)
- anything else → UPSTREAM_NEWER, even for a minor/patch downgrade

This is not semantic-version ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

DEFAULT_VERSION = "0.0.0"

_NON_VERSION_CHARS = re.compile(r"[^0-9.]")


class VersionStatus(str, Enum):
    """Outcome of comparing a local version to the upstream one."""
    UP_TO_DATE = "up_to_date"
    UPSTREAM_NEWER = "upstream_newer"
    LOCAL_NEWER_UNSAFE = "local_newer_unsafe"


@dataclass(frozen=True)
class VersionTag:
    """A raw version string with its derived major component."""

    raw: str

    @classmethod
    def parse(cls, value: Any) -> "VersionTag":
        """Build a tag from a config value; None and "" become 0.0.0."""
        if value is None or value == "":
            return cls(DEFAULT_VERSION)
        return cls(str(value))

    @property
    def _parsed_major(self) -> Optional[int]:
        token = _NON_VERSION_CHARS.sub("", self.raw).split(".")[0]
        if not token:
            return None
        try:
            return int(token)
        except ValueError:
            # Digit runs past the interpreter's int conversion limit
            return None

    @property
    def ambiguous(self) -> bool:
        """True when the leading token has no usable digits (e.g. "latest")."""
        return self._parsed_major is None

    @property
    def major(self) -> int:
        # Unusable majors are read as 0; see ``ambiguous``
        major = self._parsed_major
        return 0 if major is None else major

    def __str__(self) -> str:
        return self.raw


VersionLike = Union[VersionTag, str, None]


def _as_tag(value: VersionLike) -> VersionTag:
    if isinstance(value, VersionTag):
        return value
    return VersionTag.parse(value)


def classify(local: VersionLike, upstream: VersionLike) -> VersionStatus:
    """Classify a (local, upstream) version pair."""
    local_tag = _as_tag(local)
    upstream_tag = _as_tag(upstream)

    if local_tag.raw == upstream_tag.raw:
        return VersionStatus.UP_TO_DATE

    if local_tag.major > upstream_tag.major:
        return VersionStatus.LOCAL_NEWER_UNSAFE

    return VersionStatus.UPSTREAM_NEWER


def describe(status: VersionStatus, local: VersionTag, upstream: VersionTag) -> str:
    """Human-readable reason for a classification, used in run reports."""
    if status == VersionStatus.UP_TO_DATE:
        return f"up to date ({local})"
    if status == VersionStatus.LOCAL_NEWER_UNSAFE:
        return f"local {local} is newer than upstream {upstream}, keeping local"
    return f"{local} → {upstream}"
