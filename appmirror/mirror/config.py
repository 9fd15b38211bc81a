"""
Mirror Configuration — Parse MIRROR_* and REGISTRY_* environment variables.

Minimal config: none. Everything has a default that points at the
Runtipi app store and mirrors into ./apps.

    MIRROR_ROOT=./apps
    MIRROR_CATALOG=catalog.yaml
    REGISTRY_BASE_URL=https://raw.githubusercontent.com/runtipi/runtipi-appstore/master/apps
    REGISTRY_LISTING_URL=https://api.github.com/repos/runtipi/runtipi-appstore/contents/apps
    REGISTRY_TIMEOUT_SECONDS=15
    REGISTRY_MAX_ATTEMPTS=3
    GITHUB_TOKEN=ghp_xxxxx   # optional, raises the listing rate limit
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from ..validation import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://raw.githubusercontent.com/runtipi/runtipi-appstore/master/apps"
DEFAULT_LISTING_URL = "https://api.github.com/repos/runtipi/runtipi-appstore/contents/apps"


@dataclass(frozen=True)
class MirrorSettings:
    """Where the mirror lives and how to reach the registry."""

    root: Path = Path("apps")
    catalog_path: Optional[Path] = None
    registry_base_url: str = DEFAULT_BASE_URL
    registry_listing_url: str = DEFAULT_LISTING_URL
    timeout_seconds: float = 15.0
    max_attempts: int = 3
    github_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "MirrorSettings":
        """Parse mirror configuration from environment variables."""
        catalog = os.environ.get("MIRROR_CATALOG")

        settings = cls(
            root=Path(os.environ.get("MIRROR_ROOT", "apps")),
            catalog_path=Path(catalog) if catalog else None,
            registry_base_url=os.environ.get("REGISTRY_BASE_URL", DEFAULT_BASE_URL),
            registry_listing_url=os.environ.get("REGISTRY_LISTING_URL", DEFAULT_LISTING_URL),
            timeout_seconds=_env_number("REGISTRY_TIMEOUT_SECONDS", 15.0, float),
            max_attempts=_env_number("REGISTRY_MAX_ATTEMPTS", 3, int),
            github_token=os.environ.get("GITHUB_TOKEN") or None,
        )

        if settings.max_attempts < 1:
            raise ConfigurationError("REGISTRY_MAX_ATTEMPTS must be at least 1")

        logger.debug(f"Mirror root: {settings.root}, registry: {settings.registry_base_url}")
        return settings

    def with_overrides(
        self,
        root: Optional[Path] = None,
        catalog_path: Optional[Path] = None,
    ) -> "MirrorSettings":
        """Return a copy with CLI-provided values applied."""
        changes = {}
        if root is not None:
            changes["root"] = Path(root)
        if catalog_path is not None:
            changes["catalog_path"] = Path(catalog_path)
        return replace(self, **changes)


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
