"""
Catalog Models — Which apps to mirror and how their names map upstream.

A catalog file (YAML) declares:
- requested_apps: ordered list of app names to import
- name_overrides: requested name → canonical upstream name, or null when
  the registry has no equivalent
- update_aliases: local directory name → upstream name to try when the
  directory name itself is unknown upstream

Loaded catalogs are frozen ``Catalog`` instances so separate runs (and
tests) can use different catalogs without sharing state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


DEFAULT_REQUESTED_APPS: Tuple[str, ...] = (
    "immich",
    "glances",
    "zipline",
    "crafty",
    "vaultwarden",
    "openwebui",
    "homeassistant",
    "convertx",
    "vert.cc",
    "forgejo",
    "gitlab",
    "libreddit",
    "n8n",
    "nextcloud",
    "ntfy",
    "sqlite database browser",
    "stirling pdf",
    "syncthing",
    "uptimekuma",
    "snapdrop",
)

# None means "the registry has no equivalent app"
DEFAULT_NAME_OVERRIDES: Dict[str, Optional[str]] = {
    "openwebui": "open-webui",
    "uptimekuma": "uptime-kuma",
    "snapdrop": "pairdrop",
    "sqlite database browser": None,
    "convertx": None,
    "vert.cc": None,
    "gitlab": None,
    "libreddit": None,
}

DEFAULT_UPDATE_ALIASES: Dict[str, str] = {
    "pairdrop": "pairdrop",
    "uptime-kuma": "uptime-kuma",
}


class CatalogFile(BaseModel):
    """Schema of a catalog YAML file."""

    version: int = 1
    requested_apps: List[str] = Field(default_factory=lambda: list(DEFAULT_REQUESTED_APPS))
    name_overrides: Dict[str, Optional[str]] = Field(
        default_factory=lambda: dict(DEFAULT_NAME_OVERRIDES)
    )
    update_aliases: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_UPDATE_ALIASES))

    @field_validator("requested_apps")
    @classmethod
    def _no_blank_names(cls, value: List[str]) -> List[str]:
        blank = [i for i, name in enumerate(value) if not name.strip()]
        if blank:
            raise ValueError(f"blank app name at position(s) {blank}")
        return value


@dataclass(frozen=True)
class Catalog:
    """Immutable catalog handed to the resolver and the mirror manager."""

    requested_apps: Tuple[str, ...] = DEFAULT_REQUESTED_APPS
    name_overrides: Mapping[str, Optional[str]] = field(
        default_factory=lambda: dict(DEFAULT_NAME_OVERRIDES)
    )
    update_aliases: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_UPDATE_ALIASES)
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "requested_apps", tuple(self.requested_apps))
        object.__setattr__(self, "name_overrides", MappingProxyType(dict(self.name_overrides)))
        object.__setattr__(self, "update_aliases", MappingProxyType(dict(self.update_aliases)))

    @classmethod
    def from_file_model(cls, model: CatalogFile) -> "Catalog":
        return cls(
            requested_apps=tuple(model.requested_apps),
            name_overrides=model.name_overrides,
            update_aliases=model.update_aliases,
        )
