"""
Name Resolver — Map requested app names to canonical registry names.

Resolution order (first match wins):
1. Override table (a None value means "no upstream equivalent")
2. Exact membership in the registry listing
3. Normalized membership (lowercase, whitespace and dots → hyphens)
4. Substring fallback: first listed name containing the normalized name
5. No match

The substring step depends on listing order, so ``available`` must be an
ordered sequence; ties go to the first occurrence.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Normalize a requested name the way registry folder names are written."""
    return _WHITESPACE.sub("-", name.lower()).replace(".", "-")


class NameResolver:
    """Resolve requested names against a registry listing."""

    def __init__(self, overrides: Optional[Mapping[str, Optional[str]]] = None):
        self.overrides = overrides or {}

    def resolve(self, requested: str, available: Sequence[str]) -> Optional[str]:
        if isinstance(available, (set, frozenset, str, bytes)) or not isinstance(available, Sequence):
            raise TypeError("available upstream names must be an ordered sequence")

        if requested in self.overrides:
            target = self.overrides[requested]
            logger.debug(f"Override for '{requested}': {target}")
            return target

        if requested in available:
            return requested

        normalized = normalize_name(requested)
        if normalized in available:
            return normalized

        if not normalized:
            return None

        for candidate in available:
            if normalized in candidate:
                logger.debug(f"Substring match for '{requested}': {candidate}")
                return candidate

        return None
