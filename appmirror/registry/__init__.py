"""
Registry — Talk to the upstream app registry and reason about its names and versions.
"""

from .client import FetchResult, FetchStatus, RegistryClient
from .resolver import NameResolver, normalize_name
from .versions import VersionStatus, VersionTag, classify

__all__ = [
    "FetchResult",
    "FetchStatus",
    "RegistryClient",
    "NameResolver",
    "normalize_name",
    "VersionStatus",
    "VersionTag",
    "classify",
]
