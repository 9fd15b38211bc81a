"""
Mirror Errors — Exception taxonomy for registry and mirror operations.

Soft, per-app errors (``FetchError``, ``LocalReadError``) are caught by the
orchestrator and logged; the run moves on to the next app. Run-fatal errors
(``RegistryListingError``, ``MirrorRootMissing``) propagate to the caller.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class MirrorError(Exception):
    """Base class for all mirror errors."""


class FetchError(MirrorError):
    """An upstream artifact could not be retrieved."""

    def __init__(self, upstream_name: str, relative_path: str, message: str):
        self.upstream_name = upstream_name
        self.relative_path = relative_path
        super().__init__(f"{upstream_name}/{relative_path}: {message}")


class NotFoundRemote(FetchError):
    """The registry has no such path."""

    def __init__(self, upstream_name: str, relative_path: str):
        super().__init__(upstream_name, relative_path, "not found upstream")


class RegistryTransportError(FetchError):
    """The request failed at the transport level or with an unexpected status."""

    def __init__(
        self,
        upstream_name: str,
        relative_path: str,
        message: str,
        retryable: bool = True,
    ):
        self.retryable = retryable
        super().__init__(upstream_name, relative_path, message)


class RegistryListingError(MirrorError):
    """The registry's app directory listing could not be obtained."""


class MirrorRootMissing(MirrorError):
    """The mirror root directory does not exist."""

    def __init__(self, root: Path):
        self.root = root
        super().__init__(f"Mirror root not found: {root}")


class LocalReadError(MirrorError):
    """An artifact is unreadable or not well-formed (local file or fetched config)."""

    def __init__(self, path: Union[Path, str], reason: str, app: Optional[str] = None):
        self.path = path
        self.reason = reason
        self.app = app
        super().__init__(f"{path}: {reason}")
