"""
Mirror Manager — Orchestrates import and update runs.

This is the main entry point for mirror operations. It coordinates name
resolution, registry fetches, version checks and writes to the local
mirror.

Two lifecycles:

- ``bootstrap()`` populates the mirror from the catalog's request list.
  Each requested name is resolved against the registry listing and the
  entry is created under the resolved (canonical) name.
- ``update()`` refreshes every existing entry in place when the upstream
  config carries a newer version.

Apps are processed one at a time. A failure inside one app is logged and
recorded in the RunReport; the run continues with the next app. Only a
missing registry listing (import) or a missing mirror root (update)
aborts a run.

No locking is done: running an import and an update against the same
root at the same time is not supported.

## Usage

    from appmirror.mirror.manager import MirrorManager

    with MirrorManager.from_settings(settings, catalog) as manager:
        report = manager.update()
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..catalog.models import Catalog
from ..errors import FetchError, LocalReadError, MirrorError
from ..registry.client import RegistryClient
from ..registry.resolver import NameResolver
from ..registry.versions import VersionStatus, classify, describe
from ..validation import ValidationError, parse_json_bytes
from .config import MirrorSettings
from .models import (
    OPTIONAL_ARTIFACTS,
    REQUIRED_ARTIFACTS,
    AppConfigDocument,
    AppIdentifier,
    ArtifactKind,
    MirrorEntry,
)
from .state import (
    MODE_IMPORT,
    MODE_UPDATE,
    STATUS_FAILED,
    STATUS_FETCHED,
    STATUS_LOCAL_NEWER,
    STATUS_SKIPPED,
    STATUS_UNRESOLVED,
    STATUS_UP_TO_DATE,
    STATUS_UPDATED,
    RunReport,
)
from .store import MirrorStore, parse_config_document

logger = logging.getLogger(__name__)

RENAMED_SUFFIX = "-1"


def _ctx(app: str, mode: str) -> Dict[str, str]:
    return {"app": app, "mode": mode}


class MirrorManager:
    """Drives import and update runs against one mirror root."""

    def __init__(
        self,
        store: MirrorStore,
        client: RegistryClient,
        catalog: Optional[Catalog] = None,
        resolver: Optional[NameResolver] = None,
    ):
        self.store = store
        self.client = client
        self.catalog = catalog or Catalog()
        self.resolver = resolver or NameResolver(self.catalog.name_overrides)

    @classmethod
    def from_settings(
        cls,
        settings: MirrorSettings,
        catalog: Optional[Catalog] = None,
    ) -> "MirrorManager":
        """Create a manager with a real registry client."""
        return cls(
            store=MirrorStore(settings.root),
            client=RegistryClient.from_settings(settings),
            catalog=catalog,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "MirrorManager":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ─── Import ─────────────────────────────────────────────

    def bootstrap(self, available: Optional[Sequence[str]] = None) -> RunReport:
        """
        Import every requested app into the mirror.

        Args:
            available: Registry app names, in listing order. Fetched from
                the registry when None.

        Raises:
            RegistryListingError: If the registry listing cannot be fetched
        """
        if available is None:
            logger.info("Fetching list of available apps from the registry...")
            available = self.client.list_apps()
        logger.info(f"Found {len(available)} apps available upstream")

        report = RunReport(mode=MODE_IMPORT, root=str(self.store.root))
        self.store.ensure_root()

        for requested in self.catalog.requested_apps:
            try:
                self._import_app(requested, available, report)
            except OSError as e:
                logger.error(f"Failed to write {requested}: {e}", extra=_ctx(requested, MODE_IMPORT))
                report.record(requested, STATUS_FAILED, detail=f"write failed: {e}")
            except (MirrorError, ValueError) as e:
                logger.error(f"Failed to import {requested}: {e}", extra=_ctx(requested, MODE_IMPORT))
                report.record(requested, STATUS_FAILED, detail=str(e))

        report.finish()
        logger.info(f"Import finished: {report.counts()}")
        return report

    def _import_app(self, requested: str, available: Sequence[str], report: RunReport) -> None:
        resolved = self.resolver.resolve(requested, available)
        if not resolved:
            logger.warning(f"Could not find a match for '{requested}'", extra=_ctx(requested, MODE_IMPORT))
            report.record(requested, STATUS_UNRESOLVED)
            return

        identifier = AppIdentifier.for_import(requested, resolved)
        name = identifier.local_directory_name
        logger.info(f"Matched '{requested}' to '{resolved}'", extra=_ctx(name, MODE_IMPORT))

        entry = MirrorEntry(identifier=identifier, path=self.store.ensure_entry(name))

        # Both required artifacts are fetched before either is written
        try:
            for kind in REQUIRED_ARTIFACTS:
                entry.artifacts.put(kind, self.client.fetch_required(resolved, kind.value))
        except FetchError as e:
            logger.error(f"Failed to fetch {resolved}: {e}", extra=_ctx(name, MODE_IMPORT))
            report.record(name, STATUS_FAILED, upstream=resolved, detail=str(e))
            return

        for kind in OPTIONAL_ARTIFACTS:
            entry.artifacts.put(kind, self.client.fetch_optional(resolved, kind.value))

        written = []
        for kind, content in entry.artifacts.present().items():
            self.store.write_artifact(name, kind, content)
            written.append(kind.label)

        logger.info(f"Successfully fetched {resolved}", extra=_ctx(name, MODE_IMPORT))
        report.record(name, STATUS_FETCHED, upstream=resolved, detail=", ".join(written))

    # ─── Update ─────────────────────────────────────────────

    def update(self) -> RunReport:
        """
        Refresh every existing mirror entry from upstream.

        Raises:
            MirrorRootMissing: If the mirror root does not exist
        """
        names = self.store.entry_names()
        logger.info(f"Found {len(names)} installed apps")

        report = RunReport(mode=MODE_UPDATE, root=str(self.store.root))
        for name in names:
            try:
                self._update_app(name, report)
            except OSError as e:
                logger.error(f"Failed to write {name}: {e}", extra=_ctx(name, MODE_UPDATE))
                report.record(name, STATUS_FAILED, detail=f"write failed: {e}")
            except (MirrorError, ValueError) as e:
                logger.error(f"Failed to update {name}: {e}", extra=_ctx(name, MODE_UPDATE))
                report.record(name, STATUS_FAILED, detail=str(e))

        report.finish()
        logger.info(f"Update finished: {report.counts()}")
        return report

    def candidates_for(self, name: str) -> List[str]:
        """Upstream names to try for a local entry, in order."""
        candidates = [name]

        if name.endswith(RENAMED_SUFFIX):
            stripped = name[: -len(RENAMED_SUFFIX)]
            if stripped and stripped not in candidates:
                candidates.append(stripped)

        alias = self.catalog.update_aliases.get(name)
        if alias and alias not in candidates:
            candidates.append(alias)

        return candidates

    def _first_found(
        self,
        candidates: Sequence[str],
        kind: ArtifactKind,
    ) -> Tuple[Optional[str], Optional[bytes], Optional[str]]:
        """Fetch ``kind`` from the first candidate that has it."""
        last_error = None
        for candidate in candidates:
            try:
                return candidate, self.client.fetch_required(candidate, kind.value), None
            except FetchError as e:
                last_error = str(e)
        return None, None, last_error

    def _update_app(self, name: str, report: RunReport) -> None:
        ctx = _ctx(name, MODE_UPDATE)
        logger.debug(f"Checking {name}...", extra=ctx)

        try:
            local_config = self.store.load_config(name)
        except LocalReadError as e:
            logger.warning(f"Skipping {name}: {e.reason}", extra=ctx)
            report.record(name, STATUS_SKIPPED, detail=f"local config: {e.reason}")
            return

        candidates = self.candidates_for(name)
        upstream_name, upstream_content, error = self._first_found(candidates, ArtifactKind.CONFIG)
        if upstream_content is None:
            logger.warning(
                f"[SKIP] Could not find upstream config for {name} (or it is a custom app): {error}",
                extra=ctx,
            )
            report.record(name, STATUS_SKIPPED, detail="no upstream config")
            return

        try:
            upstream_config = self._parse_upstream_config(upstream_name, upstream_content)
        except LocalReadError as e:
            logger.warning(f"[SKIP] Upstream config for {name} is invalid: {e.reason}", extra=ctx)
            report.record(name, STATUS_FAILED, upstream=upstream_name, detail=f"upstream config: {e.reason}")
            return

        local_tag = local_config.version_tag
        upstream_tag = upstream_config.version_tag
        for label, tag in (("local", local_tag), ("upstream", upstream_tag)):
            if tag.ambiguous:
                logger.warning(
                    f"{label} version '{tag}' of {name} has no numeric major, treating as 0",
                    extra=ctx,
                )

        status = classify(local_tag, upstream_tag)
        detail = describe(status, local_tag, upstream_tag)

        if status == VersionStatus.UP_TO_DATE:
            logger.info(f"[OK] {name} is up to date ({local_tag})", extra=ctx)
            report.record(name, STATUS_UP_TO_DATE, upstream=upstream_name, detail=detail)
            return

        if status == VersionStatus.LOCAL_NEWER_UNSAFE:
            logger.info(
                f"[SKIP] {name} local version ({local_tag}) is NEWER than "
                f"upstream ({upstream_tag}). Keeping local.",
                extra=ctx,
            )
            report.record(name, STATUS_LOCAL_NEWER, upstream=upstream_name, detail=detail)
            return

        logger.info(f"[UPDATE] Updating {name} from {local_tag} to {upstream_tag}...", extra=ctx)
        self._apply_update(name, candidates, upstream_content)
        report.record(name, STATUS_UPDATED, upstream=upstream_name, detail=detail)

    def _apply_update(self, name: str, candidates: Sequence[str], config_content: bytes) -> None:
        ctx = _ctx(name, MODE_UPDATE)
        self.store.write_artifact(name, ArtifactKind.CONFIG, config_content)

        _, compose, error = self._first_found(candidates, ArtifactKind.COMPOSE)
        if compose is not None:
            self.store.write_artifact(name, ArtifactKind.COMPOSE, compose)
        else:
            logger.warning(f"Upstream compose for {name} unavailable, keeping local: {error}", extra=ctx)

        for candidate in candidates:
            description = self.client.fetch_optional(candidate, ArtifactKind.DESCRIPTION.value)
            if description is not None:
                self.store.write_artifact(name, ArtifactKind.DESCRIPTION, description)
                break

        # Logo is only fetched on import, never refreshed here
        logger.info(f"[SUCCESS] Updated {name}", extra=ctx)

    def _parse_upstream_config(self, upstream_name: str, content: bytes) -> AppConfigDocument:
        """
        Raises:
            LocalReadError: If the upstream config is malformed
        """
        url = self.client.url_for(upstream_name, ArtifactKind.CONFIG.value)
        try:
            data = parse_json_bytes(content, ArtifactKind.CONFIG.value)
        except ValidationError as e:
            raise LocalReadError(url, e.message, app=upstream_name)
        return parse_config_document(data, url, app=upstream_name)
