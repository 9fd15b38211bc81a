"""
Registry Client — Fetch app artifacts and the app listing from the registry.

Every fetch returns a ``FetchResult`` that is FOUND, NOT_FOUND or
TRANSPORT_ERROR, so callers can tell a missing file from a network
problem. ``fetch_required`` turns the absent cases into exceptions,
``fetch_optional`` turns them into None.

Transport errors (connection failures, timeouts, 429 and 5xx responses)
are retried with backoff; NOT_FOUND is never retried. A URL httpx rejects
(e.g. an app name with control characters) is a non-retryable
TRANSPORT_ERROR.

## Usage

    from appmirror.registry.client import RegistryClient

    with RegistryClient.from_settings(settings) as client:
        apps = client.list_apps()
        config = client.fetch_required("immich", "config.json")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

import httpx

from ..errors import NotFoundRemote, RegistryListingError, RegistryTransportError

logger = logging.getLogger(__name__)

USER_AGENT = "appmirror/0.1"

# Seconds to wait before retry N (last value repeats)
BACKOFF_SECONDS = [0.5, 1.0, 2.0, 4.0]

NOT_FOUND_STATUSES = {404, 410}


class FetchStatus(str, Enum):
    """Outcome of a single upstream fetch."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class FetchResult:
    """Result of fetching one upstream path."""

    status: FetchStatus
    upstream_name: str
    relative_path: str
    content: Optional[bytes] = None
    error: Optional[str] = None
    retryable: bool = False

    @property
    def found(self) -> bool:
        return self.status == FetchStatus.FOUND

    def raise_for_absent(self) -> bytes:
        """Return the content, or raise the matching FetchError."""
        if self.status == FetchStatus.FOUND:
            return self.content or b""
        if self.status == FetchStatus.NOT_FOUND:
            raise NotFoundRemote(self.upstream_name, self.relative_path)
        raise RegistryTransportError(
            self.upstream_name,
            self.relative_path,
            self.error or "transport error",
            retryable=self.retryable,
        )


def _backoff_delay(attempt: int) -> float:
    return BACKOFF_SECONDS[min(attempt, len(BACKOFF_SECONDS) - 1)]


class RegistryClient:
    """
    HTTP client for a raw-file app registry.

    ``base_url`` addresses files as ``{base_url}/{app}/{relative_path}``;
    ``listing_url`` is a GitHub contents API URL for the apps folder.
    """

    def __init__(
        self,
        base_url: str,
        listing_url: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 15.0,
        max_attempts: int = 3,
        token: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.listing_url = listing_url
        self.max_attempts = max(1, max_attempts)
        self.token = token
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    @classmethod
    def from_settings(cls, settings) -> "RegistryClient":
        """Create a client from MirrorSettings."""
        return cls(
            base_url=settings.registry_base_url,
            listing_url=settings.registry_listing_url,
            timeout=settings.timeout_seconds,
            max_attempts=settings.max_attempts,
            token=settings.github_token,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ─── Artifacts ──────────────────────────────────────────

    def url_for(self, upstream_name: str, relative_path: str) -> str:
        return f"{self.base_url}/{upstream_name}/{relative_path}"

    def fetch(self, upstream_name: str, relative_path: str) -> FetchResult:
        """Fetch one upstream file, retrying transport errors."""
        url = self.url_for(upstream_name, relative_path)
        result = self._fetch_once(url, upstream_name, relative_path)

        attempt = 1
        while (
            result.status == FetchStatus.TRANSPORT_ERROR
            and result.retryable
            and attempt < self.max_attempts
        ):
            delay = _backoff_delay(attempt - 1)
            logger.debug(
                f"Retrying {url} in {delay}s "
                f"(attempt {attempt + 1}/{self.max_attempts}): {result.error}"
            )
            self._sleep(delay)
            result = self._fetch_once(url, upstream_name, relative_path)
            attempt += 1

        return result

    def _fetch_once(self, url: str, upstream_name: str, relative_path: str) -> FetchResult:
        try:
            response = self._client.get(url)
        except httpx.RequestError as e:
            return FetchResult(
                status=FetchStatus.TRANSPORT_ERROR,
                upstream_name=upstream_name,
                relative_path=relative_path,
                error=f"{type(e).__name__}: {e}",
                retryable=True,
            )
        except httpx.InvalidURL as e:
            return FetchResult(
                status=FetchStatus.TRANSPORT_ERROR,
                upstream_name=upstream_name,
                relative_path=relative_path,
                error=f"InvalidURL: {e}",
            )

        if response.status_code == 200:
            return FetchResult(
                status=FetchStatus.FOUND,
                upstream_name=upstream_name,
                relative_path=relative_path,
                content=response.content,
            )

        if response.status_code in NOT_FOUND_STATUSES:
            return FetchResult(
                status=FetchStatus.NOT_FOUND,
                upstream_name=upstream_name,
                relative_path=relative_path,
            )

        return FetchResult(
            status=FetchStatus.TRANSPORT_ERROR,
            upstream_name=upstream_name,
            relative_path=relative_path,
            error=f"HTTP {response.status_code}",
            retryable=response.status_code == 429 or response.status_code >= 500,
        )

    def fetch_required(self, upstream_name: str, relative_path: str) -> bytes:
        """
        Fetch an artifact that must exist.

        Raises:
            NotFoundRemote: The registry has no such file
            RegistryTransportError: The request failed after retries
        """
        return self.fetch(upstream_name, relative_path).raise_for_absent()

    def fetch_optional(self, upstream_name: str, relative_path: str) -> Optional[bytes]:
        """Fetch an artifact that may be absent. Transport errors are logged and skipped."""
        result = self.fetch(upstream_name, relative_path)
        if result.status == FetchStatus.TRANSPORT_ERROR:
            logger.warning(
                f"Skipping optional {upstream_name}/{relative_path}: {result.error}"
            )
        return result.content if result.found else None

    # ─── Listing ────────────────────────────────────────────

    def _listing_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def list_apps(self) -> List[str]:
        """
        Get the registry's app folder names, in listing order.

        Raises:
            RegistryListingError: If the listing cannot be fetched or parsed
        """
        last_error = ""
        for attempt in range(self.max_attempts):
            if attempt:
                self._sleep(_backoff_delay(attempt - 1))
            try:
                response = self._client.get(self.listing_url, headers=self._listing_headers())
            except httpx.RequestError as e:
                last_error = f"{type(e).__name__}: {e}"
                continue
            except httpx.InvalidURL as e:
                last_error = f"InvalidURL: {e}"
                break

            if response.status_code == 200:
                return self._parse_listing(response)

            last_error = f"HTTP {response.status_code}"
            if response.status_code != 429 and response.status_code < 500:
                break

        raise RegistryListingError(f"Failed to fetch app list: {last_error}")

    @staticmethod
    def _parse_listing(response: httpx.Response) -> List[str]:
        try:
            entries = response.json()
        except ValueError as e:
            raise RegistryListingError(f"App list is not valid JSON: {e}")

        if not isinstance(entries, list):
            raise RegistryListingError("App list response is not a list")

        return [
            entry["name"]
            for entry in entries
            if isinstance(entry, dict) and entry.get("type") == "dir" and entry.get("name")
        ]
