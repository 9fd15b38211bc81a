"""
Shared fixtures for mirror tests.

Provides a fake registry served through httpx.MockTransport, so the real
RegistryClient runs end to end without network access, plus helpers to
lay out mirror entries on disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import httpx
import pytest

from appmirror.registry.client import RegistryClient

BASE_URL = "https://registry.test/apps"
LISTING_URL = "https://api.registry.test/contents/apps"


def config_json(version: Optional[str] = "1.0.0", **extra) -> bytes:
    """Encode a config.json body."""
    data = dict(extra)
    if version is not None:
        data["version"] = version
    data.setdefault("name", "app")
    return json.dumps(data).encode("utf-8")


COMPOSE = json.dumps({"services": {"app": {"image": "app:latest"}}}).encode("utf-8")


class FakeRegistry:
    """In-memory registry keyed by (app, relative_path)."""

    def __init__(self):
        self.files: Dict[Tuple[str, str], bytes] = {}
        self.listing: Optional[List[str]] = None
        self.listing_status = 200
        self.errors: Dict[Tuple[str, str], int] = {}
        self.broken: Set[Tuple[str, str]] = set()
        self.requests: List[str] = []

    def add_app(
        self,
        name: str,
        version: str = "1.0.0",
        compose: bytes = COMPOSE,
        description: Optional[bytes] = b"# App\n",
        logo: Optional[bytes] = b"\xff\xd8\xff",
    ) -> None:
        self.files[(name, "config.json")] = config_json(version)
        if compose is not None:
            self.files[(name, "docker-compose.json")] = compose
        if description is not None:
            self.files[(name, "metadata/description.md")] = description
        if logo is not None:
            self.files[(name, "metadata/logo.jpg")] = logo

    def app_names(self) -> List[str]:
        names: List[str] = []
        for app, _ in self.files:
            if app not in names:
                names.append(app)
        return names

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))

        if str(request.url) == LISTING_URL:
            if self.listing_status != 200:
                return httpx.Response(self.listing_status)
            names = self.listing if self.listing is not None else self.app_names()
            body = [{"name": n, "type": "dir"} for n in names]
            body.append({"name": "README.md", "type": "file"})
            return httpx.Response(200, json=body)

        prefix = BASE_URL + "/"
        url = str(request.url)
        if not url.startswith(prefix):
            return httpx.Response(404)

        app, _, relative = url[len(prefix):].partition("/")
        key = (app, relative)

        if key in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if key in self.errors:
            return httpx.Response(self.errors[key])
        if key in self.files:
            return httpx.Response(200, content=self.files[key])
        return httpx.Response(404, text="404: Not Found")

    def client(self, max_attempts: int = 1) -> RegistryClient:
        http = httpx.Client(transport=httpx.MockTransport(self.handler))
        return RegistryClient(
            base_url=BASE_URL,
            listing_url=LISTING_URL,
            client=http,
            max_attempts=max_attempts,
            sleep=lambda _: None,
        )


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def mirror_root(tmp_path: Path) -> Path:
    root = tmp_path / "apps"
    root.mkdir()
    return root


def write_entry(
    root: Path,
    name: str,
    config: Optional[bytes] = None,
    compose: Optional[bytes] = COMPOSE,
    description: Optional[bytes] = None,
    logo: Optional[bytes] = None,
) -> Path:
    """Create a mirror entry on disk."""
    entry = root / name
    (entry / "metadata").mkdir(parents=True, exist_ok=True)
    if config is not None:
        (entry / "config.json").write_bytes(config)
    if compose is not None:
        (entry / "docker-compose.json").write_bytes(compose)
    if description is not None:
        (entry / "metadata" / "description.md").write_bytes(description)
    if logo is not None:
        (entry / "metadata" / "logo.jpg").write_bytes(logo)
    return entry
