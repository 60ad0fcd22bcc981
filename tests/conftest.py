"""Shared fixtures and pytest configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest

from model_scout.catalog import CacheStore, CatalogClient, CatalogResolver
from model_scout.types import ArtifactFile, CatalogConfig

API_BASE = "https://hub.test/api"
SITE_BASE = "https://hub.test"


# ---------------------------------------------------------------------------
# --live flag
# ---------------------------------------------------------------------------


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run live tests (requires network access to huggingface.co).",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--live"):
        return
    skip_live = pytest.mark.skip(reason="Use --live to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------------
# Fake hub
# ---------------------------------------------------------------------------


@dataclass
class FakeHub:
    """Canned responses for the search and tree endpoints.

    ``search`` and ``trees`` hold JSON-able bodies (or raw ``str`` bodies to
    simulate malformed JSON).  Set ``offline`` to make every request fail at
    the transport level, or ``status`` to answer with that HTTP status.
    """

    search: Any = field(default_factory=list)
    trees: dict[str, Any] = field(default_factory=dict)
    offline: bool = False
    status: int = 200
    requests: list[httpx.Request] = field(default_factory=list)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("network unreachable", request=request)
        if self.status != 200:
            return httpx.Response(self.status, text="upstream error")

        path = request.url.path
        if path == "/api/models":
            return _respond(self.search)

        prefix, suffix = "/api/models/", "/tree/main"
        if path.startswith(prefix) and path.endswith(suffix):
            entry_id = path[len(prefix) : -len(suffix)]
            if entry_id in self.trees:
                return _respond(self.trees[entry_id])
        return httpx.Response(404, json={"error": "Repository not found"})


def _respond(body: Any) -> httpx.Response:
    if isinstance(body, str):
        return httpx.Response(200, text=body)
    return httpx.Response(200, content=json.dumps(body).encode())


def tree(*paths: str, kind: str = "file") -> list[dict]:
    """Build a tree listing body from file paths."""
    return [{"type": kind, "path": p, "oid": "0" * 40, "size": 1} for p in paths]


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def config(tmp_path: Path) -> CatalogConfig:
    return CatalogConfig(
        api_base=API_BASE,
        site_base=SITE_BASE,
        cache_dir=tmp_path / "cache",
    )


@pytest.fixture()
def http(hub: FakeHub):
    with httpx.Client(transport=httpx.MockTransport(hub.handle)) as c:
        yield c


@pytest.fixture()
def catalog_client(config: CatalogConfig, http: httpx.Client) -> CatalogClient:
    return CatalogClient(config, http=http)


@pytest.fixture()
def entries_cache(config: CatalogConfig, clock: FakeClock) -> CacheStore[str]:
    return CacheStore(
        config.cache_dir, kind="entries", item_type=str, ttl=config.entries_ttl, clock=clock
    )


@pytest.fixture()
def files_cache(config: CatalogConfig, clock: FakeClock) -> CacheStore[ArtifactFile]:
    return CacheStore(
        config.cache_dir,
        kind="files",
        item_type=ArtifactFile,
        ttl=config.files_ttl,
        clock=clock,
    )


@pytest.fixture()
def resolver(
    catalog_client: CatalogClient,
    entries_cache: CacheStore[str],
    files_cache: CacheStore[ArtifactFile],
) -> CatalogResolver:
    return CatalogResolver(
        catalog_client, entries_cache, files_cache, default_namespace="kolosal"
    )
