"""Resolution orchestrator: cache-first, live second, stale cache last."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

import httpx

from model_scout.catalog.cache import CacheStore
from model_scout.catalog.client import CatalogClient
from model_scout.types import SEPARATOR, ArtifactFile, CatalogConfig, UnifiedModel

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResolutionSource = Literal["cache", "live", "offline", "none"]

_PARAM_COUNT = re.compile(r"(?<![0-9.])(\d+(?:\.\d+)?)[Bb](?![A-Za-z0-9])")


@dataclass
class Resolution(Generic[T]):
    """A resolved listing plus the path that produced it."""

    items: list[T] = field(default_factory=list)
    source: ResolutionSource = "none"

    def __bool__(self) -> bool:
        return bool(self.items)


class CatalogResolver:
    """Combine a :class:`CatalogClient` with per-kind :class:`CacheStore`\\ s.

    Each resolve call walks the same steps:

    1. a fresh cache hit is returned as is;
    2. otherwise the live listing is fetched and, if non-empty, cached;
    3. if the live listing came back empty, any cached record is used
       regardless of age;
    4. failing all of the above the result is empty.

    An empty live result may mean "network down" or "nothing matches"; the
    client does not tell them apart, so both take the offline path.
    """

    def __init__(
        self,
        client: CatalogClient,
        entries_cache: CacheStore[str],
        files_cache: CacheStore[ArtifactFile],
        *,
        default_namespace: str | None = None,
    ) -> None:
        self._client = client
        self._entries_cache = entries_cache
        self._files_cache = files_cache
        self._default_namespace = default_namespace or client.config.namespace

    @property
    def default_namespace(self) -> str:
        return self._default_namespace

    def clear_cache(self) -> int:
        """Drop every cached listing.  Returns the number of files removed."""
        return self._entries_cache.clear() + self._files_cache.clear()

    def has_cached_data(self) -> bool:
        return self._entries_cache.has_any() or self._files_cache.has_any()

    def close(self) -> None:
        self._client.close()

    # -- entries -------------------------------------------------------------

    def resolve_entries_detailed(self, namespace: str) -> Resolution[str]:
        return self._resolve(
            namespace,
            cache=self._entries_cache,
            fetch=self._client.list_entries,
            what="entries",
        )

    def resolve_entries(self, namespace: str) -> list[str]:
        """Catalog entries under *namespace*; empty means nothing is available."""
        return self.resolve_entries_detailed(namespace).items

    # -- files ---------------------------------------------------------------

    def resolve_files_detailed(self, entry_id: str) -> Resolution[ArtifactFile]:
        return self._resolve(
            entry_id,
            cache=self._files_cache,
            fetch=self._client.list_files,
            what="files",
        )

    def resolve_files(self, entry_id: str) -> list[ArtifactFile]:
        """Ranked artifact files of *entry_id*; empty means nothing is available."""
        return self.resolve_files_detailed(entry_id).items

    # -- unified listing -------------------------------------------------------

    def resolve_unified(
        self,
        configured_names: Sequence[str],
        downloaded_names: Sequence[str] = (),
    ) -> list[UnifiedModel]:
        """Merge local names and remote entries into one ordered listing.

        Local rows come first, then a separator, then the default namespace's
        remote entries.  A name present in both groups is listed twice, once
        per source.  *downloaded_names* stand in for the local group when no
        configured names are given.
        """
        local_names = list(configured_names) or list(downloaded_names)
        local = [_local_model(name) for name in local_names]
        remote = [
            self._remote_model(entry_id)
            for entry_id in self.resolve_entries(self._default_namespace)
        ]

        merged: list[UnifiedModel] = list(local)
        if local and remote:
            merged.append(SEPARATOR)
        merged.extend(remote)
        return merged

    # -- internal helpers ----------------------------------------------------

    def _resolve(
        self,
        key: str,
        *,
        cache: CacheStore[T],
        fetch: Callable[[str], list[T]],
        what: str,
    ) -> Resolution[T]:
        cached = cache.read_fresh(key)
        if cached:
            return Resolution(cached, "cache")

        live = fetch(key)
        if live:
            cache.write(key, live)
            return Resolution(live, "live")

        stale = cache.read_offline(key)
        if stale:
            logger.warning("Using offline cache for %s of %r", what, key)
            return Resolution(stale, "offline")

        logger.warning("No %s available for %r", what, key)
        return Resolution([], "none")

    def _remote_model(self, entry_id: str) -> UnifiedModel:
        name = entry_id.rsplit("/", 1)[-1]
        return UnifiedModel(
            id=entry_id,
            name=name,
            source="huggingface",
            source_tag="HF",
            url=f"{self._client.config.site_base}/{entry_id}",
            parameter_count=guess_parameter_count(name),
            description="Hugging Face model",
        )


def _local_model(name: str) -> UnifiedModel:
    return UnifiedModel(
        id=name,
        name=name,
        source="local",
        source_tag="LOCAL",
        description="Local model from config",
    )


def guess_parameter_count(name: str) -> str:
    """Pull a parameter count such as ``7B`` or ``0.5B`` out of a model name."""
    match = _PARAM_COUNT.search(name)
    if match is None:
        return ""
    return f"{match.group(1)}B"


def build_resolver(
    config: CatalogConfig | None = None,
    *,
    http: httpx.Client | None = None,
    clock: Callable[[], float] = time.time,
) -> CatalogResolver:
    """Wire a client and both cache stores from one :class:`CatalogConfig`."""
    config = config or CatalogConfig()
    client = CatalogClient(config, http=http)
    entries_cache: CacheStore[str] = CacheStore(
        config.cache_dir,
        kind="entries",
        item_type=str,
        ttl=config.entries_ttl,
        clock=clock,
    )
    files_cache: CacheStore[ArtifactFile] = CacheStore(
        config.cache_dir,
        kind="files",
        item_type=ArtifactFile,
        ttl=config.files_ttl,
        clock=clock,
    )
    return CatalogResolver(
        client, entries_cache, files_cache, default_namespace=config.namespace
    )
