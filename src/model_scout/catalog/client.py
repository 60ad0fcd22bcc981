"""Remote catalog client: entry search and per-entry file listings."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, StrictStr, TypeAdapter, ValidationError

from model_scout.catalog.quantization import classify, describe, sort_by_priority
from model_scout.types import ArtifactFile, CatalogConfig

logger = logging.getLogger(__name__)

# Truncation length for raw bodies echoed into the log.
_EXCERPT_CHARS = 500


# ---------------------------------------------------------------------------
# Wire schemas
# ---------------------------------------------------------------------------


class _SearchHit(BaseModel):
    """One element of ``GET /models?search=...``."""

    model_config = ConfigDict(extra="ignore")

    id: StrictStr


class _TreeItem(BaseModel):
    """One element of ``GET /models/{id}/tree/main``."""

    model_config = ConfigDict(extra="ignore")

    type: StrictStr
    path: StrictStr


_SEARCH_ADAPTER = TypeAdapter(list[_SearchHit])
_TREE_ADAPTER = TypeAdapter(list[_TreeItem])


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class CatalogClient:
    """Thin wrapper around the hub's model search and tree endpoints.

    Every failure (transport, status, body) is logged and reported as an
    empty list.  Deciding what to do about it is the resolver's job.

    Pass *http* to share a preconfigured ``httpx.Client`` (tests inject one
    backed by ``httpx.MockTransport``); the caller then owns its lifetime.
    """

    def __init__(
        self,
        config: CatalogConfig | None = None,
        *,
        http: httpx.Client | None = None,
    ) -> None:
        self._config = config or CatalogConfig()
        # Sent on every request, so an injected client gets them too.
        self._headers = {"User-Agent": self._config.user_agent}
        self._timeout = httpx.Timeout(self._config.timeout)
        self._owns_http = http is None
        self._http = http or httpx.Client(follow_redirects=True)

    @property
    def config(self) -> CatalogConfig:
        return self._config

    # -- lifecycle ---------------------------------------------------------

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> CatalogClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- queries -----------------------------------------------------------

    def list_entries(self, namespace: str) -> list[str]:
        """Return ids under *namespace* (``namespace/...``) in response order."""
        url = f"{self._config.api_base}/models"
        params = {"search": namespace, "limit": self._config.search_limit}
        body = self._get_json(url, params=params)
        if body is None:
            return []

        try:
            hits = _SEARCH_ADAPTER.validate_python(body)
        except ValidationError as exc:
            logger.warning(
                "Unexpected search response shape for %r: %s", namespace, exc
            )
            return []

        prefix = f"{namespace}/"
        entries = [hit.id for hit in hits if hit.id.startswith(prefix)]
        logger.debug("Search %r: %d of %d hits in scope", namespace, len(entries), len(hits))
        return entries

    def list_files(self, entry_id: str) -> list[ArtifactFile]:
        """Return the ``.gguf`` files of *entry_id*, best quantization first."""
        url = f"{self._config.api_base}/models/{entry_id}/tree/main"
        body = self._get_json(url)
        if body is None:
            return []

        try:
            items = _TREE_ADAPTER.validate_python(body)
        except ValidationError as exc:
            logger.warning("Unexpected tree response shape for %r: %s", entry_id, exc)
            return []

        extension = self._config.artifact_extension
        files: list[ArtifactFile] = []
        for item in items:
            if item.type != "file" or not item.path.endswith(extension):
                continue
            tag, rank = classify(item.path)
            files.append(
                ArtifactFile(
                    filename=item.path,
                    quantization_tag=tag,
                    priority_rank=rank,
                    entry_id=entry_id,
                    description=describe(tag),
                    download_url=self._config.download_url(entry_id, item.path),
                )
            )
        return sort_by_priority(files)

    # -- internal helpers --------------------------------------------------

    def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        """GET *url* and decode JSON; ``None`` on any failure."""
        try:
            response = self._http.get(
                url, params=params, headers=self._headers, timeout=self._timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Catalog request failed: %s returned HTTP %d",
                exc.request.url,
                exc.response.status_code,
            )
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # InvalidURL is raised while building the request, e.g. for an
            # entry id with control characters.
            logger.warning("Catalog request to %r failed: %s", url, exc)
            return None

        try:
            return response.json()
        except ValueError as exc:
            logger.warning(
                "Malformed JSON from %s: %s. Raw response (first %d chars): %s",
                url,
                exc,
                _EXCERPT_CHARS,
                response.text[:_EXCERPT_CHARS],
            )
            return None
