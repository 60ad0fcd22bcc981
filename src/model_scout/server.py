"""FastAPI server: read-only HTTP access to resolved catalog listings."""

from __future__ import annotations

from fastapi import FastAPI, Query

from model_scout import __version__
from model_scout.catalog.quantization import known_tags
from model_scout.catalog.resolver import CatalogResolver

# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(resolver: CatalogResolver) -> FastAPI:
    """Build and return a FastAPI application wired to *resolver*.

    Handlers are plain ``def`` functions: resolution blocks on the network,
    so FastAPI runs them in its threadpool.  An empty listing is a normal
    200 response, never an error.
    """
    app = FastAPI(title="model-scout", docs_url=None, redoc_url=None)

    @app.get("/info")
    def get_info() -> dict:
        return {
            "name": "model-scout",
            "version": __version__,
            "namespace": resolver.default_namespace,
            "quantizations": known_tags(),
        }

    @app.get("/entries")
    def get_entries(namespace: str | None = None) -> dict:
        ns = namespace or resolver.default_namespace
        resolution = resolver.resolve_entries_detailed(ns)
        return {
            "namespace": ns,
            "source": resolution.source,
            "entries": resolution.items,
        }

    @app.get("/entries/{entry_id:path}/files")
    def get_files(entry_id: str) -> dict:
        resolution = resolver.resolve_files_detailed(entry_id)
        return {
            "entry": entry_id,
            "source": resolution.source,
            "files": [f.model_dump() for f in resolution.items],
        }

    @app.get("/models")
    def get_models(
        configured: list[str] = Query(default=[]),
        downloaded: list[str] = Query(default=[]),
    ) -> dict:
        models = resolver.resolve_unified(configured, downloaded)
        return {
            "models": [
                {**m.model_dump(), "selection_id": m.selection_id}
                for m in models
                if not m.is_separator
            ],
            "local_count": sum(1 for m in models if m.source == "local"),
        }

    return app
