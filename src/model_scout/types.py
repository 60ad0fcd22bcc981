"""Shared configuration and data models for model-scout."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from model_scout import __version__

# ---------------------------------------------------------------------------
# Default constants
# ---------------------------------------------------------------------------

DEFAULT_API_BASE = "https://huggingface.co/api"
DEFAULT_SITE_BASE = "https://huggingface.co"
DEFAULT_USER_AGENT = f"model-scout/{__version__}"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SEARCH_LIMIT = 50
DEFAULT_NAMESPACE = "kolosal"
ARTIFACT_EXTENSION = ".gguf"

DEFAULT_ENTRIES_TTL = 3600  # 1 hour for entry listings
DEFAULT_FILES_TTL = 1800  # 30 minutes for file listings
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "model-scout"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2178


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class CatalogConfig(BaseModel):
    """Connection and cache settings, passed explicitly to each component."""

    model_config = ConfigDict(frozen=True)

    api_base: str = DEFAULT_API_BASE
    site_base: str = DEFAULT_SITE_BASE
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    search_limit: int = Field(default=DEFAULT_SEARCH_LIMIT, gt=0)
    artifact_extension: str = ARTIFACT_EXTENSION
    namespace: str = DEFAULT_NAMESPACE
    entries_ttl: float = Field(default=DEFAULT_ENTRIES_TTL, gt=0)
    files_ttl: float = Field(default=DEFAULT_FILES_TTL, gt=0)
    cache_dir: Path = DEFAULT_CACHE_DIR

    def download_url(self, entry_id: str, filename: str) -> str:
        return f"{self.site_base}/{entry_id}/resolve/main/{filename}"


# ---------------------------------------------------------------------------
# Artifact file
# ---------------------------------------------------------------------------


class ArtifactFile(BaseModel):
    """A single downloadable ``.gguf`` file belonging to a catalog entry."""

    model_config = ConfigDict(frozen=True)

    filename: str
    quantization_tag: str
    priority_rank: int
    entry_id: str = ""
    description: str = ""
    download_url: str | None = None

    @property
    def display_name(self) -> str:
        """``model-name:TAG``, e.g. ``qwen2.5-7b-instruct:Q4_K_M``."""
        name = self.entry_id.rsplit("/", 1)[-1].lower().replace("_", "-")
        return f"{name}:{self.quantization_tag}"


# ---------------------------------------------------------------------------
# Unified listing
# ---------------------------------------------------------------------------

ModelSource = Literal["local", "huggingface", "separator"]

SEPARATOR_LABEL = "-" * 40


class UnifiedModel(BaseModel):
    """One row of the merged local + remote model listing."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    source: ModelSource
    source_tag: str = ""
    url: str = ""
    parameter_count: str = ""
    description: str = ""

    @property
    def is_separator(self) -> bool:
        return self.source == "separator"

    @property
    def selection_id(self) -> str:
        """Identifier handed back to the caller once this row is picked."""
        if self.source == "local":
            return f"LOCAL:{self.id}"
        return self.id


SEPARATOR = UnifiedModel(id="", name=SEPARATOR_LABEL, source="separator")
