"""Catalog discovery, ranking, and offline caching for model-scout."""

from model_scout.catalog.cache import CacheRecord, CacheStore
from model_scout.catalog.client import CatalogClient
from model_scout.catalog.quantization import Quantization, classify, describe
from model_scout.catalog.resolver import CatalogResolver, Resolution, build_resolver

__all__ = [
    "CacheRecord",
    "CacheStore",
    "CatalogClient",
    "CatalogResolver",
    "Quantization",
    "Resolution",
    "build_resolver",
    "classify",
    "describe",
]
