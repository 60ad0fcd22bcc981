"""Durable on-disk cache for catalog listings.

Each cache key (a namespace filter or an entry id) maps to one JSON file
holding a :class:`CacheRecord`.  Reads come in two flavours:

- :meth:`CacheStore.read_fresh` only returns records younger than the ttl.
- :meth:`CacheStore.read_offline` returns any record, whatever its age, and
  is meant for when a live fetch has already failed.

Nothing is ever evicted on write; expiry is decided at read time.  Records
that cannot be read or parsed are treated as a miss.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_SUFFIX = ".json"


class CacheRecord(BaseModel, Generic[T]):
    """Serialized form of one cached listing."""

    key: str
    payload: list[T]
    stored_at: float = Field(allow_inf_nan=False)  # Unix seconds


class CacheStore(Generic[T]):
    """Persist listings of ``item_type`` under *directory*.

    *kind* namespaces the files so several stores can share one directory
    (``entries_*.json`` next to ``files_*.json``).  *clock* returns the
    current Unix time and exists so tests can move time around.
    """

    def __init__(
        self,
        directory: Path,
        *,
        kind: str,
        item_type: type[T],
        ttl: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl <= 0:
            msg = f"ttl must be positive, got {ttl!r}"
            raise ValueError(msg)
        if not kind or _UNSAFE_CHARS.search(kind):
            msg = f"Invalid cache kind {kind!r}"
            raise ValueError(msg)

        self._dir = Path(directory)
        self._kind = kind
        self._ttl = ttl
        self._clock = clock
        self._record_type = CacheRecord[item_type]  # type: ignore[valid-type]
        # Records whose disk write failed; served until a write succeeds.
        self._unsaved: dict[str, CacheRecord[T]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def directory(self) -> Path:
        return self._dir

    # -- reads ---------------------------------------------------------------

    def read_fresh(self, key: str) -> list[T] | None:
        """Return the payload for *key* if stored less than ``ttl`` ago."""
        record = self._load(key)
        if record is None:
            return None
        age = self._clock() - record.stored_at
        # A record from the future (clock skew, hand edits) is never fresh.
        if not 0 <= age < self._ttl:
            logger.debug("Cache %s/%s expired (age %.0fs)", self._kind, key, age)
            return None
        logger.debug("Cache hit %s/%s (age %.0fs)", self._kind, key, age)
        return list(record.payload)

    def read_offline(self, key: str) -> list[T] | None:
        """Return the payload for *key* regardless of age."""
        record = self._load(key)
        if record is None:
            return None
        return list(record.payload)

    # -- writes --------------------------------------------------------------

    def write(self, key: str, payload: Sequence[T]) -> None:
        """Store *payload* for *key*, replacing any previous record.

        An empty *payload* is ignored so that a failed or empty fetch never
        clobbers a useful record.
        """
        if not payload:
            logger.debug("Not caching empty %s listing for %r", self._kind, key)
            return

        record = self._record_type(key=key, payload=list(payload), stored_at=self._clock())
        path = self.path_for(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file, then atomically swap it in.
            fd, tmp_path_str = tempfile.mkstemp(
                prefix=f".{path.stem}-", suffix=".tmp", dir=self._dir
            )
            tmp_path = Path(tmp_path_str)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(record.model_dump_json(indent=2))
                os.replace(tmp_path, path)
            finally:
                tmp_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to write cache file %s: %s", path, exc)
            self._unsaved[key] = record
            return

        self._unsaved.pop(key, None)
        logger.debug("Cached %d %s item(s) for %r", len(record.payload), self._kind, key)

    # -- housekeeping ---------------------------------------------------------

    def clear(self) -> int:
        """Remove every record of this kind.  Returns the number of files removed."""
        self._unsaved.clear()
        removed = 0
        for path in self._files():
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("Failed to remove cache file %s: %s", path, exc)
                continue
            removed += 1
        return removed

    def has_any(self) -> bool:
        """True if at least one record of this kind exists on disk."""
        return any(True for _ in self._files())

    def path_for(self, key: str) -> Path:
        """Stable file path for *key*."""
        safe = _UNSAFE_CHARS.sub("_", key)
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:10]
        return self._dir / f"{self._kind}_{safe}-{digest}{_SUFFIX}"

    # -- internal helpers -----------------------------------------------------

    def _files(self) -> list[Path]:
        if not self._dir.is_dir():
            return []
        return sorted(self._dir.glob(f"{self._kind}_*{_SUFFIX}"))

    def _load(self, key: str) -> CacheRecord[T] | None:
        # Disk is read on every call so records cleared or rewritten by
        # another process are seen immediately.
        record = self._read_file(key)
        if record is None:
            return self._unsaved.get(key)
        return record

    def _read_file(self, key: str) -> CacheRecord[T] | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read cache file %s: %s", path, exc)
            return None

        try:
            record = self._record_type.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring corrupt cache file %s: %s", path, exc)
            return None

        if record.key != key:
            logger.warning(
                "Ignoring cache file %s: stored key %r does not match %r",
                path,
                record.key,
                key,
            )
            return None
        return record
