"""Shape checks for user-supplied repository references."""

from __future__ import annotations

import re

_DIRECT_GGUF_URL = re.compile(r"^https?://\S+\.gguf$", re.IGNORECASE)
_HUB_URL = re.compile(r"https?://huggingface\.co/([^/?#\s]+/[^/?#\s]+)")
_REPO_ID = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def is_direct_gguf_url(text: str) -> bool:
    """True if *text* is an http(s) URL pointing straight at a ``.gguf`` file."""
    return bool(_DIRECT_GGUF_URL.match(text.strip()))


def parse_repository_input(text: str) -> str | None:
    """Normalize *text* to an ``owner/name`` repository id.

    Accepts a bare id (``kolosal/gemma-3-1b``) or a hub URL
    (``https://huggingface.co/kolosal/gemma-3-1b/tree/main``).  Returns
    ``None`` for empty input, direct ``.gguf`` file URLs, and anything else
    that does not look like a repository.
    """
    trimmed = text.strip()
    if not trimmed or is_direct_gguf_url(trimmed):
        return None

    match = _HUB_URL.search(trimmed)
    if match:
        return match.group(1)

    if _REPO_ID.match(trimmed):
        return trimmed
    return None
