"""Quantization detection and ranking for GGUF filenames.

Filenames published on the hub embed their precision as a token such as
``Q4_K_M``, ``Q8_0`` or ``F16``.  :func:`classify` picks out that token and
maps it onto a total order in which higher-bit (less lossy) variants come
first, so the best default is always at the front of a sorted listing.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple, TypeVar

UNKNOWN_TAG = "Unknown"

# Marker used by Unsloth "dynamic" uploads, e.g. ``model-UD-Q4_K_XL.gguf``.
_DYNAMIC_MARKER = "ud-"


class Quantization(NamedTuple):
    tag: str
    rank: int


# ---------------------------------------------------------------------------
# Rank order (best first)
# ---------------------------------------------------------------------------

# fmt: off
_TAGS: dict[str, str] = {
    "F32":        "32-bit floating point, original precision",
    "BF16":       "16-bit brain floating point, near-original precision",
    "F16":        "16-bit floating point, highest quality but large size",
    "UD-Q8_K_XL": "8-bit Unsloth Dynamic K-quantization (XL)",
    "Q8_K_XL":    "8-bit K-quantization (XL), maximum quality",
    "Q8_0":       "8-bit quantization, excellent quality",
    "UD-Q6_K_XL": "6-bit Unsloth Dynamic K-quantization (XL)",
    "Q6_K_XL":    "6-bit K-quantization (XL), very high quality",
    "Q6_K":       "6-bit quantization, high quality with smaller size",
    "UD-Q5_K_XL": "5-bit Unsloth Dynamic K-quantization (XL)",
    "Q5_K_XL":    "5-bit K-quantization (XL), high quality",
    "Q5_K_M":     "5-bit quantization (medium), good quality/size balance",
    "Q5_K":       "5-bit K-quantization, same as Q5_K_M",
    "Q5_K_S":     "5-bit quantization (small), smaller size",
    "Q5_1":       "5-bit quantization v1, legacy format",
    "Q5_0":       "5-bit quantization, legacy format",
    "UD-Q4_K_XL": "4-bit Unsloth Dynamic K-quantization (XL)",
    "Q4_K_XL":    "4-bit K-quantization (XL), good quality",
    "Q4_K_L":     "4-bit quantization (large), better quality at 4-bit",
    "Q4_K_M":     "4-bit quantization (medium), good for most use cases",
    "Q4_K":       "4-bit K-quantization, same as Q4_K_M",
    "Q4_K_S":     "4-bit quantization (small), very compact",
    "Q4_1":       "4-bit quantization v1, legacy format",
    "Q4_0":       "4-bit quantization, legacy format",
    "IQ4_NL":     "4-bit importance quantization (non-linear)",
    "IQ4_XS":     "4-bit importance quantization (extra small)",
    "UD-Q3_K_XL": "3-bit Unsloth Dynamic K-quantization (XL)",
    "Q3_K_XL":    "3-bit K-quantization (XL), compact with quality",
    "Q3_K_L":     "3-bit quantization (large)",
    "Q3_K_M":     "3-bit quantization (medium), very small size",
    "Q3_K":       "3-bit K-quantization, same as Q3_K_M",
    "Q3_K_S":     "3-bit quantization (small), ultra compact",
    "IQ3_M":      "3-bit importance quantization (medium)",
    "IQ3_S":      "3-bit importance quantization (small)",
    "IQ3_XS":     "3-bit importance quantization (extra small)",
    "UD-IQ3_XXS": "3-bit Unsloth Dynamic importance quantization (XXS)",
    "IQ3_XXS":    "3-bit importance quantization (extra extra small)",
    "UD-Q2_K_XL": "2-bit Unsloth Dynamic K-quantization (XL)",
    "Q2_K_XL":    "2-bit K-quantization (XL), very compact",
    "Q2_K_L":     "2-bit quantization (large)",
    "Q2_K":       "2-bit quantization, extremely small but lower quality",
    "UD-IQ2_M":   "2-bit Unsloth Dynamic importance quantization (medium)",
    "IQ2_M":      "2-bit importance quantization (medium)",
    "IQ2_S":      "2-bit importance quantization (small)",
    "IQ2_XS":     "2-bit importance quantization (extra small)",
    "UD-IQ2_XXS": "2-bit Unsloth Dynamic importance quantization (XXS)",
    "IQ2_XXS":    "2-bit importance quantization (extra extra small)",
    "UD-IQ1_M":   "1-bit Unsloth Dynamic importance quantization (medium)",
    "IQ1_M":      "1-bit importance quantization (medium), experimental",
    "UD-IQ1_S":   "1-bit Unsloth Dynamic importance quantization (small)",
    "IQ1_S":      "1-bit importance quantization (small), experimental",
    UNKNOWN_TAG:  "Unknown quantization type",
}
# fmt: on

_RANKS: dict[str, int] = {tag: i + 1 for i, tag in enumerate(_TAGS)}

# ---------------------------------------------------------------------------
# Match order (most specific first)
# ---------------------------------------------------------------------------

# (lower-case needle, tag).  Longer tokens precede their prefixes, so
# ``q4_k_xl`` is tried before ``q4_k_l`` and ``bf16`` before ``f16``.
_NEEDLES: tuple[tuple[str, str], ...] = (
    ("q8_k_xl", "Q8_K_XL"),
    ("q6_k_xl", "Q6_K_XL"),
    ("q5_k_xl", "Q5_K_XL"),
    ("q4_k_xl", "Q4_K_XL"),
    ("q3_k_xl", "Q3_K_XL"),
    ("q2_k_xl", "Q2_K_XL"),
    ("iq1_s", "IQ1_S"),
    ("iq1_m", "IQ1_M"),
    ("iq2_xxs", "IQ2_XXS"),
    ("iq2_m", "IQ2_M"),
    ("iq2_xs", "IQ2_XS"),
    ("iq2_s", "IQ2_S"),
    ("iq3_xxs", "IQ3_XXS"),
    ("iq3_xs", "IQ3_XS"),
    ("iq3_m", "IQ3_M"),
    ("iq3_s", "IQ3_S"),
    ("iq4_nl", "IQ4_NL"),
    ("iq4_xs", "IQ4_XS"),
    ("q8_0", "Q8_0"),
    ("q6_k", "Q6_K"),
    ("q5_k_m", "Q5_K_M"),
    ("q5_k_s", "Q5_K_S"),
    ("q5_1", "Q5_1"),
    ("q5_0", "Q5_0"),
    ("q5_k", "Q5_K"),
    ("q4_k_m", "Q4_K_M"),
    ("q4_k_l", "Q4_K_L"),
    ("q4_k_s", "Q4_K_S"),
    ("q4_1", "Q4_1"),
    ("q4_0", "Q4_0"),
    ("q4_k", "Q4_K"),
    ("q3_k_l", "Q3_K_L"),
    ("q3_k_m", "Q3_K_M"),
    ("q3_k_s", "Q3_K_S"),
    ("q3_k", "Q3_K"),
    ("q2_k_l", "Q2_K_L"),
    ("q2_k", "Q2_K"),
    ("bf16", "BF16"),
    ("fp16", "F16"),
    ("f16", "F16"),
    ("fp32", "F32"),
    ("f32", "F32"),
)


def classify(filename: str) -> Quantization:
    """Return the quantization tag and priority rank for *filename*.

    Lower rank is better.  Names without a recognizable token get
    ``("Unknown", <last rank>)``; this never raises.
    """
    lowered = filename.lower()
    for needle, tag in _NEEDLES:
        if needle in lowered:
            if _DYNAMIC_MARKER in lowered and f"UD-{tag}" in _RANKS:
                tag = f"UD-{tag}"
            return Quantization(tag, _RANKS[tag])
    return Quantization(UNKNOWN_TAG, _RANKS[UNKNOWN_TAG])


def describe(tag: str) -> str:
    """Human-readable description for a tag returned by :func:`classify`."""
    return _TAGS.get(tag, _TAGS[UNKNOWN_TAG])


def known_tags() -> list[str]:
    """All recognized tags in priority order (best first)."""
    return list(_TAGS)


_T = TypeVar("_T")


def sort_by_priority(files: Iterable[_T]) -> list[_T]:
    """Stable ascending sort on ``priority_rank``; ties keep input order."""
    return sorted(files, key=lambda f: f.priority_rank)  # type: ignore[attr-defined]
