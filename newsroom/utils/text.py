"""Text helpers shared by the synthesis stages."""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")

ELLIPSIS = "…"


def split_sentences(text: str) -> List[str]:
    return [sentence.strip() for sentence in _SENTENCE_BOUNDARY.split(text) if sentence.strip()]


def clamp_text(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, the last one being an ellipsis."""

    if len(text) <= max_length:
        return text
    return f"{text[: max(0, max_length - 1)]}{ELLIPSIS}"


def collapse_whitespace(value: Optional[str]) -> str:
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def clean_optional(value: Any) -> Optional[str]:
    """Trim a free-text field, mapping blanks and non-strings to ``None``."""

    if not isinstance(value, str):
        return None
    return value.strip() or None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_usable_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def resolve_limit(value: Optional[float], default: int, ceiling: int, floor: float = 0) -> int:
    """Normalise a caller-supplied limit.

    Missing, non-finite or values at or below ``floor`` fall back to ``default``;
    anything else is rounded and capped at ``ceiling``.
    """

    if not is_usable_number(value) or value <= floor:
        return default
    rounded = round_half_up(value)
    if rounded <= 0:
        return default
    return min(rounded, ceiling)


__all__ = [
    "ELLIPSIS",
    "clamp_text",
    "clean_optional",
    "collapse_whitespace",
    "is_usable_number",
    "resolve_limit",
    "round_half_up",
    "split_sentences",
]
