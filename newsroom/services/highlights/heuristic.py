"""Sentence based highlight picker used when no model backend is configured."""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from ...data.models import AudioHighlight
from ...utils.text import clamp_text, round_half_up, split_sentences
from .base import HighlightService

MAX_HIGHLIGHT_LENGTH = 180


def estimate_time_bounds(
    duration_seconds: float, index: int, total: int
) -> Tuple[Optional[int], Optional[int]]:
    """Split the recording evenly across ``total`` highlights.

    Zero bounds are reported as ``None``, so the first highlight never
    carries a start time.
    """

    if not math.isfinite(duration_seconds) or duration_seconds <= 0 or total <= 0:
        return None, None

    segment_length = duration_seconds / total
    start = max(0, round_half_up(segment_length * index))
    end = min(duration_seconds, round_half_up(segment_length * (index + 1)))
    return start or None, end or None


class HeuristicHighlightService(HighlightService):
    def __init__(self, max_length: int = MAX_HIGHLIGHT_LENGTH) -> None:
        self.max_length = max_length

    async def generate_highlights(
        self, transcript: str, duration_seconds: float, max_highlights: int
    ) -> List[AudioHighlight]:
        sentences = split_sentences(transcript)
        if not sentences and transcript.strip():
            sentences = [transcript.strip()]

        limited = sentences[: max(1, max_highlights)]
        highlights = []
        for index, sentence in enumerate(limited):
            start, end = estimate_time_bounds(duration_seconds, index, len(limited))
            highlights.append(
                AudioHighlight(
                    id=f"audio-highlight-{index + 1}",
                    summary=clamp_text(sentence, self.max_length),
                    start_time_seconds=start,
                    end_time_seconds=end,
                )
            )
        return highlights


__all__ = ["HeuristicHighlightService", "estimate_time_bounds"]
