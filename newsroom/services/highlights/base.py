"""Highlight extraction abstractions."""

from __future__ import annotations

import abc
from typing import List

from ...data.models import AudioHighlight


class HighlightService(abc.ABC):
    """Pick the notable moments out of an audio transcript."""

    @abc.abstractmethod
    async def generate_highlights(
        self, transcript: str, duration_seconds: float, max_highlights: int
    ) -> List[AudioHighlight]:
        raise NotImplementedError


__all__ = ["HighlightService"]
