"""Audio highlight services."""

from .base import HighlightService
from .heuristic import HeuristicHighlightService

__all__ = ["HighlightService", "HeuristicHighlightService"]
