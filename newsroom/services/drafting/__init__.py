"""Freeform topic drafting services."""

from .base import ContextEntry, CopyDrafter, DraftContext, DraftRequest, DraftResult
from .heuristic import HeuristicCopyDrafter

__all__ = [
    "ContextEntry",
    "CopyDrafter",
    "DraftContext",
    "DraftRequest",
    "DraftResult",
    "HeuristicCopyDrafter",
]
