"""Recap and transcript synthesis services."""

from .base import (
    ActionItemExtractor,
    DecisionExtractor,
    InsightExtractor,
    SummaryInput,
    SummaryService,
    SynthesisInput,
)
from .heuristic import HeuristicSynthesisService

__all__ = [
    "ActionItemExtractor",
    "DecisionExtractor",
    "HeuristicSynthesisService",
    "InsightExtractor",
    "SummaryInput",
    "SummaryService",
    "SynthesisInput",
]
