"""Summarisation and extraction abstractions.

Extractors may return pydantic models or plain mappings; the synthesizer
sanitises either shape, filling in ids and normalising the source tag.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from ...data.models import ActionItem, SynthesizedDecision, SynthesizedInsight


@dataclass(frozen=True)
class SynthesisInput:
    combined_text: str
    recap_text: str
    transcript_text: str


@dataclass(frozen=True)
class SummaryInput(SynthesisInput):
    max_length: int


RawEntry = Mapping[str, Any]
DecisionEntries = Sequence[Union[SynthesizedDecision, RawEntry]]
ActionItemEntries = Sequence[Union[ActionItem, RawEntry]]
InsightEntries = Sequence[Union[SynthesizedInsight, RawEntry]]


class SummaryService(abc.ABC):
    @abc.abstractmethod
    async def summarize(self, request: SummaryInput) -> str:
        raise NotImplementedError


class DecisionExtractor(abc.ABC):
    @abc.abstractmethod
    async def extract_decisions(self, request: SynthesisInput) -> DecisionEntries:
        raise NotImplementedError


class ActionItemExtractor(abc.ABC):
    @abc.abstractmethod
    async def extract_action_items(self, request: SynthesisInput) -> ActionItemEntries:
        raise NotImplementedError


class InsightExtractor(abc.ABC):
    @abc.abstractmethod
    async def extract_insights(self, request: SynthesisInput) -> InsightEntries:
        raise NotImplementedError


__all__ = [
    "ActionItemEntries",
    "ActionItemExtractor",
    "DecisionEntries",
    "DecisionExtractor",
    "InsightEntries",
    "InsightExtractor",
    "RawEntry",
    "SummaryInput",
    "SummaryService",
    "SynthesisInput",
]
