"""Keyword heuristics standing in for a model-backed synthesis backend."""

from __future__ import annotations

import re
from typing import Iterable, List, Pattern, Sequence

from ...data.models import ActionItem, ContentSource, SynthesizedDecision, SynthesizedInsight
from ...utils.text import clamp_text, collapse_whitespace, split_sentences
from .base import (
    ActionItemExtractor,
    DecisionExtractor,
    InsightExtractor,
    SummaryInput,
    SummaryService,
    SynthesisInput,
)

SUMMARY_SENTENCES = 4
MAX_DECISIONS = 5
MAX_ACTION_ITEMS = 8
MAX_INSIGHTS = 5

DECISION_KEYWORDS = [re.compile(p, re.IGNORECASE) for p in (r"decid", r"agree", r"approve", r"plan", r"commit")]
ACTION_KEYWORDS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"action", r"follow[-\s]?up", r"next step", r"assign", r"owner", r"todo")
]
INSIGHT_KEYWORDS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"insight", r"learn", r"noted?", r"highlight", r"trend", r"metric", r"win")
]

_BULLET_MARKER = re.compile(r"^(?:[-*•]|\d+[.)])\s+")


def matches_keywords(sentence: str, keywords: Iterable[Pattern[str]]) -> bool:
    return any(keyword.search(sentence) for keyword in keywords)


def determine_source(sentence: str, recap_text: str, transcript_text: str) -> ContentSource:
    """Attribute a sentence by locating it verbatim (case-insensitive) in each input."""

    needle = sentence.lower()
    in_recap = needle in recap_text.lower()
    in_transcript = needle in transcript_text.lower()

    if in_recap and in_transcript:
        return ContentSource.BOTH
    if in_recap:
        return ContentSource.RECAP
    if in_transcript:
        return ContentSource.TRANSCRIPT
    return ContentSource.RECAP if recap_text else ContentSource.TRANSCRIPT


def action_candidates(text: str) -> List[str]:
    """Bulleted lines as whole fragments, other lines split into sentences.

    Only a marker at the start of a line counts as a bullet; hyphens and
    asterisks inside a line (as in "follow-up") do not split it.
    """

    candidates: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if _BULLET_MARKER.match(stripped):
            fragment = _BULLET_MARKER.sub("", stripped).strip()
            if fragment:
                candidates.append(fragment)
        else:
            candidates.extend(split_sentences(stripped))
    return candidates


def _unique(candidates: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate not in seen:
            seen.add(candidate)
            unique.append(candidate)
    return unique


def _sentences(request: SynthesisInput) -> List[str]:
    return split_sentences(request.recap_text) + split_sentences(request.transcript_text)


def _classify(candidates: Sequence[str], keywords: Sequence[Pattern[str]], limit: int) -> List[str]:
    return [candidate for candidate in candidates if matches_keywords(candidate, keywords)][:limit]


class HeuristicSynthesisService(SummaryService, DecisionExtractor, ActionItemExtractor, InsightExtractor):
    """Implements every synthesis capability with sentence splitting and keyword lists."""

    async def summarize(self, request: SummaryInput) -> str:
        sentences = split_sentences(request.combined_text)
        if not sentences:
            return clamp_text(request.combined_text.strip(), request.max_length)
        return clamp_text(" ".join(sentences[:SUMMARY_SENTENCES]), request.max_length)

    async def extract_decisions(self, request: SynthesisInput) -> List[SynthesizedDecision]:
        matches = _classify(_sentences(request), DECISION_KEYWORDS, MAX_DECISIONS)
        return [
            SynthesizedDecision(
                id=f"decision-{index + 1}",
                summary=collapse_whitespace(sentence),
                source=determine_source(sentence, request.recap_text, request.transcript_text),
            )
            for index, sentence in enumerate(matches)
        ]

    async def extract_action_items(self, request: SynthesisInput) -> List[ActionItem]:
        candidates = _unique(
            action_candidates(request.recap_text) + action_candidates(request.transcript_text)
        )
        matches = _classify(candidates, ACTION_KEYWORDS, MAX_ACTION_ITEMS)
        return [
            ActionItem(
                id=f"action-{index + 1}",
                summary=collapse_whitespace(candidate),
                source=determine_source(candidate, request.recap_text, request.transcript_text),
            )
            for index, candidate in enumerate(matches)
        ]

    async def extract_insights(self, request: SynthesisInput) -> List[SynthesizedInsight]:
        matches = _classify(_sentences(request), INSIGHT_KEYWORDS, MAX_INSIGHTS)
        return [
            SynthesizedInsight(
                id=f"insight-{index + 1}",
                summary=collapse_whitespace(sentence),
                source=determine_source(sentence, request.recap_text, request.transcript_text),
            )
            for index, sentence in enumerate(matches)
        ]


__all__ = [
    "ACTION_KEYWORDS",
    "DECISION_KEYWORDS",
    "INSIGHT_KEYWORDS",
    "HeuristicSynthesisService",
    "action_candidates",
    "determine_source",
    "matches_keywords",
]
