"""Deterministic renderers for the five newsletter sections."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from ...data.models import (
    ActionItem,
    ActionItemsSection,
    AudioHighlightsSummary,
    NewsletterSection,
    SynthesizedDecision,
    SynthesizedInsight,
    TranscriptSynthesisResult,
)

IdFactory = Callable[[], str]

BULLET = "•"
SEPARATOR = " — "
MAX_INTRO_CALLOUTS = 3

INTRODUCTION_FALLBACK = "This week's update covers the latest progress and next steps from the team."
MAIN_UPDATES_FALLBACK = (
    "No major updates were captured this cycle. Please review the action items and closing "
    "notes for next steps."
)
ACTION_ITEMS_FALLBACK = "No action items were captured for this update."
CLOSING_THANKS = (
    "Thank you for staying aligned. Reach out if any clarifications are needed before the "
    "next check-in."
)
CLOSING_FALLBACK = "Thanks for reading and keep up the great work!"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _section_id(generate_id: Optional[IdFactory], default: str) -> str:
    return generate_id() if generate_id is not None else default


def _bullet(*segments: str) -> str:
    return f"{BULLET} {SEPARATOR.join(segments)}"


def format_timestamp(seconds: float) -> str:
    """``M:SS`` for a highlight offset; negative or non-finite values read as ``0:00``."""

    if not math.isfinite(seconds) or seconds < 0:
        return "0:00"
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def format_due_date(value: str) -> str:
    """Render an ISO-8601 date as ``Mon D, YYYY``; unparsable input is returned unchanged."""

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return f"{_MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def build_introduction(
    synthesis: TranscriptSynthesisResult,
    audio_summary: Optional[AudioHighlightsSummary],
    generate_id: Optional[IdFactory] = None,
) -> NewsletterSection:
    blocks: List[str] = []
    summary = synthesis.summary.strip()
    if summary:
        blocks.append(summary)

    if audio_summary is not None and audio_summary.highlights:
        callouts = "\n".join(
            _bullet(highlight.summary) for highlight in audio_summary.highlights[:MAX_INTRO_CALLOUTS]
        )
        blocks.append(f"Audio callouts:\n{callouts}")

    if not blocks:
        blocks.append(INTRODUCTION_FALLBACK)

    return NewsletterSection(
        id=_section_id(generate_id, "introduction"),
        title="Introduction",
        body="\n\n".join(blocks),
    )


def format_decisions(decisions: Sequence[SynthesizedDecision]) -> Optional[str]:
    if not decisions:
        return None
    lines = []
    for decision in decisions:
        segments = [decision.summary]
        if decision.rationale:
            segments.append(f"Why it matters: {decision.rationale}")
        lines.append(_bullet(*segments))
    return "\n".join(lines)


def format_insights_and_highlights(
    insights: Sequence[SynthesizedInsight], audio_summary: Optional[AudioHighlightsSummary]
) -> Optional[str]:
    lines = []
    for insight in insights:
        segments = [insight.summary]
        if insight.quote:
            segments.append(f'Quote: "{insight.quote}"')
        lines.append(_bullet(*segments))

    if audio_summary is not None:
        for highlight in audio_summary.highlights:
            segments = [highlight.summary]
            if highlight.start_time_seconds is not None:
                segments.append(f"Timestamp: {format_timestamp(highlight.start_time_seconds)}")
            lines.append(_bullet(*segments))

    return "\n".join(lines) if lines else None


def build_main_updates(
    synthesis: TranscriptSynthesisResult,
    audio_summary: Optional[AudioHighlightsSummary],
    generate_id: Optional[IdFactory] = None,
) -> List[NewsletterSection]:
    sections = []

    decisions_body = format_decisions(synthesis.decisions)
    if decisions_body:
        sections.append(
            NewsletterSection(
                id=_section_id(generate_id, "main-updates-decisions"),
                title="Key Decisions",
                body=decisions_body,
            )
        )

    insights_body = format_insights_and_highlights(synthesis.insights, audio_summary)
    if insights_body:
        sections.append(
            NewsletterSection(
                id=_section_id(generate_id, "main-updates-highlights"),
                title="Highlights & Insights",
                body=insights_body,
                highlights=[highlight.summary for highlight in audio_summary.highlights]
                if audio_summary is not None
                else None,
            )
        )

    if not sections:
        sections.append(
            NewsletterSection(
                id=_section_id(generate_id, "main-updates-overview"),
                title="Main Updates",
                body=MAIN_UPDATES_FALLBACK,
            )
        )
    return sections


def normalize_action_items(items: Sequence[ActionItem]) -> List[ActionItem]:
    normalized = []
    for position, item in enumerate(items, start=1):
        normalized.append(
            item.model_copy(
                update={
                    "summary": item.summary.strip() or f"Follow up item {position}",
                    "owner": (item.owner or "").strip() or None,
                    "due_date": (item.due_date or "").strip() or None,
                }
            )
        )
    return normalized


def format_action_item(item: ActionItem) -> str:
    details = []
    if item.owner:
        details.append(f"Owner: {item.owner}")
    if item.due_date:
        details.append(f"Due: {format_due_date(item.due_date)}")
    if details:
        return _bullet(item.summary, " | ".join(details))
    return _bullet(item.summary)


def build_action_items(
    items: Sequence[ActionItem], generate_id: Optional[IdFactory] = None
) -> ActionItemsSection:
    normalized = normalize_action_items(items)
    body = "\n".join(format_action_item(item) for item in normalized) or ACTION_ITEMS_FALLBACK
    return ActionItemsSection(
        id=_section_id(generate_id, "action-items"),
        title="Action Items",
        body=body,
        items=normalized,
    )


def build_closing(
    synthesis: TranscriptSynthesisResult,
    action_item_count: int,
    audio_summary: Optional[AudioHighlightsSummary],
    generate_id: Optional[IdFactory] = None,
) -> NewsletterSection:
    lines = []
    if action_item_count > 0:
        lines.append(
            f"Please review the {action_item_count} action item(s) listed above and confirm ownership."
        )
    if audio_summary is not None and audio_summary.warnings:
        lines.extend(f"Note: {warning}" for warning in audio_summary.warnings)
    if not lines and synthesis.summary.strip():
        lines.append(CLOSING_THANKS)
    if not lines:
        lines.append(CLOSING_FALLBACK)

    return NewsletterSection(
        id=_section_id(generate_id, "closing"),
        title="Closing",
        body="\n\n".join(lines),
    )


__all__ = [
    "ACTION_ITEMS_FALLBACK",
    "CLOSING_FALLBACK",
    "CLOSING_THANKS",
    "INTRODUCTION_FALLBACK",
    "MAIN_UPDATES_FALLBACK",
    "IdFactory",
    "build_action_items",
    "build_closing",
    "build_introduction",
    "build_main_updates",
    "format_action_item",
    "format_due_date",
    "format_timestamp",
    "normalize_action_items",
]
