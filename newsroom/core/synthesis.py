"""Merge recap and transcript text into a summary plus extracted facts."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from ..data.models import (
    ActionItem,
    ContentSource,
    MeetingRecapInput,
    MeetingTranscriptInput,
    SynthesizedDecision,
    SynthesizedInsight,
    TranscriptSynthesisMetadata,
    TranscriptSynthesisResult,
)
from ..logging import get_logger
from ..services.synthesis.base import (
    ActionItemExtractor,
    DecisionExtractor,
    InsightExtractor,
    SummaryInput,
    SummaryService,
    SynthesisInput,
)
from ..utils.text import clean_optional, is_usable_number, resolve_limit
from .errors import TranscriptSynthesizerError, TranscriptSynthesizerErrorCode

LOGGER = get_logger(__name__)

MAX_COMBINED_TEXT_LENGTH = 20_000
DEFAULT_SUMMARY_MAX_LENGTH = 1_000

_ACTION_STATUSES = {"pending", "in_progress", "completed"}

T = TypeVar("T")


def resolve_summary_max_length(value: Optional[float]) -> int:
    return resolve_limit(value, DEFAULT_SUMMARY_MAX_LENGTH, DEFAULT_SUMMARY_MAX_LENGTH)


def truncate_combined_text(value: str) -> Tuple[str, bool]:
    if len(value) <= MAX_COMBINED_TEXT_LENGTH:
        return value, False
    return value[:MAX_COMBINED_TEXT_LENGTH], True


def normalize_source(value: Any) -> ContentSource:
    try:
        return ContentSource(value)
    except ValueError:
        return ContentSource.BOTH


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, BaseModel):
        return getattr(entry, name, None)
    if isinstance(entry, Mapping):
        if name in entry:
            return entry[name]
        return entry.get(to_camel(name))
    return getattr(entry, name, None)


def _entry_id(entry: Any, prefix: str, position: int) -> str:
    value = _field(entry, "id")
    if value is None or value == "":
        return f"{prefix}-{position}"
    return str(value)


def _entry_summary(entry: Any) -> str:
    summary = _field(entry, "summary")
    return summary.strip() if isinstance(summary, str) else ""


def _sanitize(
    entries: Optional[Iterable[Any]], build: Callable[[Any, int], T], summary_of: Callable[[T], str]
) -> List[T]:
    if not entries:
        return []
    sanitized = [build(entry, index + 1) for index, entry in enumerate(entries) if entry is not None]
    return [item for item in sanitized if summary_of(item)]


def sanitize_decisions(decisions: Optional[Iterable[Any]]) -> List[SynthesizedDecision]:
    def build(entry: Any, position: int) -> SynthesizedDecision:
        confidence = _field(entry, "confidence")
        return SynthesizedDecision(
            id=_entry_id(entry, "decision", position),
            summary=_entry_summary(entry),
            source=normalize_source(_field(entry, "source")),
            rationale=clean_optional(_field(entry, "rationale")),
            confidence=confidence if is_usable_number(confidence) else None,
            supporting_evidence=clean_optional(_field(entry, "supporting_evidence")),
        )

    return _sanitize(decisions, build, lambda decision: decision.summary)


def sanitize_action_items(items: Optional[Iterable[Any]]) -> List[ActionItem]:
    def build(entry: Any, position: int) -> ActionItem:
        status = _field(entry, "status")
        return ActionItem(
            id=_entry_id(entry, "action", position),
            summary=_entry_summary(entry),
            owner=clean_optional(_field(entry, "owner")),
            due_date=clean_optional(_field(entry, "due_date")),
            status=status if status in _ACTION_STATUSES else None,
            source=normalize_source(_field(entry, "source")),
        )

    return _sanitize(items, build, lambda item: item.summary)


def sanitize_insights(insights: Optional[Iterable[Any]]) -> List[SynthesizedInsight]:
    def build(entry: Any, position: int) -> SynthesizedInsight:
        return SynthesizedInsight(
            id=_entry_id(entry, "insight", position),
            summary=_entry_summary(entry),
            source=normalize_source(_field(entry, "source")),
            quote=clean_optional(_field(entry, "quote")),
            category=clean_optional(_field(entry, "category")),
        )

    return _sanitize(insights, build, lambda insight: insight.summary)


class ContentSynthesizer:
    """Summarise recap and transcript text and extract decisions, actions and insights.

    Stages run strictly in order (summary, decisions, action items, insights)
    and the first failing stage aborts the synthesis with its own error code.
    """

    def __init__(
        self,
        summarizer: SummaryService,
        decision_extractor: DecisionExtractor,
        action_item_extractor: ActionItemExtractor,
        insight_extractor: Optional[InsightExtractor] = None,
        summary_max_length: Optional[int] = None,
    ) -> None:
        self.summarizer = summarizer
        self.decision_extractor = decision_extractor
        self.action_item_extractor = action_item_extractor
        self.insight_extractor = insight_extractor
        self.summary_max_length = summary_max_length

    async def synthesize(
        self,
        meeting_recap: Optional[MeetingRecapInput] = None,
        transcript: Optional[MeetingTranscriptInput] = None,
        summary_max_length: Optional[float] = None,
    ) -> TranscriptSynthesisResult:
        recap_text = (meeting_recap.text if meeting_recap else "").strip()
        transcript_text = (transcript.text if transcript else "").strip()

        if not recap_text and not transcript_text:
            raise TranscriptSynthesizerError(
                TranscriptSynthesizerErrorCode.NO_CONTENT_PROVIDED,
                "Either a meeting recap or transcript is required to synthesize content.",
            )

        combined = "\n\n".join(text for text in (recap_text, transcript_text) if text)
        combined_text, was_truncated = truncate_combined_text(combined)

        warnings: List[str] = []
        if was_truncated:
            LOGGER.warning(
                "Combined input of %d characters truncated to %d", len(combined), MAX_COMBINED_TEXT_LENGTH
            )
            warnings.append(
                f"Combined recap and transcript content exceeded {MAX_COMBINED_TEXT_LENGTH} "
                "characters and was truncated for processing."
            )

        base_input = SynthesisInput(
            combined_text=combined_text,
            recap_text=recap_text,
            transcript_text=transcript_text,
        )
        max_length = resolve_summary_max_length(
            summary_max_length if summary_max_length is not None else self.summary_max_length
        )

        try:
            summary = await self.summarizer.summarize(
                SummaryInput(
                    combined_text=combined_text,
                    recap_text=recap_text,
                    transcript_text=transcript_text,
                    max_length=max_length,
                )
            )
        except Exception as exc:
            raise TranscriptSynthesizerError(
                TranscriptSynthesizerErrorCode.SUMMARY_FAILED,
                "Failed to generate combined summary from recap and transcript.",
            ) from exc

        try:
            decisions = await self.decision_extractor.extract_decisions(base_input)
        except Exception as exc:
            raise TranscriptSynthesizerError(
                TranscriptSynthesizerErrorCode.DECISION_EXTRACTION_FAILED,
                "Failed to extract key decisions.",
            ) from exc

        try:
            action_items = await self.action_item_extractor.extract_action_items(base_input)
        except Exception as exc:
            raise TranscriptSynthesizerError(
                TranscriptSynthesizerErrorCode.ACTION_ITEM_EXTRACTION_FAILED,
                "Failed to extract action items.",
            ) from exc

        insights: Iterable[Any] = []
        if self.insight_extractor is not None:
            try:
                insights = await self.insight_extractor.extract_insights(base_input)
            except Exception as exc:
                raise TranscriptSynthesizerError(
                    TranscriptSynthesizerErrorCode.INSIGHT_EXTRACTION_FAILED,
                    "Failed to extract supporting insights.",
                ) from exc

        result = TranscriptSynthesisResult(
            summary=(summary or "").strip(),
            decisions=sanitize_decisions(decisions),
            action_items=sanitize_action_items(action_items),
            insights=sanitize_insights(insights),
            metadata=TranscriptSynthesisMetadata(
                used_recap=bool(recap_text),
                used_transcript=bool(transcript_text),
                combined_character_count=len(combined_text),
                truncated_input=True if was_truncated else None,
                warnings=warnings or None,
            ),
        )
        LOGGER.debug(
            "Synthesized %d decisions, %d action items, %d insights",
            len(result.decisions),
            len(result.action_items),
            len(result.insights),
        )
        return result


__all__ = [
    "DEFAULT_SUMMARY_MAX_LENGTH",
    "MAX_COMBINED_TEXT_LENGTH",
    "ContentSynthesizer",
    "normalize_source",
    "resolve_summary_max_length",
    "sanitize_action_items",
    "sanitize_decisions",
    "sanitize_insights",
    "truncate_combined_text",
]
