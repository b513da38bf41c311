"""Draft the optional freeform newsletter section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

from ..data.models import (
    ActionItem,
    AudioHighlight,
    FreeformTopicPrompt,
    FreeformTopicSuggestion,
    SynthesizedDecision,
    SynthesizedInsight,
)
from ..logging import get_logger
from ..services.drafting.base import ContextEntry, CopyDrafter, DraftContext, DraftRequest, DraftResult
from ..utils.text import ELLIPSIS, collapse_whitespace, is_usable_number, resolve_limit

LOGGER = get_logger(__name__)

DEFAULT_TITLE = "Additional Topic"
DEFAULT_BODY = (
    "Use this space to add any announcements or highlights that didn't fit into the main "
    "sections. Update the copy as needed before sharing."
)
DEFAULT_TONE_GUIDANCE = (
    "Friendly internal tone: highlight wins, appreciate contributors, and reinforce next steps."
)
DEFAULT_MAX_BODY_LENGTH = 1_500
MIN_MAX_BODY_LENGTH = 200
MAX_BODY_LENGTH_LIMIT = 3_000


@dataclass
class FreeformTopicContext:
    summary: Optional[str] = None
    decisions: Sequence[SynthesizedDecision] = field(default_factory=list)
    insights: Sequence[SynthesizedInsight] = field(default_factory=list)
    action_items: Sequence[ActionItem] = field(default_factory=list)
    audio_highlights: Sequence[AudioHighlight] = field(default_factory=list)


def resolve_max_body_length(value: Optional[float]) -> int:
    if is_usable_number(value) and value < MIN_MAX_BODY_LENGTH:
        return DEFAULT_MAX_BODY_LENGTH
    return resolve_limit(value, DEFAULT_MAX_BODY_LENGTH, MAX_BODY_LENGTH_LIMIT)


def resolve_tone_guidance(value: Optional[str]) -> str:
    return (value or "").strip() or DEFAULT_TONE_GUIDANCE


def normalize_prompt(prompt: Optional[FreeformTopicPrompt]) -> Optional[FreeformTopicPrompt]:
    if prompt is None:
        return None
    topic = (prompt.topic or "").strip()
    instructions = (prompt.instructions or "").strip()
    if not topic and not instructions:
        return None
    return FreeformTopicPrompt(topic=topic or DEFAULT_TITLE, instructions=instructions or None)


def _context_entries(items: Optional[Sequence[Any]], with_owner: bool = False) -> List[ContextEntry]:
    entries = []
    for item in items or []:
        if isinstance(item, Mapping):
            raw_id, raw_summary, raw_owner = item.get("id"), item.get("summary"), item.get("owner")
        else:
            raw_id = getattr(item, "id", None)
            raw_summary = getattr(item, "summary", None)
            raw_owner = getattr(item, "owner", None)
        entry_id = raw_id.strip() if isinstance(raw_id, str) else ""
        summary = raw_summary.strip() if isinstance(raw_summary, str) else ""
        if not entry_id or not summary:
            continue
        owner = raw_owner.strip() if with_owner and isinstance(raw_owner, str) else ""
        entries.append(ContextEntry(id=entry_id, summary=summary, owner=owner or None))
    return entries


def normalize_context(
    context: Optional[FreeformTopicContext], tone: str, max_body_length: int
) -> DraftContext:
    context = context or FreeformTopicContext()
    return DraftContext(
        tone=tone,
        max_body_length=max_body_length,
        summary=(context.summary or "").strip() or None,
        decisions=_context_entries(context.decisions),
        insights=_context_entries(context.insights),
        action_items=_context_entries(context.action_items, with_owner=True),
        audio_highlights=_context_entries(context.audio_highlights),
    )


def truncate_body(body: str, max_length: int) -> str:
    if len(body) <= max_length:
        return body
    return f"{body[: max_length - 1].rstrip()}{ELLIPSIS}"


def normalize_confidence(value: Any) -> Optional[float]:
    if not is_usable_number(value):
        return None
    return max(0.0, min(1.0, float(value)))


def build_fallback_suggestion(
    prompt: Optional[FreeformTopicPrompt], tone_guidance: str = DEFAULT_TONE_GUIDANCE
) -> FreeformTopicSuggestion:
    return FreeformTopicSuggestion(
        prompt=prompt,
        title=prompt.topic if prompt and prompt.topic else DEFAULT_TITLE,
        body=DEFAULT_BODY,
        tone_guidance=tone_guidance,
        is_prompt_aligned=prompt is not None,
    )


class FreeformTopicDrafter:
    """Produce an editable title and body for the freeform section.

    :meth:`generate` never raises: a drafting backend failure is logged and
    replaced with deterministic copy built from the prompt alone.
    """

    def __init__(
        self,
        drafter: CopyDrafter,
        max_body_length: Optional[int] = None,
        default_tone_guidance: Optional[str] = None,
    ) -> None:
        self.drafter = drafter
        self.max_body_length = resolve_max_body_length(max_body_length)
        self.tone_guidance = resolve_tone_guidance(default_tone_guidance)

    async def generate(
        self,
        prompt: Optional[FreeformTopicPrompt] = None,
        context: Optional[FreeformTopicContext] = None,
    ) -> FreeformTopicSuggestion:
        normalized_prompt = normalize_prompt(prompt)
        draft_context = normalize_context(context, self.tone_guidance, self.max_body_length)

        try:
            draft = await self.drafter.draft_copy(
                DraftRequest(prompt=normalized_prompt, context=draft_context)
            )
            return self._build_suggestion(normalized_prompt, draft)
        except Exception as exc:
            LOGGER.warning("Failed to generate freeform topic copy: %s", exc, exc_info=True)
            return build_fallback_suggestion(normalized_prompt, self.tone_guidance)

    def _build_suggestion(
        self, prompt: Optional[FreeformTopicPrompt], draft: Any
    ) -> FreeformTopicSuggestion:
        if isinstance(draft, Mapping):
            draft = DraftResult.model_validate(draft)
        draft = draft or DraftResult()

        title = collapse_whitespace(draft.title) or (prompt.topic if prompt else "") or DEFAULT_TITLE
        body = truncate_body(collapse_whitespace(draft.body) or DEFAULT_BODY, self.max_body_length)
        aligned = draft.is_prompt_aligned
        return FreeformTopicSuggestion(
            prompt=prompt,
            title=title,
            body=body,
            confidence=normalize_confidence(draft.confidence),
            tone_guidance=collapse_whitespace(draft.tone_guidance) or self.tone_guidance,
            is_prompt_aligned=aligned if isinstance(aligned, bool) else prompt is not None,
        )


__all__ = [
    "DEFAULT_BODY",
    "DEFAULT_MAX_BODY_LENGTH",
    "DEFAULT_TITLE",
    "DEFAULT_TONE_GUIDANCE",
    "FreeformTopicContext",
    "FreeformTopicDrafter",
    "build_fallback_suggestion",
    "normalize_confidence",
    "normalize_context",
    "normalize_prompt",
    "resolve_max_body_length",
    "resolve_tone_guidance",
    "truncate_body",
]
