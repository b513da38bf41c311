"""Newsletter assembler coordinating audio, synthesis, drafting, and rendering."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ...data.models import (
    AudioHighlightsSummary,
    FreeformTopicSuggestion,
    GenerationMetadata,
    NewsletterGenerationRequest,
    NewsletterGenerationResponse,
    StructuredNewsletter,
    TranscriptSynthesisResult,
)
from ...logging import get_logger
from ..audio_highlights import AudioHighlightExtractor
from ..freeform import (
    FreeformTopicContext,
    FreeformTopicDrafter,
    build_fallback_suggestion,
    normalize_prompt,
    resolve_tone_guidance,
)
from ..synthesis import ContentSynthesizer
from .sections import (
    IdFactory,
    build_action_items,
    build_closing,
    build_introduction,
    build_main_updates,
)

LOGGER = get_logger(__name__)

NowFactory = Callable[[], datetime]
Timer = Callable[[], float]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_created_at(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


@dataclass
class AssemblerDependencies:
    synthesizer: ContentSynthesizer
    audio_extractor: Optional[AudioHighlightExtractor] = None
    freeform_drafter: Optional[FreeformTopicDrafter] = None
    generate_id: Optional[IdFactory] = None
    now: Optional[NowFactory] = None
    timer: Optional[Timer] = None
    default_tone_guidance: Optional[str] = None


class NewsletterAssembler:
    """High-level coordinator for a single newsletter generation.

    Content synthesis is the only mandatory stage and its errors propagate.
    Audio summarisation and freeform drafting are optional enhancements: their
    failures are logged and the newsletter is rendered without them.
    """

    def __init__(self, dependencies: AssemblerDependencies) -> None:
        self.dependencies = dependencies

    async def assemble(
        self, request: NewsletterGenerationRequest, audio_data: Optional[bytes] = None
    ) -> NewsletterGenerationResponse:
        deps = self.dependencies
        timer = deps.timer or time.perf_counter
        started = timer()

        audio_task = asyncio.create_task(self._maybe_summarize_audio(request, audio_data))
        try:
            synthesis = await deps.synthesizer.synthesize(request.meeting_recap, request.transcript)
        except BaseException:
            audio_task.cancel()
            await asyncio.gather(audio_task, return_exceptions=True)
            raise
        audio_summary = await audio_task
        suggestion = await self._maybe_draft_freeform(request, synthesis, audio_summary)

        sections = self._build_structured_newsletter(request, synthesis, audio_summary, suggestion)

        finished = timer()
        created_at = format_created_at((deps.now or _utc_now)())
        warnings: List[str] = []
        if audio_summary is not None and audio_summary.warnings:
            warnings.extend(audio_summary.warnings)
        if synthesis.metadata.warnings:
            warnings.extend(synthesis.metadata.warnings)

        LOGGER.info(
            "Assembled newsletter with %d main update section(s) and %d action item(s)",
            len(sections.main_updates),
            len(sections.action_items.items),
        )
        return NewsletterGenerationResponse(
            sections=sections,
            metadata=GenerationMetadata(
                created_at=created_at,
                processing_time_ms=round((finished - started) * 1000),
                audio_summary_included=audio_summary is not None,
            ),
            warnings=warnings or None,
        )

    async def _maybe_summarize_audio(
        self, request: NewsletterGenerationRequest, audio_data: Optional[bytes]
    ) -> Optional[AudioHighlightsSummary]:
        extractor = self.dependencies.audio_extractor
        if extractor is None or request.audio is None:
            return None
        try:
            return await extractor.summarize(request.audio, audio_data)
        except Exception as exc:
            LOGGER.warning("Failed to summarize meeting audio: %s", exc, exc_info=True)
            return None

    async def _maybe_draft_freeform(
        self,
        request: NewsletterGenerationRequest,
        synthesis: TranscriptSynthesisResult,
        audio_summary: Optional[AudioHighlightsSummary],
    ) -> Optional[FreeformTopicSuggestion]:
        drafter = self.dependencies.freeform_drafter
        if drafter is None:
            return None
        context = FreeformTopicContext(
            summary=synthesis.summary,
            decisions=synthesis.decisions,
            insights=synthesis.insights,
            action_items=synthesis.action_items,
            audio_highlights=audio_summary.highlights if audio_summary is not None else [],
        )
        try:
            return await drafter.generate(request.freeform_topic_prompt, context)
        except Exception as exc:
            LOGGER.warning("Failed to draft freeform topic: %s", exc, exc_info=True)
            return None

    def _build_structured_newsletter(
        self,
        request: NewsletterGenerationRequest,
        synthesis: TranscriptSynthesisResult,
        audio_summary: Optional[AudioHighlightsSummary],
        suggestion: Optional[FreeformTopicSuggestion],
    ) -> StructuredNewsletter:
        generate_id = self.dependencies.generate_id
        introduction = build_introduction(synthesis, audio_summary, generate_id)
        main_updates = build_main_updates(synthesis, audio_summary, generate_id)
        action_items = build_action_items(synthesis.action_items, generate_id)
        closing = build_closing(synthesis, len(action_items.items), audio_summary, generate_id)
        if suggestion is None:
            suggestion = build_fallback_suggestion(
                normalize_prompt(request.freeform_topic_prompt),
                resolve_tone_guidance(self.dependencies.default_tone_guidance),
            )

        return StructuredNewsletter(
            introduction=introduction,
            main_updates=main_updates,
            action_items=action_items,
            closing=closing,
            freeform_topic=suggestion,
        )


async def assemble_newsletter(
    request: NewsletterGenerationRequest,
    audio_data: Optional[bytes] = None,
    *,
    dependencies: AssemblerDependencies,
) -> NewsletterGenerationResponse:
    """Assemble a newsletter for ``request`` using the given dependencies."""

    return await NewsletterAssembler(dependencies).assemble(request, audio_data)


__all__ = [
    "AssemblerDependencies",
    "NewsletterAssembler",
    "assemble_newsletter",
    "format_created_at",
]
