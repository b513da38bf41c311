"""Factories for runtime service selection."""

from __future__ import annotations

from typing import Optional

from ..config import Settings, get_settings
from .drafting.base import CopyDrafter
from .drafting.heuristic import HeuristicCopyDrafter
from .drafting.openai_drafting import OpenAICopyDrafter
from .highlights.base import HighlightService
from .highlights.heuristic import HeuristicHighlightService
from .synthesis.base import SummaryService
from .synthesis.heuristic import HeuristicSynthesisService
from .synthesis.openai_summary import OpenAISummaryService
from .transcription.base import TranscriptionService
from .transcription.heuristic import HeuristicTranscriptionService
from .transcription.openai_client import OpenAITranscriptionService

_DISABLED = {"", "none", "off"}


class ServiceConfigurationError(ValueError):
    """Raised when an unknown backend is requested."""


def _normalise(name: Optional[str]) -> str:
    if not name:
        return "none"
    return name.strip().lower()


def resolve_transcription_backend(name: Optional[str]) -> Optional[TranscriptionService]:
    backend = _normalise(name)
    if backend in _DISABLED:
        return None
    if backend == "heuristic":
        return HeuristicTranscriptionService()
    if backend == "openai":
        return OpenAITranscriptionService()
    raise ServiceConfigurationError(f"Unknown transcription backend: {name}")


def resolve_highlights_backend(name: Optional[str]) -> Optional[HighlightService]:
    backend = _normalise(name)
    if backend in _DISABLED:
        return None
    if backend == "heuristic":
        return HeuristicHighlightService()
    raise ServiceConfigurationError(f"Unknown highlights backend: {name}")


def resolve_summary_backend(name: Optional[str]) -> SummaryService:
    """Summaries are mandatory, so ``none`` is not accepted here."""

    backend = _normalise(name)
    if backend == "heuristic":
        return HeuristicSynthesisService()
    if backend == "openai":
        return OpenAISummaryService()
    raise ServiceConfigurationError(f"Unknown synthesis backend: {name}")


def resolve_drafting_backend(name: Optional[str]) -> Optional[CopyDrafter]:
    backend = _normalise(name)
    if backend in _DISABLED:
        return None
    if backend == "heuristic":
        return HeuristicCopyDrafter()
    if backend == "openai":
        return OpenAICopyDrafter()
    raise ServiceConfigurationError(f"Unknown drafting backend: {name}")


def build_assembler(settings: Optional[Settings] = None):
    """Wire a :class:`NewsletterAssembler` from the configured backends.

    Audio summarisation is only enabled when both a transcription and a
    highlights backend are configured. Decision, action item and insight
    extraction always use the keyword heuristics.
    """

    from ..core.audio_highlights import AudioHighlightExtractor
    from ..core.freeform import FreeformTopicDrafter
    from ..core.pipeline.assembler import AssemblerDependencies, NewsletterAssembler
    from ..core.synthesis import ContentSynthesizer

    settings = settings or get_settings()
    extractors = HeuristicSynthesisService()
    synthesizer = ContentSynthesizer(
        summarizer=resolve_summary_backend(settings.synthesis_backend),
        decision_extractor=extractors,
        action_item_extractor=extractors,
        insight_extractor=extractors,
        summary_max_length=settings.summary_max_length,
    )

    transcription = resolve_transcription_backend(settings.transcription_backend)
    highlights = resolve_highlights_backend(settings.highlights_backend)
    audio_extractor = None
    if transcription is not None and highlights is not None:
        audio_extractor = AudioHighlightExtractor(
            transcription, highlights, max_highlights=settings.max_highlights
        )

    drafter = resolve_drafting_backend(settings.drafting_backend)
    freeform_drafter = None
    if drafter is not None:
        freeform_drafter = FreeformTopicDrafter(
            drafter,
            max_body_length=settings.freeform_max_body_length,
            default_tone_guidance=settings.default_tone_guidance,
        )

    return NewsletterAssembler(
        AssemblerDependencies(
            synthesizer=synthesizer,
            audio_extractor=audio_extractor,
            freeform_drafter=freeform_drafter,
            default_tone_guidance=settings.default_tone_guidance,
        )
    )


__all__ = [
    "ServiceConfigurationError",
    "build_assembler",
    "resolve_drafting_backend",
    "resolve_highlights_backend",
    "resolve_summary_backend",
    "resolve_transcription_backend",
]
