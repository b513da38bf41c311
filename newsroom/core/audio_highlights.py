"""Turn an uploaded meeting recording into a bounded list of highlights."""

from __future__ import annotations

from typing import List, Optional

from ..data.models import (
    MAX_AUDIO_DURATION_SECONDS,
    MAX_AUDIO_SIZE_BYTES,
    AudioHighlight,
    AudioHighlightsSummary,
    AudioSource,
    MeetingAudioUpload,
)
from ..logging import get_logger
from ..services.highlights.base import HighlightService
from ..services.transcription.base import TranscriptionService
from ..utils.text import resolve_limit
from .errors import AudioSummarizerError, AudioSummarizerErrorCode

LOGGER = get_logger(__name__)

DEFAULT_MAX_HIGHLIGHTS = 5
MAX_HIGHLIGHTS_LIMIT = 10


def resolve_max_highlights(value: Optional[float]) -> int:
    return resolve_limit(value, DEFAULT_MAX_HIGHLIGHTS, MAX_HIGHLIGHTS_LIMIT)


def validate_audio_metadata(audio: Optional[MeetingAudioUpload]) -> MeetingAudioUpload:
    if audio is None:
        raise AudioSummarizerError(
            AudioSummarizerErrorCode.AUDIO_NOT_PROVIDED,
            "Meeting audio is required to generate highlights.",
        )
    if audio.duration_seconds <= 0:
        raise AudioSummarizerError(
            AudioSummarizerErrorCode.INVALID_AUDIO_METADATA,
            "Audio duration must be greater than zero seconds.",
            {"duration_seconds": audio.duration_seconds},
        )
    if audio.duration_seconds > MAX_AUDIO_DURATION_SECONDS:
        raise AudioSummarizerError(
            AudioSummarizerErrorCode.AUDIO_LIMIT_EXCEEDED,
            "Audio duration exceeds the supported 60 minute limit.",
            {"duration_seconds": audio.duration_seconds},
        )
    if audio.size_bytes > MAX_AUDIO_SIZE_BYTES:
        raise AudioSummarizerError(
            AudioSummarizerErrorCode.AUDIO_LIMIT_EXCEEDED,
            "Audio file size exceeds the supported 200MB limit.",
            {"size_bytes": audio.size_bytes},
        )
    return audio


class AudioHighlightExtractor:
    """Transcribe a recording and keep its most notable moments.

    The transcription and highlight backends are injected; any failure they
    raise is re-raised as an :class:`AudioSummarizerError` with the original
    exception chained. Returning more highlights than allowed is not an
    error: the list is truncated and a warning is attached to the summary.
    """

    def __init__(
        self,
        transcription: TranscriptionService,
        highlights: HighlightService,
        max_highlights: Optional[int] = None,
    ) -> None:
        self.transcription = transcription
        self.highlights = highlights
        self.max_highlights = max_highlights

    async def summarize(
        self,
        audio: Optional[MeetingAudioUpload],
        audio_data: Optional[bytes] = None,
        max_highlights: Optional[float] = None,
    ) -> AudioHighlightsSummary:
        audio = validate_audio_metadata(audio)
        limit = resolve_max_highlights(
            max_highlights if max_highlights is not None else self.max_highlights
        )

        LOGGER.info("Transcribing meeting audio %s", audio.filename)
        try:
            transcript = await self.transcription.transcribe(audio, audio_data)
        except Exception as exc:
            raise AudioSummarizerError(
                AudioSummarizerErrorCode.TRANSCRIPTION_FAILED,
                "Failed to transcribe meeting audio.",
                {"filename": audio.filename},
            ) from exc

        normalized_transcript = (transcript or "").strip()
        if not normalized_transcript:
            raise AudioSummarizerError(
                AudioSummarizerErrorCode.EMPTY_TRANSCRIPT,
                "Transcription result was empty.",
                {"filename": audio.filename},
            )

        try:
            highlights = await self.highlights.generate_highlights(
                normalized_transcript, audio.duration_seconds, limit
            )
        except Exception as exc:
            raise AudioSummarizerError(
                AudioSummarizerErrorCode.HIGHLIGHT_GENERATION_FAILED,
                "Failed to generate highlights from the audio transcript.",
                {"filename": audio.filename},
            ) from exc

        selected: List[AudioHighlight] = list(highlights or [])
        warnings: List[str] = []
        if len(selected) > limit:
            warnings.append(
                f"Returned highlight count ({len(selected)}) exceeded the configured "
                f"maximum ({limit}). Results were truncated."
            )
            LOGGER.warning("Truncating %d audio highlights to %d", len(selected), limit)
            selected = selected[:limit]

        return AudioHighlightsSummary(
            transcript=normalized_transcript,
            highlights=selected,
            duration_seconds=audio.duration_seconds,
            source=AudioSource(
                filename=audio.filename,
                mime_type=audio.mime_type,
                size_bytes=audio.size_bytes,
            ),
            warnings=warnings or None,
        )


__all__ = [
    "DEFAULT_MAX_HIGHLIGHTS",
    "MAX_HIGHLIGHTS_LIMIT",
    "AudioHighlightExtractor",
    "resolve_max_highlights",
    "validate_audio_metadata",
]
