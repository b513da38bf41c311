"""Error taxonomy for the synthesis pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class AudioSummarizerErrorCode(str, Enum):
    AUDIO_NOT_PROVIDED = "AUDIO_NOT_PROVIDED"
    AUDIO_LIMIT_EXCEEDED = "AUDIO_LIMIT_EXCEEDED"
    INVALID_AUDIO_METADATA = "INVALID_AUDIO_METADATA"
    TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"
    EMPTY_TRANSCRIPT = "EMPTY_TRANSCRIPT"
    HIGHLIGHT_GENERATION_FAILED = "HIGHLIGHT_GENERATION_FAILED"


class TranscriptSynthesizerErrorCode(str, Enum):
    NO_CONTENT_PROVIDED = "NO_CONTENT_PROVIDED"
    SUMMARY_FAILED = "SUMMARY_FAILED"
    DECISION_EXTRACTION_FAILED = "DECISION_EXTRACTION_FAILED"
    ACTION_ITEM_EXTRACTION_FAILED = "ACTION_ITEM_EXTRACTION_FAILED"
    INSIGHT_EXTRACTION_FAILED = "INSIGHT_EXTRACTION_FAILED"


class NewsroomError(RuntimeError):
    """Base error carrying a machine readable code and optional metadata.

    The wrapped dependency failure, when there is one, is chained with
    ``raise ... from exc`` and available as ``__cause__``.
    """

    def __init__(self, code: Enum, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.metadata = metadata

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class AudioSummarizerError(NewsroomError):
    """Raised when meeting audio cannot be turned into highlights."""

    code: AudioSummarizerErrorCode


class TranscriptSynthesizerError(NewsroomError):
    """Raised when recap and transcript text cannot be synthesized."""

    code: TranscriptSynthesizerErrorCode


__all__ = [
    "AudioSummarizerError",
    "AudioSummarizerErrorCode",
    "NewsroomError",
    "TranscriptSynthesizerError",
    "TranscriptSynthesizerErrorCode",
]
