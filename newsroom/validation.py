"""Guard rails applied to uploads before a newsletter is assembled."""

from __future__ import annotations

import re
import wave
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel

from .data.models import (
    MAX_AUDIO_DURATION_SECONDS,
    MAX_AUDIO_SIZE_BYTES,
    SUPPORTED_AUDIO_MIME_TYPES,
    FreeformTopicPrompt,
    MeetingAudioUpload,
    MeetingRecapInput,
    MeetingTranscriptInput,
    NewsletterGenerationRequest,
)

MAX_RECAP_LENGTH = 4_000
MAX_TRANSCRIPT_LENGTH = 200_000
MAX_FREEFORM_TOPIC_LENGTH = 200
MAX_FREEFORM_INSTRUCTIONS_LENGTH = 500

AUDIO_FILE_NAME_PATTERN = re.compile(r"\.(mp3|wav)$", re.IGNORECASE)
_MIME_BY_SUFFIX = {".mp3": "audio/mpeg", ".wav": "audio/wav"}

ErrorCode = Literal["REQUIRED", "INVALID_FORMAT", "UNSUPPORTED_TYPE", "LIMIT_EXCEEDED", "INVALID_LENGTH"]


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    code: Optional[ErrorCode] = None


@dataclass
class UploadedFile:
    filename: str
    mime_type: str
    size: int
    data: Optional[bytes] = None


@dataclass
class UploadBody:
    meeting_recap_text: Optional[str] = None
    transcript_text: Optional[str] = None
    freeform_topic: Optional[str] = None
    freeform_instructions: Optional[str] = None
    audio_duration_seconds: Optional[float] = None


@dataclass
class UploadContext:
    body: UploadBody
    audio_file: Optional[UploadedFile] = None


@dataclass
class ValidationResult:
    errors: List[ValidationErrorDetail] = field(default_factory=list)
    request: Optional[NewsletterGenerationRequest] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.request is not None

    def require_request(self) -> NewsletterGenerationRequest:
        if not self.is_valid:
            raise NewsletterValidationError(self.errors)
        return self.request


class NewsletterValidationError(ValueError):
    """Raised when an upload fails validation; ``errors`` lists every issue."""

    def __init__(self, errors: List[ValidationErrorDetail]) -> None:
        super().__init__("; ".join(f"{error.field}: {error.message}" for error in errors))
        self.errors = errors


def _check_length(
    value: str, limit: int, field_name: str, label: str, errors: List[ValidationErrorDetail]
) -> None:
    if len(value) > limit:
        errors.append(
            ValidationErrorDetail(
                field=field_name,
                message=f"{label} must be under {limit} characters (received {len(value)}).",
                code="LIMIT_EXCEEDED",
            )
        )


def _validate_audio(
    audio_file: UploadedFile, duration_seconds: float, errors: List[ValidationErrorDetail]
) -> Optional[MeetingAudioUpload]:
    mime_type = audio_file.mime_type.lower()
    supported = mime_type in SUPPORTED_AUDIO_MIME_TYPES
    if not supported:
        errors.append(
            ValidationErrorDetail(
                field="audio",
                message=f"Unsupported audio format: {audio_file.mime_type}. Supported formats are MP3 and WAV.",
                code="UNSUPPORTED_TYPE",
            )
        )
    if not AUDIO_FILE_NAME_PATTERN.search(audio_file.filename):
        errors.append(
            ValidationErrorDetail(
                field="audio", message="Audio filename must end with .mp3 or .wav.", code="INVALID_FORMAT"
            )
        )
    if audio_file.size > MAX_AUDIO_SIZE_BYTES:
        errors.append(
            ValidationErrorDetail(
                field="audio",
                message=f"Audio file exceeds the {MAX_AUDIO_SIZE_BYTES // (1024 * 1024)}MB size limit.",
                code="LIMIT_EXCEEDED",
            )
        )
    if duration_seconds <= 0:
        errors.append(
            ValidationErrorDetail(
                field="audio.durationSeconds", message="Audio duration metadata is required.", code="REQUIRED"
            )
        )
    elif duration_seconds > MAX_AUDIO_DURATION_SECONDS:
        errors.append(
            ValidationErrorDetail(
                field="audio.durationSeconds",
                message="Audio duration must not exceed 60 minutes.",
                code="LIMIT_EXCEEDED",
            )
        )

    if not supported:
        return None
    return MeetingAudioUpload(
        filename=audio_file.filename,
        mime_type=mime_type,
        duration_seconds=duration_seconds,
        size_bytes=audio_file.size,
    )


def validate_newsletter_upload(context: UploadContext) -> ValidationResult:
    """Check an upload against the size and format limits and build the request."""

    errors: List[ValidationErrorDetail] = []
    body = context.body

    recap_text = (body.meeting_recap_text or "").strip()
    transcript_text = (body.transcript_text or "").strip()
    freeform_topic = (body.freeform_topic or "").strip()
    freeform_instructions = (body.freeform_instructions or "").strip()

    if not recap_text:
        errors.append(
            ValidationErrorDetail(field="meetingRecap", message="Meeting recap text is required.", code="REQUIRED")
        )
    else:
        _check_length(recap_text, MAX_RECAP_LENGTH, "meetingRecap", "Meeting recap", errors)

    if not transcript_text:
        errors.append(
            ValidationErrorDetail(
                field="transcript", message="Meeting transcript text is required.", code="REQUIRED"
            )
        )
    else:
        _check_length(transcript_text, MAX_TRANSCRIPT_LENGTH, "transcript", "Transcript", errors)

    _check_length(
        freeform_topic, MAX_FREEFORM_TOPIC_LENGTH, "freeformTopicPrompt.topic", "Topic", errors
    )
    _check_length(
        freeform_instructions,
        MAX_FREEFORM_INSTRUCTIONS_LENGTH,
        "freeformTopicPrompt.instructions",
        "Additional instructions",
        errors,
    )

    audio = None
    if context.audio_file is not None:
        audio = _validate_audio(context.audio_file, body.audio_duration_seconds or 0, errors)

    if errors:
        return ValidationResult(errors=errors)

    prompt = None
    if freeform_topic:
        prompt = FreeformTopicPrompt(topic=freeform_topic, instructions=freeform_instructions or None)

    return ValidationResult(
        request=NewsletterGenerationRequest(
            audio=audio,
            meeting_recap=MeetingRecapInput(text=recap_text),
            transcript=MeetingTranscriptInput(text=transcript_text),
            freeform_topic_prompt=prompt,
        )
    )


def read_wave_duration(path: Path) -> float:
    with wave.open(str(path), "rb") as wf:
        frame_rate = wf.getframerate()
        return wf.getnframes() / frame_rate if frame_rate else 0.0


def describe_audio_file(path: Path) -> UploadedFile:
    """Build an upload descriptor for a local recording.

    The MIME type is derived from the suffix; unknown suffixes are left for
    :func:`validate_newsletter_upload` to reject.
    """

    path = Path(path)
    mime_type = _MIME_BY_SUFFIX.get(path.suffix.lower(), "application/octet-stream")
    return UploadedFile(
        filename=path.name,
        mime_type=mime_type,
        size=path.stat().st_size,
        data=path.read_bytes(),
    )


def probe_duration(path: Path, duration_seconds: Optional[float] = None) -> float:
    if duration_seconds is not None:
        return duration_seconds
    if Path(path).suffix.lower() == ".wav":
        try:
            return read_wave_duration(Path(path))
        except (wave.Error, EOFError):
            return 0.0
    return 0.0


__all__ = [
    "MAX_FREEFORM_INSTRUCTIONS_LENGTH",
    "MAX_FREEFORM_TOPIC_LENGTH",
    "MAX_RECAP_LENGTH",
    "MAX_TRANSCRIPT_LENGTH",
    "NewsletterValidationError",
    "UploadBody",
    "UploadContext",
    "UploadedFile",
    "ValidationErrorDetail",
    "ValidationResult",
    "describe_audio_file",
    "probe_duration",
    "read_wave_duration",
    "validate_newsletter_upload",
]
