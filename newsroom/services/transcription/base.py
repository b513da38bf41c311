"""Transcription service abstractions."""

from __future__ import annotations

import abc
from typing import Optional

from ...data.models import MeetingAudioUpload


class TranscriptionService(abc.ABC):
    """Convert an uploaded meeting recording into transcript text."""

    @abc.abstractmethod
    async def transcribe(self, audio: MeetingAudioUpload, audio_data: Optional[bytes] = None) -> str:
        raise NotImplementedError


__all__ = ["TranscriptionService"]
