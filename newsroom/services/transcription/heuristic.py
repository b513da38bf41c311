"""Offline transcription stand-in derived from upload metadata."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from ...data.models import MeetingAudioUpload
from .base import TranscriptionService


class HeuristicTranscriptionService(TranscriptionService):
    """Produces a synthetic transcript; replace with a real backend for actual audio."""

    async def transcribe(self, audio: MeetingAudioUpload, audio_data: Optional[bytes] = None) -> str:
        base_name = PurePath(audio.filename).stem or audio.filename
        minutes = max(1, int(audio.duration_seconds / 60 + 0.5))
        plural = "" if minutes == 1 else "s"
        return " ".join(
            [
                f"Automated transcript summary for {base_name}.",
                f"The recording spans roughly {minutes} minute{plural} "
                "and captures the primary discussion points.",
                "Highlights include progress updates, decisions, and next steps "
                "mentioned throughout the session.",
            ]
        )


__all__ = ["HeuristicTranscriptionService"]
