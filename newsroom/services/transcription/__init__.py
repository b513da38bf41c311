"""Transcription services."""

from .base import TranscriptionService
from .heuristic import HeuristicTranscriptionService

__all__ = ["TranscriptionService", "HeuristicTranscriptionService"]
