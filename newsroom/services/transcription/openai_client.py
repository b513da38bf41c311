"""OpenAI powered transcription service."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

from ...config import get_settings
from ...data.models import MeetingAudioUpload
from ...logging import get_logger
from .base import TranscriptionService

LOGGER = get_logger(__name__)


class OpenAITranscriptionService(TranscriptionService):
    def __init__(self, model: Optional[str] = None) -> None:
        settings = get_settings()
        self.model = model or settings.openai_transcription_model
        try:
            from openai import OpenAI, OpenAIError  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency guard
            raise RuntimeError("openai package is required for OpenAITranscriptionService") from exc
        client_kwargs = {}
        if settings.openai_api_key:
            client_kwargs["api_key"] = settings.openai_api_key

        try:
            self.client = OpenAI(**client_kwargs)
            self._openai_error_cls = OpenAIError
        except OpenAIError as exc:
            message = str(exc)
            if "api_key" in message.lower():
                raise RuntimeError(
                    "OpenAI API key not configured. Set the OPENAI_API_KEY environment variable "
                    "or NEWSROOM_OPENAI_API_KEY."
                ) from exc
            raise RuntimeError(f"Failed to initialise OpenAI transcription client: {message}") from exc

    async def transcribe(self, audio: MeetingAudioUpload, audio_data: Optional[bytes] = None) -> str:
        if not audio_data:
            raise ValueError(f"Audio bytes for {audio.filename} are required for OpenAI transcription")
        return await asyncio.to_thread(self._transcribe_bytes, audio, audio_data)

    def _transcribe_bytes(self, audio: MeetingAudioUpload, audio_data: bytes) -> str:
        LOGGER.info("Requesting OpenAI transcription for %s", audio.filename)
        formats = self._candidate_response_formats()
        response: Any = None
        for index, response_format in enumerate(formats):
            try:
                response = self.client.audio.transcriptions.create(
                    model=self.model,
                    file=(audio.filename, audio_data, audio.mime_type),
                    response_format=response_format,
                )
                break
            except self._openai_error_cls as exc:
                if self._is_response_format_error(exc) and index < len(formats) - 1:
                    LOGGER.info(
                        "Response format '%s' is not supported by model '%s'; retrying with '%s'",
                        response_format,
                        self.model,
                        formats[index + 1],
                    )
                    continue
                raise
        return self._parse_transcription_text(response)

    def _candidate_response_formats(self) -> List[str]:
        return ["json", "text"]

    def _is_response_format_error(self, exc: Exception) -> bool:
        message = str(getattr(exc, "message", None) or exc)
        return "response_format" in message and "unsupported" in message.lower()

    def _parse_transcription_text(self, response: Any) -> str:
        if response is None:
            return ""
        if isinstance(response, str):
            return response
        if isinstance(response, dict):
            return str(response.get("text", "") or "")
        if hasattr(response, "model_dump"):
            return str(response.model_dump().get("text", "") or "")
        return str(getattr(response, "text", "") or "")


__all__ = ["OpenAITranscriptionService"]
