"""OpenAI-powered recap and transcript summarisation."""

from __future__ import annotations

import asyncio
from typing import Optional

from ...config import get_settings
from ...logging import get_logger
from .base import SummaryInput, SummaryService

LOGGER = get_logger(__name__)

SYSTEM_PROMPT = (
    "Summarise the meeting recap and transcript for an internal company newsletter. "
    "Write plain prose, no headings or bullet points, at most {max_length} characters."
)


class OpenAISummaryService(SummaryService):
    def __init__(self, model: Optional[str] = None) -> None:
        settings = get_settings()
        self.model = model or settings.openai_summary_model
        try:
            from openai import OpenAI, OpenAIError  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency guard
            raise RuntimeError("openai package is required for OpenAISummaryService") from exc
        client_kwargs = {}
        if settings.openai_api_key:
            client_kwargs["api_key"] = settings.openai_api_key

        try:
            self.client = OpenAI(**client_kwargs)
        except OpenAIError as exc:
            message = str(exc)
            if "api_key" in message.lower():
                raise RuntimeError(
                    "OpenAI API key not configured. Set the OPENAI_API_KEY environment variable "
                    "or NEWSROOM_OPENAI_API_KEY."
                ) from exc
            raise RuntimeError(f"Failed to initialise OpenAI summary client: {message}") from exc

    async def summarize(self, request: SummaryInput) -> str:
        return await asyncio.to_thread(self._summarize, request)

    def _summarize(self, request: SummaryInput) -> str:
        LOGGER.info("Requesting OpenAI summary for %d characters", len(request.combined_text))
        response = self.client.responses.create(
            model=self.model,
            input=[
                {"role": "system", "content": SYSTEM_PROMPT.format(max_length=request.max_length)},
                {"role": "user", "content": request.combined_text},
            ],
        )
        return response.output_text or ""


__all__ = ["OpenAISummaryService"]
