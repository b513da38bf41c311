"""OpenAI-powered freeform topic drafting."""

from __future__ import annotations

import asyncio
import json
from typing import Optional

from pydantic import ValidationError

from ...config import get_settings
from ...logging import get_logger
from .base import CopyDrafter, DraftRequest, DraftResult

LOGGER = get_logger(__name__)

SYSTEM_PROMPT = (
    "You write one optional section of an internal company newsletter. "
    "Reply with a JSON object with the keys title, body, confidence (0-1), "
    "tone_guidance and is_prompt_aligned. Keep the body under {max_body_length} "
    "characters and follow this tone: {tone}"
)


def _render_user_message(request: DraftRequest) -> str:
    context = request.context
    payload = {
        "prompt": request.prompt.model_dump(exclude_none=True) if request.prompt else None,
        "summary": context.summary,
        "decisions": [entry.summary for entry in context.decisions],
        "insights": [entry.summary for entry in context.insights],
        "action_items": [
            {"summary": entry.summary, "owner": entry.owner} for entry in context.action_items
        ],
        "audio_highlights": [entry.summary for entry in context.audio_highlights],
    }
    return json.dumps(payload, ensure_ascii=False)


class OpenAICopyDrafter(CopyDrafter):
    def __init__(self, model: Optional[str] = None) -> None:
        settings = get_settings()
        self.model = model or settings.openai_drafting_model
        try:
            from openai import OpenAI, OpenAIError  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency guard
            raise RuntimeError("openai package is required for OpenAICopyDrafter") from exc
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
            raise RuntimeError(f"Failed to initialise OpenAI drafting client: {message}") from exc

    async def draft_copy(self, request: DraftRequest) -> Optional[DraftResult]:
        return await asyncio.to_thread(self._draft, request)

    def _draft(self, request: DraftRequest) -> Optional[DraftResult]:
        LOGGER.info("Requesting OpenAI freeform draft")
        response = self.client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "system",
                    "content": SYSTEM_PROMPT.format(
                        max_body_length=request.context.max_body_length,
                        tone=request.context.tone,
                    ),
                },
                {"role": "user", "content": _render_user_message(request)},
            ],
        )
        output = (response.output_text or "").strip()
        if not output:
            return None
        try:
            return DraftResult.model_validate_json(output)
        except ValidationError:
            LOGGER.info("Draft response was not JSON; using it as the body")
            return DraftResult(body=output)


__all__ = ["OpenAICopyDrafter"]
