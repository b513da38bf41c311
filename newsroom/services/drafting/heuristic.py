"""Template based drafting for offline usage."""

from __future__ import annotations

from typing import List, Optional

from .base import CopyDrafter, DraftRequest, DraftResult

MAX_CONTEXT_LINES = 3


class HeuristicCopyDrafter(CopyDrafter):
    """Stitches the prompt instructions and the strongest context lines together."""

    async def draft_copy(self, request: DraftRequest) -> Optional[DraftResult]:
        prompt = request.prompt
        context = request.context
        paragraphs: List[str] = []

        if prompt and prompt.instructions:
            paragraphs.append(prompt.instructions)

        notable = [entry.summary for entry in context.insights + context.audio_highlights]
        if not notable:
            notable = [entry.summary for entry in context.decisions]
        if notable:
            paragraphs.append(" ".join(notable[:MAX_CONTEXT_LINES]))
        elif context.summary:
            paragraphs.append(context.summary)

        if not paragraphs:
            return None

        return DraftResult(
            title=prompt.topic if prompt else None,
            body=" ".join(paragraphs),
            tone_guidance=context.tone,
        )


__all__ = ["HeuristicCopyDrafter"]
