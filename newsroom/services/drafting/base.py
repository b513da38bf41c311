"""Freeform copy drafting abstractions."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel

from ...data.models import FreeformTopicPrompt


@dataclass(frozen=True)
class ContextEntry:
    id: str
    summary: str
    owner: Optional[str] = None


@dataclass(frozen=True)
class DraftContext:
    tone: str
    max_body_length: int
    summary: Optional[str] = None
    decisions: List[ContextEntry] = field(default_factory=list)
    insights: List[ContextEntry] = field(default_factory=list)
    action_items: List[ContextEntry] = field(default_factory=list)
    audio_highlights: List[ContextEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DraftRequest:
    context: DraftContext
    prompt: Optional[FreeformTopicPrompt] = None


class DraftResult(BaseModel):
    """Loosely typed model output; every field may be missing or null."""

    title: Optional[str] = None
    body: Optional[str] = None
    confidence: Optional[float] = None
    tone_guidance: Optional[str] = None
    is_prompt_aligned: Optional[bool] = None


class CopyDrafter(abc.ABC):
    @abc.abstractmethod
    async def draft_copy(self, request: DraftRequest) -> Optional[DraftResult]:
        raise NotImplementedError


__all__ = ["ContextEntry", "CopyDrafter", "DraftContext", "DraftRequest", "DraftResult"]
