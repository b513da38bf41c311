"""Data models shared by the newsletter pipeline.

Attributes are snake_case in Python and serialise to camelCase with
``model_dump(by_alias=True)`` so responses keep the JSON shape consumed by the
editing UI.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_AUDIO_DURATION_SECONDS = 60 * 60
MAX_AUDIO_SIZE_BYTES = 200 * 1024 * 1024
SUPPORTED_AUDIO_MIME_TYPES = ("audio/mpeg", "audio/wav")

AudioMimeType = Literal["audio/mpeg", "audio/wav"]
ActionItemStatus = Literal["pending", "in_progress", "completed"]


class NewsroomModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        """JSON-ready dictionary with camelCase keys and unset optionals omitted."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContentSource(str, Enum):
    RECAP = "recap"
    TRANSCRIPT = "transcript"
    BOTH = "both"


class MeetingAudioUpload(NewsroomModel):
    filename: str
    mime_type: AudioMimeType
    duration_seconds: float
    size_bytes: int
    url: Optional[str] = None


class AudioSource(NewsroomModel):
    filename: str
    mime_type: AudioMimeType
    size_bytes: int


class AudioHighlight(NewsroomModel):
    id: str
    summary: str
    start_time_seconds: Optional[float] = None
    end_time_seconds: Optional[float] = None
    confidence: Optional[float] = None
    topics: Optional[List[str]] = None


class AudioHighlightsSummary(NewsroomModel):
    transcript: str
    highlights: List[AudioHighlight] = Field(default_factory=list)
    duration_seconds: float
    source: AudioSource
    warnings: Optional[List[str]] = None


class ActionItem(NewsroomModel):
    id: str
    summary: str
    owner: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[ActionItemStatus] = None
    source: Optional[ContentSource] = None


class SynthesizedDecision(NewsroomModel):
    id: str
    summary: str
    source: ContentSource = ContentSource.BOTH
    rationale: Optional[str] = None
    confidence: Optional[float] = None
    supporting_evidence: Optional[str] = None


class SynthesizedInsight(NewsroomModel):
    id: str
    summary: str
    source: ContentSource = ContentSource.BOTH
    quote: Optional[str] = None
    category: Optional[str] = None


class TranscriptSynthesisMetadata(NewsroomModel):
    used_recap: bool
    used_transcript: bool
    combined_character_count: int
    truncated_input: Optional[bool] = None
    warnings: Optional[List[str]] = None


class TranscriptSynthesisResult(NewsroomModel):
    summary: str
    decisions: List[SynthesizedDecision] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    insights: List[SynthesizedInsight] = Field(default_factory=list)
    metadata: TranscriptSynthesisMetadata


class MeetingRecapInput(NewsroomModel):
    text: str
    author: Optional[str] = None
    submitted_at: Optional[str] = None


class MeetingTranscriptInput(NewsroomModel):
    text: str
    source: Optional[str] = None
    submitted_at: Optional[str] = None


class FreeformTopicPrompt(NewsroomModel):
    topic: str = ""
    instructions: Optional[str] = None


class FreeformTopicSuggestion(NewsroomModel):
    prompt: Optional[FreeformTopicPrompt] = None
    title: str
    body: str
    confidence: Optional[float] = None
    tone_guidance: Optional[str] = None
    is_prompt_aligned: Optional[bool] = None


class NewsletterSection(NewsroomModel):
    kind: Literal["section"] = "section"
    id: str
    title: str
    body: str
    highlights: Optional[List[str]] = None


class ActionItemsSection(NewsroomModel):
    kind: Literal["action_items"] = "action_items"
    id: str
    title: str
    body: str
    items: List[ActionItem] = Field(default_factory=list)


Section = Annotated[Union[NewsletterSection, ActionItemsSection], Field(discriminator="kind")]


class StructuredNewsletter(NewsroomModel):
    introduction: NewsletterSection
    main_updates: List[NewsletterSection]
    action_items: ActionItemsSection
    closing: NewsletterSection
    freeform_topic: FreeformTopicSuggestion


class NewsletterGenerationRequest(NewsroomModel):
    audio: Optional[MeetingAudioUpload] = None
    meeting_recap: MeetingRecapInput
    transcript: MeetingTranscriptInput
    freeform_topic_prompt: Optional[FreeformTopicPrompt] = None


class GenerationMetadata(NewsroomModel):
    created_at: str
    processing_time_ms: Optional[int] = None
    tokens_consumed: Optional[int] = None
    audio_summary_included: bool


class NewsletterGenerationResponse(NewsroomModel):
    sections: StructuredNewsletter
    metadata: GenerationMetadata
    warnings: Optional[List[str]] = None


__all__ = [
    "MAX_AUDIO_DURATION_SECONDS",
    "MAX_AUDIO_SIZE_BYTES",
    "SUPPORTED_AUDIO_MIME_TYPES",
    "ActionItem",
    "ActionItemStatus",
    "ActionItemsSection",
    "AudioHighlight",
    "AudioHighlightsSummary",
    "AudioMimeType",
    "AudioSource",
    "ContentSource",
    "FreeformTopicPrompt",
    "FreeformTopicSuggestion",
    "GenerationMetadata",
    "MeetingAudioUpload",
    "MeetingRecapInput",
    "MeetingTranscriptInput",
    "NewsletterGenerationRequest",
    "NewsletterGenerationResponse",
    "NewsletterSection",
    "NewsroomModel",
    "Section",
    "StructuredNewsletter",
    "SynthesizedDecision",
    "SynthesizedInsight",
    "TranscriptSynthesisMetadata",
    "TranscriptSynthesisResult",
]
