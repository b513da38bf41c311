from __future__ import annotations

import asyncio
import itertools
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional

import pytest
from pydantic import TypeAdapter

from newsroom.core.audio_highlights import AudioHighlightExtractor
from newsroom.core.errors import (
    AudioSummarizerError,
    AudioSummarizerErrorCode,
    TranscriptSynthesizerError,
    TranscriptSynthesizerErrorCode,
)
from newsroom.core.freeform import DEFAULT_BODY, DEFAULT_TITLE, FreeformTopicDrafter
from newsroom.core.pipeline.assembler import (
    AssemblerDependencies,
    NewsletterAssembler,
    assemble_newsletter,
    format_created_at,
)
from newsroom.core.pipeline.sections import (
    ACTION_ITEMS_FALLBACK,
    CLOSING_FALLBACK,
    CLOSING_THANKS,
    INTRODUCTION_FALLBACK,
    MAIN_UPDATES_FALLBACK,
    build_action_items,
    build_closing,
    build_introduction,
    build_main_updates,
    format_due_date,
    format_timestamp,
)
from newsroom.core.synthesis import ContentSynthesizer
from newsroom.data.models import (
    ActionItem,
    AudioHighlight,
    AudioHighlightsSummary,
    AudioSource,
    FreeformTopicPrompt,
    MeetingAudioUpload,
    MeetingRecapInput,
    MeetingTranscriptInput,
    NewsletterGenerationRequest,
    Section,
    SynthesizedDecision,
    SynthesizedInsight,
    TranscriptSynthesisMetadata,
    TranscriptSynthesisResult,
)
from newsroom.services.drafting.base import CopyDrafter, DraftRequest, DraftResult
from newsroom.services.highlights.heuristic import HeuristicHighlightService
from newsroom.services.synthesis.base import (
    ActionItemExtractor,
    DecisionExtractor,
    SummaryInput,
    SummaryService,
    SynthesisInput,
)
from newsroom.services.synthesis.heuristic import HeuristicSynthesisService
from newsroom.services.transcription.base import TranscriptionService

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class StubSynthesizer:
    """Stands in for ContentSynthesizer with a prepared result."""

    def __init__(self, result: Optional[TranscriptSynthesisResult] = None, error: Optional[Exception] = None):
        self.result = result or _synthesis()
        self.error = error

    async def synthesize(self, meeting_recap=None, transcript=None, summary_max_length=None):
        if self.error is not None:
            raise self.error
        return self.result


class StubAudioExtractor:
    def __init__(self, summary: Optional[AudioHighlightsSummary] = None, error: Optional[Exception] = None):
        self.summary = summary
        self.error = error
        self.calls: List[tuple] = []

    async def summarize(self, audio, audio_data=None, max_highlights=None):
        self.calls.append((audio.filename, audio_data))
        if self.error is not None:
            raise self.error
        return self.summary


class StubFreeform:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.contexts = []

    async def generate(self, prompt=None, context=None):
        self.contexts.append(context)
        if self.error is not None:
            raise self.error
        return await FreeformTopicDrafter(NoDraft()).generate(prompt, context)


class NoDraft(CopyDrafter):
    async def draft_copy(self, request: DraftRequest) -> Optional[DraftResult]:
        return DraftResult(title="Team shout-outs", body="Thanks to everyone who pitched in.")


class ListBackend(SummaryService, DecisionExtractor, ActionItemExtractor):
    def __init__(self, summary: str = "", decisions=None, action_items=None) -> None:
        self.summary = summary
        self.decisions = decisions or []
        self.action_items = action_items or []

    async def summarize(self, request: SummaryInput) -> str:
        return self.summary

    async def extract_decisions(self, request: SynthesisInput):
        return self.decisions

    async def extract_action_items(self, request: SynthesisInput):
        return self.action_items


def _synthesis(**overrides) -> TranscriptSynthesisResult:
    values = {
        "summary": "The team closed out the quarter.",
        "metadata": TranscriptSynthesisMetadata(
            used_recap=True, used_transcript=True, combined_character_count=120
        ),
    }
    values.update(overrides)
    return TranscriptSynthesisResult(**values)


def _audio_summary(highlights=None, warnings=None) -> AudioHighlightsSummary:
    return AudioHighlightsSummary(
        transcript="Raw transcript.",
        highlights=highlights or [],
        duration_seconds=600,
        source=AudioSource(filename="sync.mp3", mime_type="audio/mpeg", size_bytes=2048),
        warnings=warnings,
    )


def _request(with_audio: bool = False, prompt: Optional[FreeformTopicPrompt] = None) -> NewsletterGenerationRequest:
    audio = None
    if with_audio:
        audio = MeetingAudioUpload(filename="sync.mp3", mime_type="audio/mpeg", duration_seconds=600, size_bytes=2048)
    return NewsletterGenerationRequest(
        audio=audio,
        meeting_recap=MeetingRecapInput(text="Recap."),
        transcript=MeetingTranscriptInput(text="Transcript."),
        freeform_topic_prompt=prompt,
    )


def _timer(*values: float):
    readings: Iterator[float] = iter(values)
    return lambda: next(readings)


def _deps(**overrides) -> AssemblerDependencies:
    values = {
        "synthesizer": StubSynthesizer(),
        "now": lambda: FIXED_NOW,
        "timer": _timer(1.0, 1.25),
    }
    values.update(overrides)
    return AssemblerDependencies(**values)


@pytest.mark.asyncio
async def test_assemble_renders_sections_and_metadata() -> None:
    synthesis = _synthesis(
        decisions=[SynthesizedDecision(id="decision-1", summary="Launch in Q3", rationale="Beta feedback was strong")],
        insights=[SynthesizedInsight(id="insight-1", summary="Churn fell", quote="we kept everyone")],
        action_items=[ActionItem(id="action-1", summary="Ship release", owner="Sam", due_date="2024-05-01")],
    )
    highlights = [
        AudioHighlight(id="audio-highlight-1", summary="Demo landed", start_time_seconds=75),
        AudioHighlight(id="audio-highlight-2", summary="Roadmap agreed"),
    ]
    audio = StubAudioExtractor(_audio_summary(highlights, warnings=["Audio warning."]))
    synthesis.metadata.warnings = ["Synthesis warning."]
    freeform = StubFreeform()

    response = await NewsletterAssembler(
        _deps(synthesizer=StubSynthesizer(synthesis), audio_extractor=audio, freeform_drafter=freeform)
    ).assemble(_request(with_audio=True, prompt=FreeformTopicPrompt(topic="Kudos")), b"audio")

    sections = response.sections
    assert sections.introduction.id == "introduction"
    assert sections.introduction.body == (
        "The team closed out the quarter.\n\nAudio callouts:\n• Demo landed\n• Roadmap agreed"
    )
    assert [section.id for section in sections.main_updates] == [
        "main-updates-decisions",
        "main-updates-highlights",
    ]
    assert sections.main_updates[0].body == "• Launch in Q3 — Why it matters: Beta feedback was strong"
    assert sections.main_updates[1].body == (
        '• Churn fell — Quote: "we kept everyone"\n• Demo landed — Timestamp: 1:15\n• Roadmap agreed'
    )
    assert sections.main_updates[1].highlights == ["Demo landed", "Roadmap agreed"]
    assert sections.action_items.body == "• Ship release — Owner: Sam | Due: May 1, 2024"
    assert sections.closing.body == (
        "Please review the 1 action item(s) listed above and confirm ownership.\n\nNote: Audio warning."
    )
    assert sections.freeform_topic.title == "Team shout-outs"
    assert freeform.contexts[0].audio_highlights == highlights

    assert audio.calls == [("sync.mp3", b"audio")]
    assert response.metadata.created_at == "2024-03-01T12:00:00.000Z"
    assert response.metadata.processing_time_ms == 250
    assert response.metadata.audio_summary_included is True
    assert response.warnings == ["Audio warning.", "Synthesis warning."]


@pytest.mark.asyncio
async def test_sparse_inputs_fall_back_to_placeholders() -> None:
    response = await assemble_newsletter(
        _request(), dependencies=_deps(synthesizer=StubSynthesizer(_synthesis(summary="")))
    )

    sections = response.sections
    assert sections.introduction.body == INTRODUCTION_FALLBACK
    assert [(s.id, s.title, s.body) for s in sections.main_updates] == [
        ("main-updates-overview", "Main Updates", MAIN_UPDATES_FALLBACK)
    ]
    assert sections.action_items.body == ACTION_ITEMS_FALLBACK
    assert sections.action_items.items == []
    assert sections.closing.body == CLOSING_FALLBACK
    assert sections.freeform_topic.title == DEFAULT_TITLE
    assert sections.freeform_topic.body == DEFAULT_BODY
    assert sections.freeform_topic.is_prompt_aligned is False
    assert response.metadata.audio_summary_included is False
    assert response.warnings is None


@pytest.mark.asyncio
async def test_audio_failure_is_logged_and_skipped(caplog) -> None:
    audio = StubAudioExtractor(
        error=AudioSummarizerError(AudioSummarizerErrorCode.TRANSCRIPTION_FAILED, "speech backend offline")
    )

    with caplog.at_level(logging.WARNING, logger="newsroom.core.pipeline.assembler"):
        response = await NewsletterAssembler(_deps(audio_extractor=audio)).assemble(_request(with_audio=True))

    assert response.metadata.audio_summary_included is False
    assert response.sections.closing.body == CLOSING_THANKS
    assert "Failed to summarize meeting audio" in caplog.text


@pytest.mark.asyncio
async def test_audio_extractor_skipped_without_audio_descriptor() -> None:
    audio = StubAudioExtractor(_audio_summary())

    response = await NewsletterAssembler(_deps(audio_extractor=audio)).assemble(_request(), b"ignored")

    assert audio.calls == []
    assert response.metadata.audio_summary_included is False


@pytest.mark.asyncio
async def test_synthesis_failure_propagates() -> None:
    error = TranscriptSynthesizerError(TranscriptSynthesizerErrorCode.SUMMARY_FAILED, "summary backend down")

    with pytest.raises(TranscriptSynthesizerError) as excinfo:
        await NewsletterAssembler(_deps(synthesizer=StubSynthesizer(error=error))).assemble(_request())

    assert excinfo.value is error


@pytest.mark.asyncio
async def test_freeform_failure_uses_request_prompt_fallback() -> None:
    freeform = StubFreeform(error=RuntimeError("drafter crashed"))
    prompt = FreeformTopicPrompt(topic="  Offsite  ", instructions="  ")

    response = await NewsletterAssembler(_deps(freeform_drafter=freeform)).assemble(_request(prompt=prompt))

    topic = response.sections.freeform_topic
    assert topic.title == "Offsite"
    assert topic.body == DEFAULT_BODY
    assert topic.is_prompt_aligned is True
    assert topic.prompt.topic == "Offsite"
    assert topic.prompt.instructions is None


@pytest.mark.asyncio
async def test_injected_id_factory_is_used() -> None:
    counter = itertools.count(1)
    response = await NewsletterAssembler(
        _deps(generate_id=lambda: f"section-{next(counter)}")
    ).assemble(_request())

    sections = response.sections
    assert sections.introduction.id == "section-1"
    assert sections.main_updates[0].id == "section-2"
    assert sections.action_items.id == "section-3"
    assert sections.closing.id == "section-4"


@pytest.mark.asyncio
async def test_blank_action_item_is_dropped_through_the_pipeline() -> None:
    backend = ListBackend(
        summary="Release week.",
        action_items=[{"summary": "  "}, {"summary": "Ship release", "owner": "Sam"}],
    )
    synthesizer = ContentSynthesizer(backend, backend, backend)

    response = await NewsletterAssembler(_deps(synthesizer=synthesizer)).assemble(_request())

    assert response.sections.action_items.body == "• Ship release — Owner: Sam"
    assert response.sections.action_items.body.count("•") == 1


@pytest.mark.asyncio
async def test_heuristic_pipeline_end_to_end() -> None:
    heuristics = HeuristicSynthesisService()
    synthesizer = ContentSynthesizer(heuristics, heuristics, heuristics, heuristics)
    request = NewsletterGenerationRequest(
        meeting_recap=MeetingRecapInput(text="We decided to launch in Q3. Priya will update the docs."),
        transcript=MeetingTranscriptInput(text="We learned that onboarding takes too long."),
    )

    response = await assemble_newsletter(request, dependencies=_deps(synthesizer=synthesizer))

    payload = response.to_payload()
    assert payload["metadata"] == {
        "createdAt": "2024-03-01T12:00:00.000Z",
        "processingTimeMs": 250,
        "audioSummaryIncluded": False,
    }
    assert payload["sections"]["mainUpdates"][0]["title"] == "Key Decisions"
    assert "We decided to launch in Q3." in payload["sections"]["mainUpdates"][0]["body"]
    assert payload["sections"]["actionItems"]["kind"] == "action_items"
    assert payload["sections"]["freeformTopic"]["title"] == DEFAULT_TITLE


def test_format_created_at_normalises_to_utc() -> None:
    moment = datetime(2024, 3, 1, 14, 30, 5, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert format_created_at(moment) == "2024-03-01T12:30:05.123Z"


@pytest.mark.parametrize(
    ("seconds", "expected"), [(0, "0:00"), (5, "0:05"), (75.9, "1:15"), (3600, "60:00"), (-4, "0:00")]
)
def test_format_timestamp(seconds, expected) -> None:
    assert format_timestamp(seconds) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-05-01", "May 1, 2024"),
        ("2024-12-31T23:30:00-02:00", "Jan 1, 2025"),
        ("next Friday", "next Friday"),
    ],
)
def test_format_due_date(value, expected) -> None:
    assert format_due_date(value) == expected


def test_action_items_section_normalises_entries() -> None:
    section = build_action_items(
        [
            ActionItem(id="action-1", summary="   ", owner="  "),
            ActionItem(id="action-2", summary="Book venue", due_date=" 2024-06-10 "),
        ]
    )

    assert [item.summary for item in section.items] == ["Follow up item 1", "Book venue"]
    assert section.items[0].owner is None
    assert section.body == "• Follow up item 1\n• Book venue — Due: Jun 10, 2024"


def test_introduction_limits_callouts_to_three() -> None:
    highlights = [AudioHighlight(id=f"h{i}", summary=f"Moment {i}") for i in range(5)]

    section = build_introduction(_synthesis(summary=""), _audio_summary(highlights))

    assert section.body == "Audio callouts:\n• Moment 0\n• Moment 1\n• Moment 2"


def test_main_updates_with_only_audio_highlights() -> None:
    highlights = [AudioHighlight(id="h1", summary="Kickoff", start_time_seconds=0)]

    sections = build_main_updates(_synthesis(), _audio_summary(highlights))

    assert len(sections) == 1
    assert sections[0].title == "Highlights & Insights"
    assert sections[0].body == "• Kickoff — Timestamp: 0:00"


def test_closing_prefers_reminder_and_warnings() -> None:
    section = build_closing(_synthesis(), 0, _audio_summary(warnings=["Truncated."]))
    assert section.body == "Note: Truncated."


def test_sections_round_trip_through_discriminated_union() -> None:
    adapter = TypeAdapter(Section)

    parsed = adapter.validate_python(
        {"kind": "action_items", "id": "action-items", "title": "Action Items", "body": "• Ship"}
    )
    assert parsed.items == []
    closing = adapter.validate_python({"kind": "section", "id": "closing", "title": "Closing", "body": ""})
    assert closing.kind == "section"


class SlowTranscription(TranscriptionService):
    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.finished = False

    async def transcribe(self, audio, audio_data=None) -> str:
        self.started.set()
        await asyncio.sleep(0.2)
        self.finished = True
        return "Late transcript."


class FailingSummary(ListBackend):
    async def summarize(self, request: SummaryInput) -> str:
        await asyncio.sleep(0)
        raise RuntimeError("summary backend down")


@pytest.mark.asyncio
async def test_synthesis_failure_cancels_audio_branch() -> None:
    transcription = SlowTranscription()
    backend = FailingSummary()
    deps = _deps(
        synthesizer=ContentSynthesizer(backend, backend, backend),
        audio_extractor=AudioHighlightExtractor(transcription, HeuristicHighlightService()),
    )

    with pytest.raises(TranscriptSynthesizerError) as excinfo:
        await NewsletterAssembler(deps).assemble(_request(with_audio=True), b"audio")

    assert excinfo.value.code is TranscriptSynthesizerErrorCode.SUMMARY_FAILED
    assert transcription.started.is_set()
    pending = [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]
    assert pending == []
    await asyncio.sleep(0.3)
    assert transcription.finished is False


@pytest.mark.asyncio
async def test_fallback_topic_uses_configured_tone() -> None:
    response = await NewsletterAssembler(_deps(default_tone_guidance="  Crisp and direct.  ")).assemble(_request())

    assert response.sections.freeform_topic.tone_guidance == "Crisp and direct."
    assert response.sections.freeform_topic.title == DEFAULT_TITLE
