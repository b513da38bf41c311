from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from newsroom.data.models import FreeformTopicPrompt, MeetingAudioUpload
from newsroom.services.drafting.base import ContextEntry, DraftContext, DraftRequest
from newsroom.services.drafting.openai_drafting import OpenAICopyDrafter
from newsroom.services.synthesis.base import SummaryInput
from newsroom.services.synthesis.openai_summary import OpenAISummaryService
from newsroom.services.transcription.openai_client import OpenAITranscriptionService


class DummyResponseFormatError(Exception):
    """Fake error raised by the mocked OpenAI client for unsupported formats."""


def _audio() -> MeetingAudioUpload:
    return MeetingAudioUpload(filename="sync.mp3", mime_type="audio/mpeg", duration_seconds=60, size_bytes=4)


def _make_transcription_service(create) -> OpenAITranscriptionService:
    service = object.__new__(OpenAITranscriptionService)
    service.model = "test-model"
    service._openai_error_cls = DummyResponseFormatError
    service.client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create)))
    return service


def _responses_client(output_text, calls):
    def create(model, input):
        calls.append({"model": model, "input": input})
        return SimpleNamespace(output_text=output_text)

    return SimpleNamespace(responses=SimpleNamespace(create=create))


@pytest.mark.asyncio
async def test_transcribe_falls_back_to_text_format() -> None:
    calls = []

    def create(model, file, response_format):
        calls.append((model, file, response_format))
        if response_format != "text":
            raise DummyResponseFormatError(f"response_format '{response_format}' unsupported")
        return "Mock transcript from text response"

    service = _make_transcription_service(create)

    text = await service.transcribe(_audio(), b"data")

    assert text == "Mock transcript from text response"
    assert [call[2] for call in calls] == ["json", "text"]
    assert calls[0][1] == ("sync.mp3", b"data", "audio/mpeg")


@pytest.mark.asyncio
async def test_transcribe_reads_text_from_json_payload() -> None:
    service = _make_transcription_service(lambda model, file, response_format: {"text": "Hello team"})

    assert await service.transcribe(_audio(), b"data") == "Hello team"


@pytest.mark.asyncio
async def test_transcribe_propagates_other_errors() -> None:
    def create(model, file, response_format):
        raise DummyResponseFormatError("rate limited")

    service = _make_transcription_service(create)

    with pytest.raises(DummyResponseFormatError):
        await service.transcribe(_audio(), b"data")


@pytest.mark.asyncio
async def test_transcribe_requires_audio_bytes() -> None:
    service = _make_transcription_service(lambda **kwargs: "unused")

    with pytest.raises(ValueError):
        await service.transcribe(_audio(), None)


@pytest.mark.asyncio
async def test_summary_returns_output_text() -> None:
    calls = []
    service = object.__new__(OpenAISummaryService)
    service.model = "summary-model"
    service.client = _responses_client("A crisp summary.", calls)

    summary = await service.summarize(
        SummaryInput(
            combined_text="Recap\n\nTranscript", recap_text="Recap", transcript_text="Transcript", max_length=300
        )
    )

    assert summary == "A crisp summary."
    assert calls[0]["model"] == "summary-model"
    assert "300 characters" in calls[0]["input"][0]["content"]
    assert calls[0]["input"][1] == {"role": "user", "content": "Recap\n\nTranscript"}


def _draft_request() -> DraftRequest:
    return DraftRequest(
        prompt=FreeformTopicPrompt(topic="Hiring"),
        context=DraftContext(
            tone="Warm",
            max_body_length=600,
            summary="Quarter recap.",
            action_items=[ContextEntry(id="action-1", summary="Post the role", owner="Ana")],
        ),
    )


@pytest.mark.asyncio
async def test_drafter_parses_json_output() -> None:
    calls = []
    drafter = object.__new__(OpenAICopyDrafter)
    drafter.model = "draft-model"
    drafter.client = _responses_client(
        json.dumps({"title": "We're hiring", "body": "Two roles are open.", "confidence": 0.7}), calls
    )

    result = await drafter.draft_copy(_draft_request())

    assert result.title == "We're hiring"
    assert result.body == "Two roles are open."
    assert result.confidence == 0.7
    system_prompt = calls[0]["input"][0]["content"]
    assert "600 characters" in system_prompt and "Warm" in system_prompt
    user_payload = json.loads(calls[0]["input"][1]["content"])
    assert user_payload["prompt"] == {"topic": "Hiring"}
    assert user_payload["action_items"] == [{"summary": "Post the role", "owner": "Ana"}]


@pytest.mark.asyncio
async def test_drafter_uses_plain_text_as_body() -> None:
    drafter = object.__new__(OpenAICopyDrafter)
    drafter.model = "draft-model"
    drafter.client = _responses_client("Just some prose.", [])

    result = await drafter.draft_copy(_draft_request())

    assert result.title is None
    assert result.body == "Just some prose."


@pytest.mark.asyncio
async def test_drafter_returns_none_for_empty_output() -> None:
    drafter = object.__new__(OpenAICopyDrafter)
    drafter.model = "draft-model"
    drafter.client = _responses_client("   ", [])

    assert await drafter.draft_copy(_draft_request()) is None
