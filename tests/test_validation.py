from __future__ import annotations

import wave

import pytest

from newsroom.validation import (
    NewsletterValidationError,
    UploadBody,
    UploadContext,
    UploadedFile,
    describe_audio_file,
    probe_duration,
    validate_newsletter_upload,
)


def _write_wave(path, seconds: float, rate: int = 8000) -> None:
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(rate)
        wf.writeframes(b"\x00\x00" * int(rate * seconds))


def _context(audio_file=None, **body) -> UploadContext:
    values = {"meeting_recap_text": "Recap.", "transcript_text": "Transcript."}
    values.update(body)
    return UploadContext(body=UploadBody(**values), audio_file=audio_file)


def test_valid_upload_builds_request() -> None:
    result = validate_newsletter_upload(
        _context(
            audio_file=UploadedFile(filename="Sync.WAV", mime_type="AUDIO/WAV", size=2048),
            meeting_recap_text="  Recap.  ",
            freeform_topic=" Hiring ",
            freeform_instructions="  ",
            audio_duration_seconds=120,
        )
    )

    assert result.is_valid
    request = result.require_request()
    assert request.meeting_recap.text == "Recap."
    assert request.audio.mime_type == "audio/wav"
    assert request.audio.duration_seconds == 120
    assert request.freeform_topic_prompt.topic == "Hiring"
    assert request.freeform_topic_prompt.instructions is None


def test_instructions_without_topic_do_not_create_prompt() -> None:
    result = validate_newsletter_upload(_context(freeform_instructions="Keep it short"))

    assert result.require_request().freeform_topic_prompt is None


def test_missing_text_is_reported() -> None:
    result = validate_newsletter_upload(_context(meeting_recap_text="  ", transcript_text=None))

    assert not result.is_valid
    assert [(error.field, error.code) for error in result.errors] == [
        ("meetingRecap", "REQUIRED"),
        ("transcript", "REQUIRED"),
    ]
    with pytest.raises(NewsletterValidationError) as excinfo:
        result.require_request()
    assert excinfo.value.errors == result.errors
    assert "meetingRecap" in str(excinfo.value)


def test_length_limits_are_enforced() -> None:
    result = validate_newsletter_upload(
        _context(meeting_recap_text="r" * 4001, freeform_topic="t" * 201, freeform_instructions="i" * 501)
    )

    assert [error.field for error in result.errors] == [
        "meetingRecap",
        "freeformTopicPrompt.topic",
        "freeformTopicPrompt.instructions",
    ]
    assert all(error.code == "LIMIT_EXCEEDED" for error in result.errors)
    assert "received 4001" in result.errors[0].message


def test_audio_problems_are_collected_together() -> None:
    result = validate_newsletter_upload(
        _context(
            audio_file=UploadedFile(filename="notes.ogg", mime_type="audio/ogg", size=201 * 1024 * 1024),
            audio_duration_seconds=None,
        )
    )

    assert [error.code for error in result.errors] == [
        "UNSUPPORTED_TYPE",
        "INVALID_FORMAT",
        "LIMIT_EXCEEDED",
        "REQUIRED",
    ]
    assert result.request is None


def test_audio_longer_than_an_hour_is_rejected() -> None:
    result = validate_newsletter_upload(
        _context(
            audio_file=UploadedFile(filename="sync.mp3", mime_type="audio/mpeg", size=10),
            audio_duration_seconds=3601,
        )
    )

    assert [(error.field, error.code) for error in result.errors] == [("audio.durationSeconds", "LIMIT_EXCEEDED")]


def test_describe_audio_file_and_probe_wave_duration(tmp_path) -> None:
    path = tmp_path / "standup.wav"
    _write_wave(path, seconds=2.5)

    uploaded = describe_audio_file(path)

    assert uploaded.filename == "standup.wav"
    assert uploaded.mime_type == "audio/wav"
    assert uploaded.size == path.stat().st_size
    assert uploaded.data == path.read_bytes()
    assert probe_duration(path) == pytest.approx(2.5)
    assert probe_duration(path, 42.0) == 42.0


def test_probe_duration_without_header(tmp_path) -> None:
    mp3 = tmp_path / "standup.mp3"
    mp3.write_bytes(b"ID3")
    broken = tmp_path / "broken.wav"
    broken.write_bytes(b"not a wave file")

    assert describe_audio_file(mp3).mime_type == "audio/mpeg"
    assert probe_duration(mp3) == 0.0
    assert probe_duration(broken) == 0.0
