"""Typer CLI entry point for newsroom."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .config import get_settings, list_environment_settings
from .core.errors import TranscriptSynthesizerError
from .logging import configure_logging, get_logger
from .services.factory import ServiceConfigurationError, build_assembler
from .validation import (
    NewsletterValidationError,
    UploadBody,
    UploadContext,
    describe_audio_file,
    probe_duration,
    validate_newsletter_upload,
)

app = typer.Typer(help="Assemble an internal newsletter from meeting notes")
LOGGER = get_logger(__name__)


def _read_text(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(f"Unable to read {path}: {exc}") from exc


@app.command()
def generate(
    recap: Path = typer.Option(..., help="File containing the meeting recap"),
    transcript: Path = typer.Option(..., help="File containing the meeting transcript"),
    audio: Optional[Path] = typer.Option(None, help="Meeting recording (.mp3 or .wav)"),
    duration: Optional[float] = typer.Option(
        None, help="Recording length in seconds; read from the header for WAV files"
    ),
    topic: Optional[str] = typer.Option(None, help="Freeform topic title"),
    instructions: Optional[str] = typer.Option(None, help="Extra instructions for the freeform topic"),
    output: Optional[Path] = typer.Option(None, help="Write the JSON response here instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Validate the inputs and assemble a newsletter."""

    configure_logging(logging.DEBUG if verbose else None, force=verbose)

    audio_file = None
    duration_seconds = duration
    if audio is not None:
        if not audio.exists():
            raise typer.BadParameter(f"Audio file not found: {audio}")
        audio_file = describe_audio_file(audio)
        duration_seconds = probe_duration(audio, duration)

    result = validate_newsletter_upload(
        UploadContext(
            body=UploadBody(
                meeting_recap_text=_read_text(recap),
                transcript_text=_read_text(transcript),
                freeform_topic=topic,
                freeform_instructions=instructions,
                audio_duration_seconds=duration_seconds,
            ),
            audio_file=audio_file,
        )
    )
    try:
        request = result.require_request()
    except NewsletterValidationError as exc:
        for error in exc.errors:
            typer.echo(f"{error.field}: {error.message}", err=True)
        raise typer.BadParameter("Newsletter inputs failed validation") from exc

    try:
        assembler = build_assembler(get_settings())
    except (ServiceConfigurationError, RuntimeError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        response = asyncio.run(
            assembler.assemble(request, audio_file.data if audio_file is not None else None)
        )
    except TranscriptSynthesizerError as exc:
        LOGGER.error("Newsletter generation failed: %s", exc)
        raise typer.Exit(code=1) from exc

    payload = json.dumps(response.to_payload(), indent=2, ensure_ascii=False)
    if output is not None:
        output.write_text(payload + "\n", encoding="utf-8")
        typer.echo(f"Newsletter written to {output}")
    else:
        typer.echo(payload)


@app.command()
def settings() -> None:
    """List environment-backed settings and their current values."""

    for entry in list_environment_settings():
        marker = "" if entry.value == entry.default else " (overridden)"
        value = "***" if "api_key" in entry.field and entry.value else entry.value
        typer.echo(f"{entry.env_name}={value}{marker}")


if __name__ == "__main__":  # pragma: no cover
    app()
