"""Global configuration using Pydantic settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application wide settings loaded from environment variables."""

    log_level: str = "INFO"
    transcription_backend: str = "heuristic"
    highlights_backend: str = "heuristic"
    synthesis_backend: str = "heuristic"
    drafting_backend: str = "heuristic"
    max_highlights: int = Field(default=5, ge=1)
    summary_max_length: int = Field(default=1_000, ge=1)
    freeform_max_body_length: int = Field(default=1_500, ge=1)
    default_tone_guidance: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_transcription_model: str = "gpt-4o-mini-transcribe"
    openai_summary_model: str = "gpt-4o-mini"
    openai_drafting_model: str = "gpt-4o-mini"

    model_config = SettingsConfigDict(
        env_prefix="NEWSROOM_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


_settings: Optional[Settings] = None

_ENV_PREFIX: str = (Settings.model_config.get("env_prefix") or "").upper()


@dataclass
class EnvironmentSetting:
    """Metadata about a configuration option backed by an environment variable."""

    field: str
    env_name: str
    value: Any
    default: Any


def _field_default(field_info) -> Any:
    if field_info.default_factory is not None:  # type: ignore[truthy-function]
        return field_info.default_factory()
    return field_info.default


def list_environment_settings(settings: Optional[Settings] = None) -> Iterable[EnvironmentSetting]:
    """Return metadata for all environment-backed settings."""

    settings = settings or get_settings()
    for name, field in Settings.model_fields.items():
        yield EnvironmentSetting(
            field=name,
            env_name=f"{_ENV_PREFIX}{name}".upper(),
            value=getattr(settings, name),
            default=_field_default(field),
        )


def get_settings() -> Settings:
    """Return a singleton instance of the application settings."""

    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings`` re-reads the environment."""

    global _settings
    _settings = None


__all__ = [
    "EnvironmentSetting",
    "Settings",
    "get_settings",
    "list_environment_settings",
    "reset_settings",
]
