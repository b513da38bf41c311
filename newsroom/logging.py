"""Logging helpers for the newsroom pipeline."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_LOGGER_CONFIGURED = False


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        from .config import get_settings

        level = get_settings().log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def configure_logging(level: Optional[Union[int, str]] = None, force: bool = False) -> None:
    """Configure root logging once; ``force`` re-applies the level (CLI ``--verbose``)."""

    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED and not force:
        return

    logging.basicConfig(level=_resolve_level(level), format=LOG_FORMAT, force=force)
    _LOGGER_CONFIGURED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name or "newsroom")


__all__ = ["LOG_FORMAT", "configure_logging", "get_logger"]
