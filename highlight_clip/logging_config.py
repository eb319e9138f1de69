from __future__ import annotations

import logging
import sys

from highlight_clip.config import LoggingSettings

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# stdout carries JSON payloads and SRT text
LOG_STREAM = sys.stderr


def resolve_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: LoggingSettings) -> None:
    logging.basicConfig(
        level=resolve_level(settings.level),
        format=DEFAULT_LOG_FORMAT,
        stream=LOG_STREAM,
        force=True,
    )
