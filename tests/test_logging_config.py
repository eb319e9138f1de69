from __future__ import annotations

import logging

from highlight_clip.config import LoggingSettings
from highlight_clip.logging_config import configure_logging, resolve_level


def test_resolve_level_accepts_names_and_falls_back() -> None:
    assert resolve_level(" debug ") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    assert resolve_level("chatty") == logging.INFO


def test_configure_logging_sets_root_level() -> None:
    configure_logging(LoggingSettings(level="warning"))

    assert logging.getLogger().level == logging.WARNING
