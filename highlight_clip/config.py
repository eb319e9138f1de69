from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")
ENV_PREFIX = "HIGHLIGHT_CLIP_"

DEFAULT_KEYWORDS = ["AI", "엔비디아", "오라클", "결론", "미국장", "시장", "금리"]


class TranscriptSettings(BaseModel):
    base_url: str = "https://backend.daglo.ai"
    access_token: str | None = None
    page_limit: int = 60
    timeout_seconds: int = 30


class ClipSettings(BaseModel):
    output_dir: Path = Path("docs/clips")
    clip_length_minutes: float = 3.5
    max_line_length: int = 42
    vertical: bool = False
    default_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))


class SelectionSettings(BaseModel):
    segment_strategy: Literal["auto", "paragraph", "punctuation"] = "auto"
    fallback_strategy: Literal["grow", "slice"] = "grow"


class TimeScaleSettings(BaseModel):
    enabled: bool = True
    factor: float = 0.001
    duration_multiplier: float = 10.0
    floor_seconds: float = 10000.0


class MediaSettings(BaseModel):
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    download_format: str = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    transcript: TranscriptSettings = Field(default_factory=TranscriptSettings)
    clip: ClipSettings = Field(default_factory=ClipSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    time_scale: TimeScaleSettings = Field(default_factory=TimeScaleSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load typed settings from YAML with environment-variable overrides."""

    resolved_path = Path(
        config_path
        or os.getenv(f"{ENV_PREFIX}CONFIG")
        or DEFAULT_CONFIG_PATH
    )
    raw_config: dict[str, Any] = {}
    if resolved_path.exists():
        raw_config = yaml.safe_load(resolved_path.read_text(encoding="utf-8")) or {}
    data = Settings.model_validate(raw_config).model_dump(mode="python")

    for key, raw_value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        suffix = key[len(ENV_PREFIX) :]
        if suffix == "CONFIG":
            continue

        path = [part.lower() for part in suffix.split("__")]
        _apply_override(data, path, raw_value)

    return Settings.model_validate(data)


def _apply_override(data: dict[str, Any], path: list[str], raw_value: str) -> None:
    current: Any = data
    for segment in path[:-1]:
        if not isinstance(current, dict) or segment not in current:
            return
        current = current[segment]

    if not isinstance(current, dict):
        return

    final_key = path[-1]
    if final_key not in current:
        return

    current[final_key] = _coerce_value(raw_value, current[final_key])


def _coerce_value(raw_value: str, existing_value: Any) -> Any:
    if isinstance(existing_value, bool):
        return raw_value.lower() in {"1", "true", "yes", "on"}
    if isinstance(existing_value, int) and not isinstance(existing_value, bool):
        return int(raw_value)
    if isinstance(existing_value, float):
        return float(raw_value)
    if isinstance(existing_value, list | dict):
        return json.loads(raw_value)
    if isinstance(existing_value, Path):
        return Path(raw_value)
    return raw_value
