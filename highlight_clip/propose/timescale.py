from __future__ import annotations

import logging
from dataclasses import dataclass

from highlight_clip.models import Segment, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TimeScalePolicy:
    """Coarse unit-mismatch detector: transcript timestamps vs. probed media duration."""

    enabled: bool = True
    factor: float = 0.001
    duration_multiplier: float = 10.0
    floor_seconds: float = 10000.0


def detect_time_scale(
    max_end_seconds: float,
    media_duration_seconds: float | None,
    policy: TimeScalePolicy = TimeScalePolicy(),
) -> float:
    """Return the correction factor for transcript timestamps (1.0 means none)."""

    if not policy.enabled:
        return 1.0

    threshold = max((media_duration_seconds or 0.0) * policy.duration_multiplier, policy.floor_seconds)
    if max_end_seconds > threshold:
        return policy.factor
    return 1.0


def rescale_segments(segments: list[Segment], factor: float) -> list[Segment]:
    if factor == 1.0:
        return segments

    return [
        Segment(
            text=segment.text,
            start_seconds=segment.start_seconds * factor,
            end_seconds=segment.end_seconds * factor,
            tokens=[
                Token(
                    text=token.text,
                    start_seconds=token.start_seconds * factor,
                    end_seconds=token.end_seconds * factor,
                )
                for token in segment.tokens
            ],
        )
        for segment in segments
    ]


def normalize_time_scale(
    segments: list[Segment],
    media_duration_seconds: float | None,
    policy: TimeScalePolicy = TimeScalePolicy(),
) -> tuple[list[Segment], float]:
    max_end_seconds = max((segment.end_seconds for segment in segments), default=0.0)
    factor = detect_time_scale(max_end_seconds, media_duration_seconds, policy)
    if factor != 1.0:
        logger.warning(
            "Transcript ends at %.1f but media lasts %s seconds; rescaling timestamps by %s",
            max_end_seconds,
            media_duration_seconds,
            factor,
        )
    return rescale_segments(segments, factor), factor
