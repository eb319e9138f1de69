from __future__ import annotations

from typing import Literal

from highlight_clip.models import HighlightWindow, Segment
from highlight_clip.scoring.keywords import rank_scored_segments, score_segments

FallbackStrategy = Literal["grow", "slice"]

SLICE_RADIUS_SEGMENTS = 10
_BUDGET_TOLERANCE_SECONDS = 1e-9


def select_highlight_window(
    segments: list[Segment],
    target_duration_minutes: float,
    keywords: list[str],
    *,
    fallback_strategy: FallbackStrategy = "grow",
) -> HighlightWindow:
    """Select one contiguous highlight window under a duration budget.

    Pipeline:
    1) score segments against keywords and rank them (density, score, earliest index)
    2) seed with the best segment, or with the temporal midpoint when nothing matched
    3) grow the window one segment at a time, left then right, while its span fits the budget
    """

    if not segments:
        return HighlightWindow()

    budget_seconds = target_duration_minutes * 60
    ranked = rank_scored_segments(score_segments(segments, keywords))
    best = ranked[0]

    if best.score > 0:
        first, last = grow_window(segments, best.index, budget_seconds)
    elif fallback_strategy == "grow":
        first, last = grow_window(segments, midpoint_index(segments), budget_seconds)
    elif fallback_strategy == "slice":
        first, last = slice_window(segments, midpoint_index(segments), budget_seconds)
    else:
        raise ValueError(f"Unsupported fallback strategy '{fallback_strategy}'. Expected one of: grow, slice.")

    return _window_from_range(segments, first, last)


def grow_window(segments: list[Segment], seed_index: int, budget_seconds: float) -> tuple[int, int]:
    """Return the inclusive index range grown around ``seed_index`` within the budget.

    The seed is always kept, even when it alone exceeds the budget.
    """

    first = last = seed_index
    while True:
        extended = False

        if first > 0 and _span(segments, first - 1, last) <= budget_seconds + _BUDGET_TOLERANCE_SECONDS:
            first -= 1
            extended = True

        if last < len(segments) - 1 and _span(segments, first, last + 1) <= budget_seconds + _BUDGET_TOLERANCE_SECONDS:
            last += 1
            extended = True

        if not extended:
            return first, last


def slice_window(segments: list[Segment], center_index: int, budget_seconds: float) -> tuple[int, int]:
    """Take a fixed slice around ``center_index`` and trim it until it fits the budget.

    Trailing segments are trimmed first, then leading ones; the center is never removed.
    """

    first = max(0, center_index - SLICE_RADIUS_SEGMENTS)
    last = min(len(segments) - 1, center_index + SLICE_RADIUS_SEGMENTS - 1)

    while last > center_index and _span(segments, first, last) > budget_seconds + _BUDGET_TOLERANCE_SECONDS:
        last -= 1
    while first < center_index and _span(segments, first, last) > budget_seconds + _BUDGET_TOLERANCE_SECONDS:
        first += 1

    return first, last


def midpoint_index(segments: list[Segment]) -> int:
    """Index of the segment at the transcript's temporal midpoint."""

    midpoint = (segments[0].start_seconds + segments[-1].end_seconds) / 2
    for index, segment in enumerate(segments):
        if segment.start_seconds <= midpoint <= segment.end_seconds:
            return index

    return min(
        range(len(segments)),
        key=lambda index: (abs(_center(segments[index]) - midpoint), index),
    )


def _window_from_range(segments: list[Segment], first: int, last: int) -> HighlightWindow:
    selected = segments[first : last + 1]
    return HighlightWindow(
        segments=selected,
        start_seconds=selected[0].start_seconds,
        end_seconds=selected[-1].end_seconds,
    )


def _span(segments: list[Segment], first: int, last: int) -> float:
    return segments[last].end_seconds - segments[first].start_seconds


def _center(segment: Segment) -> float:
    return (segment.start_seconds + segment.end_seconds) / 2
