from __future__ import annotations

from pathlib import Path
from typing import Any

from highlight_clip.models import HighlightPlan, Segment
from highlight_clip.propose.timescale import TimeScalePolicy, normalize_time_scale
from highlight_clip.propose.window import FallbackStrategy, select_highlight_window
from highlight_clip.subtitles.resplit import resplit_segments
from highlight_clip.subtitles.srt import build_cues
from highlight_clip.transcript.segments import SegmentStrategy, build_segments


def collect_segments(documents: list[Any], strategy: SegmentStrategy = "auto") -> list[Segment]:
    """Build segments across all transcript pages, in page order."""

    return [segment for document in documents for segment in build_segments(document, strategy)]


def plan_highlight(
    segments: list[Segment],
    *,
    keywords: list[str],
    clip_length_minutes: float = 3.5,
    max_line_length: int = 42,
    media_duration_seconds: float | None = None,
    fallback_strategy: FallbackStrategy = "grow",
    time_scale: TimeScalePolicy = TimeScalePolicy(),
) -> HighlightPlan:
    """Run the pure planning stages: time-scale repair, window, subtitle cues."""

    if clip_length_minutes <= 0:
        raise ValueError("Clip length must be positive.")
    if not segments:
        raise ValueError("No segments found in script.")

    segments, factor = normalize_time_scale(segments, media_duration_seconds, time_scale)

    window = select_highlight_window(
        segments,
        clip_length_minutes,
        keywords,
        fallback_strategy=fallback_strategy,
    )
    if not window.segments:
        raise ValueError("No highlight segments selected.")

    cues = build_cues(
        resplit_segments(window.segments, max_line_length),
        clip_start_seconds=window.start_seconds,
        max_line_length=max_line_length,
    )

    return HighlightPlan(
        window=window,
        cues=cues,
        keywords=list(keywords),
        time_scale_factor=factor,
        segment_count_total=len(segments),
    )


def resolve_keywords(
    override: list[str] | None,
    transcript_keywords: list[str] | None,
    defaults: list[str],
) -> list[str]:
    for candidate in (override, transcript_keywords):
        cleaned = [keyword for keyword in candidate or [] if keyword.strip()]
        if cleaned:
            return cleaned
    return list(defaults)


def build_result_payload(
    *,
    plan: HighlightPlan,
    output_dir: Path,
    video_path: Path,
    clip_path: Path,
    srt_path: Path,
    final_path: Path,
) -> dict[str, Any]:
    window = plan.window
    return {
        "status": "ok",
        "output_dir": str(output_dir),
        "video_path": str(video_path),
        "clip_path": str(clip_path),
        "srt_path": str(srt_path),
        "final_path": str(final_path),
        "clip_start_seconds": round(window.start_seconds, 3),
        "clip_end_seconds": round(window.end_seconds, 3),
        "clip_duration_seconds": round(window.duration_seconds, 3),
        "segment_count": len(window.segments),
        "cue_count": len(plan.cues),
        "keywords": plan.keywords,
        "time_scale_factor": plan.time_scale_factor,
    }
