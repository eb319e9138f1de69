"""SubRip rendering for highlight clips.

Cue times are relative to the clip start, e.g.::

    1
    00:00:01,200 --> 00:00:04,800
    Hello everyone, welcome to the show.
"""

from __future__ import annotations

import logging
from pathlib import Path

from highlight_clip.models import Segment, SubtitleCue

logger = logging.getLogger(__name__)


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS,mmm``, truncating each unit."""

    if seconds < 0:
        seconds = 0.0

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    millis = int((seconds % 1) * 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def wrap_text(text: str, max_line_length: int) -> list[str]:
    """Greedily pack words onto lines; overlong words are hard-split into chunks."""

    if max_line_length <= 0:
        raise ValueError("max_line_length must be positive.")

    lines: list[str] = []
    current = ""
    for word in text.split():
        if len(word) > max_line_length:
            if current:
                lines.append(current)
                current = ""
            lines.extend(word[offset : offset + max_line_length] for offset in range(0, len(word), max_line_length))
            continue

        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_line_length:
            current = candidate
        else:
            lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def build_cues(segments: list[Segment], clip_start_seconds: float, max_line_length: int) -> list[SubtitleCue]:
    cues: list[SubtitleCue] = []
    for segment in segments:
        start = max(0.0, segment.start_seconds - clip_start_seconds)
        end = max(0.0, segment.end_seconds - clip_start_seconds)
        if end <= start:
            continue

        lines = wrap_text(segment.text, max_line_length)
        if not lines:
            continue

        cues.append(
            SubtitleCue(
                index=len(cues) + 1,
                start_seconds=start,
                end_seconds=end,
                text="\n".join(lines),
            )
        )
    return cues


def render_srt(cues: list[SubtitleCue]) -> str:
    blocks = [
        f"{cue.index}\n{format_timestamp(cue.start_seconds)} --> {format_timestamp(cue.end_seconds)}\n{cue.text}\n"
        for cue in cues
    ]
    return "\n".join(blocks) + ("\n" if blocks else "")


def write_srt(cues: list[SubtitleCue], output_path: str | Path) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_srt(cues), encoding="utf-8")
    logger.info("SRT written: %d cues -> %s", len(cues), path)
    return path
