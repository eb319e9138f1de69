from __future__ import annotations

import logging
from pathlib import Path

from highlight_clip.media.process import clear_output, require_output, run_tool

logger = logging.getLogger(__name__)

CLIP_FILENAME = "clip_no_subs.mp4"
FINAL_FILENAME = "clip_with_subs.mp4"
VERTICAL_FILTER = "crop=ih*9/16:ih,scale=1080:1920"


def trim_clip(
    source_path: str | Path,
    output_dir: str | Path,
    start_seconds: float,
    duration_seconds: float,
    *,
    ffmpeg_binary: str = "ffmpeg",
) -> Path:
    """Cut ``[start, start + duration]`` out of the source without re-encoding."""

    clip_path = Path(output_dir).expanduser().resolve() / CLIP_FILENAME
    clip_path.parent.mkdir(parents=True, exist_ok=True)
    clear_output(clip_path)
    logger.info("Cutting clip start=%.3f duration=%.3f -> %s", start_seconds, duration_seconds, clip_path)
    command = [
        ffmpeg_binary,
        "-v",
        "error",
        "-y",
        "-ss",
        f"{max(0.0, start_seconds):.3f}",
        "-i",
        str(source_path),
        "-t",
        f"{max(0.0, duration_seconds):.3f}",
        "-c",
        "copy",
        str(clip_path),
    ]
    run_tool(command, "ffmpeg")
    return require_output(clip_path, "Clip")


def burn_subtitles(
    clip_path: str | Path,
    srt_path: str | Path,
    output_dir: str | Path,
    *,
    vertical: bool = False,
    ffmpeg_binary: str = "ffmpeg",
) -> Path:
    """Render the subtitle file into the clip, optionally center-cropped to 9:16."""

    final_path = Path(output_dir).expanduser().resolve() / FINAL_FILENAME
    final_path.parent.mkdir(parents=True, exist_ok=True)
    clear_output(final_path)
    logger.info("Burning subtitles into clip (vertical=%s) -> %s", vertical, final_path)
    command = [
        ffmpeg_binary,
        "-v",
        "error",
        "-y",
        "-i",
        str(clip_path),
        "-vf",
        build_video_filter(srt_path, vertical=vertical),
        "-c:a",
        "copy",
        str(final_path),
    ]
    run_tool(command, "ffmpeg")
    return require_output(final_path, "Final clip")


def build_video_filter(srt_path: str | Path, *, vertical: bool = False) -> str:
    subtitles_filter = f"subtitles='{escape_filter_path(srt_path)}'"
    if vertical:
        return f"{VERTICAL_FILTER},{subtitles_filter}"
    return subtitles_filter


def escape_filter_path(path: str | Path) -> str:
    # filtergraph syntax treats ':' and quotes as separators
    return str(path).replace("\\", "/").replace(":", "\\:").replace("'", "\\'")
