from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

from highlight_clip.media.process import require_output, run_tool

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"
FALLBACK_VIDEO_FILENAME = "video_full.mp4"

_YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:watch\?(?:.*&)?v=|shorts/|embed/|live/)|youtu\.be/)([A-Za-z0-9_-]{11})"
)


def extract_platform_video_id(url: str) -> str | None:
    match = _YOUTUBE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def cached_video_path(url: str, output_dir: str | Path) -> Path:
    video_id = extract_platform_video_id(url)
    filename = f"video_{video_id}.mp4" if video_id else FALLBACK_VIDEO_FILENAME
    return Path(output_dir).expanduser().resolve() / filename


def download_video(
    url: str,
    output_dir: str | Path,
    *,
    download_format: str = DEFAULT_DOWNLOAD_FORMAT,
) -> Path:
    """Download the source video with yt-dlp unless it is already cached."""

    video_path = cached_video_path(url, output_dir)
    if video_path.exists():
        logger.info("Reusing cached video %s", video_path)
        return video_path

    video_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s -> %s", url, video_path)
    run_tool(build_download_command(url, video_path, download_format=download_format), "yt-dlp")
    return require_output(video_path, "Video download")


def build_download_command(url: str, video_path: Path, *, download_format: str = DEFAULT_DOWNLOAD_FORMAT) -> list[str]:
    return [
        sys.executable,
        "-m",
        "yt_dlp",
        "-f",
        download_format,
        "--merge-output-format",
        "mp4",
        "--no-playlist",
        "-o",
        str(video_path),
        url,
    ]
