from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from time import perf_counter
from typing import Any, Callable, TypeVar

import typer

from highlight_clip.config import Settings, load_settings
from highlight_clip.ingest.probe import probe_duration_seconds
from highlight_clip.logging_config import configure_logging
from highlight_clip.media.download import download_video
from highlight_clip.media.ffmpeg import burn_subtitles, trim_clip
from highlight_clip.models import Segment
from highlight_clip.pipeline import build_result_payload, collect_segments, plan_highlight, resolve_keywords
from highlight_clip.propose.timescale import TimeScalePolicy
from highlight_clip.propose.window import select_highlight_window
from highlight_clip.subtitles.srt import render_srt, write_srt
from highlight_clip.transcript.client import TranscriptClient, load_transcript_file

SRT_FILENAME = "subtitles.srt"

app = typer.Typer(help="Keyword-driven highlight clips with burned-in subtitles.")
config_app = typer.Typer(help="Configuration commands.")
transcript_app = typer.Typer(help="Transcript inspection commands.")
propose_app = typer.Typer(help="Highlight window selection commands.")
subtitles_app = typer.Typer(help="Subtitle rendering commands.")

app.add_typer(config_app, name="config")
app.add_typer(transcript_app, name="transcript")
app.add_typer(propose_app, name="propose")
app.add_typer(subtitles_app, name="subtitles")

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_OPTION = typer.Option(
    Path("configs/default.yaml"),
    "--config",
    "-c",
    envvar="HIGHLIGHT_CLIP_CONFIG",
    help="Path to YAML configuration file.",
)


def _run_with_progress(step_index: int, total_steps: int, label: str, work: Callable[[], T]) -> T:
    typer.echo(f"[{step_index}/{total_steps}] {label}...", err=True)
    started_at = perf_counter()
    try:
        result = work()
    except Exception:
        elapsed = perf_counter() - started_at
        typer.echo(f"[{step_index}/{total_steps}] {label} failed after {elapsed:.1f}s", err=True)
        raise
    elapsed = perf_counter() - started_at
    typer.echo(f"[{step_index}/{total_steps}] {label} done in {elapsed:.1f}s", err=True)
    return result


def _bootstrap(config_path: Path) -> Settings:
    settings = load_settings(config_path)
    configure_logging(settings.logging)
    logger.debug("Loaded runtime settings from %s", config_path)
    return settings


def _time_scale_policy(settings: Settings) -> TimeScalePolicy:
    return TimeScalePolicy(**settings.time_scale.model_dump(mode="python"))


def _segments_from_file(transcript_path: Path, settings: Settings) -> list[Segment]:
    documents = load_transcript_file(transcript_path)
    return collect_segments(documents, settings.selection.segment_strategy)


@config_app.command("show")
def show_config(config_path: Path = CONFIG_OPTION) -> None:
    """Print resolved runtime configuration."""

    settings = _bootstrap(config_path)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2, ensure_ascii=False))


@transcript_app.command("segments")
def transcript_segments(
    transcript_path: Path = typer.Argument(..., help="Path to a saved transcript JSON document."),
    config_path: Path = CONFIG_OPTION,
) -> None:
    """Print the sentence segments rebuilt from a transcript file."""

    settings = _bootstrap(config_path)
    segments = _segments_from_file(transcript_path, settings)
    typer.echo(
        json.dumps(
            [
                {
                    "index": index,
                    "start_seconds": segment.start_seconds,
                    "end_seconds": segment.end_seconds,
                    "text": segment.text.strip(),
                    "token_count": len(segment.tokens),
                }
                for index, segment in enumerate(segments)
            ],
            indent=2,
            ensure_ascii=False,
        )
    )


@propose_app.command("window")
def propose_window(
    transcript_path: Path = typer.Argument(..., help="Path to a saved transcript JSON document."),
    keyword: list[str] | None = typer.Option(None, "--keyword", "-k", help="Highlight keyword (repeatable)."),
    clip_length_minutes: float | None = typer.Option(None, help="Target clip length in minutes."),
    config_path: Path = CONFIG_OPTION,
) -> None:
    """Select the highlight window of a transcript file without touching any media."""

    settings = _bootstrap(config_path)
    segments = _segments_from_file(transcript_path, settings)
    keywords = resolve_keywords(keyword, None, settings.clip.default_keywords)
    window = select_highlight_window(
        segments,
        clip_length_minutes or settings.clip.clip_length_minutes,
        keywords,
        fallback_strategy=settings.selection.fallback_strategy,
    )
    typer.echo(
        json.dumps(
            {
                "start_seconds": window.start_seconds,
                "end_seconds": window.end_seconds,
                "duration_seconds": window.duration_seconds,
                "segment_count": len(window.segments),
                "keywords": keywords,
                "text": [segment.text.strip() for segment in window.segments],
            },
            indent=2,
            ensure_ascii=False,
        )
    )


@subtitles_app.command("render")
def render_subtitles(
    transcript_path: Path = typer.Argument(..., help="Path to a saved transcript JSON document."),
    output_path: Path | None = typer.Option(None, "--output", "-o", help="Write SRT here instead of stdout."),
    keyword: list[str] | None = typer.Option(None, "--keyword", "-k", help="Highlight keyword (repeatable)."),
    clip_length_minutes: float | None = typer.Option(None, help="Target clip length in minutes."),
    max_line_length: int | None = typer.Option(None, help="Maximum subtitle line length in characters."),
    config_path: Path = CONFIG_OPTION,
) -> None:
    """Render clip-relative SRT subtitles for the highlight window of a transcript file."""

    settings = _bootstrap(config_path)
    try:
        plan = plan_highlight(
            _segments_from_file(transcript_path, settings),
            keywords=resolve_keywords(keyword, None, settings.clip.default_keywords),
            clip_length_minutes=clip_length_minutes or settings.clip.clip_length_minutes,
            max_line_length=max_line_length or settings.clip.max_line_length,
            fallback_strategy=settings.selection.fallback_strategy,
            time_scale=TimeScalePolicy(enabled=False),
        )
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if output_path is None:
        typer.echo(render_srt(plan.cues), nl=False)
        return
    write_srt(plan.cues, output_path)
    typer.echo(json.dumps({"srt_path": str(output_path), "cue_count": len(plan.cues)}, indent=2))


@app.command("run")
def run_pipeline(
    source_url: str = typer.Argument(..., help="Video URL to download with yt-dlp."),
    file_meta_id: str | None = typer.Option(None, help="Transcript file id (takes precedence over --board-id)."),
    board_id: str | None = typer.Option(None, help="Board id used to resolve the transcript file."),
    transcript_path: Path | None = typer.Option(None, help="Use a saved transcript JSON instead of the upstream service."),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Directory for generated files."),
    clip_length_minutes: float | None = typer.Option(None, help="Target clip length in minutes (default 3.5)."),
    max_line_length: int | None = typer.Option(None, help="Maximum subtitle line length (default 42)."),
    vertical: bool | None = typer.Option(
        None, "--vertical/--no-vertical", help="Center-crop to 9:16 for shorts (default from config)."
    ),
    keyword: list[str] | None = typer.Option(None, "--keyword", "-k", help="Highlight keyword override (repeatable)."),
    config_path: Path = CONFIG_OPTION,
) -> None:
    """Download a video, pick its highlight from the transcript and burn subtitles into the clip."""

    settings = _bootstrap(config_path)
    resolved_output_dir = Path(output_dir or settings.clip.output_dir).expanduser().resolve()
    resolved_clip_minutes = clip_length_minutes or settings.clip.clip_length_minutes
    resolved_line_length = max_line_length or settings.clip.max_line_length
    resolved_vertical = settings.clip.vertical if vertical is None else vertical

    total_steps = 7

    try:
        if not (file_meta_id or board_id or transcript_path):
            raise ValueError("Provide --board-id, --file-meta-id or --transcript-path to load the transcript.")

        documents, transcript_keywords = _run_with_progress(
            1,
            total_steps,
            "Fetch transcript",
            lambda: _load_transcript(
                settings=settings,
                file_meta_id=file_meta_id,
                board_id=board_id,
                transcript_path=transcript_path,
                need_keywords=not keyword,
            ),
        )
        keywords = resolve_keywords(keyword, transcript_keywords, settings.clip.default_keywords)

        segments = _run_with_progress(
            2,
            total_steps,
            "Build segments",
            lambda: collect_segments(documents, settings.selection.segment_strategy),
        )
        if not segments:
            raise ValueError("No segments found in script.")

        resolved_output_dir.mkdir(parents=True, exist_ok=True)
        video_path = _run_with_progress(
            3,
            total_steps,
            "Download video",
            lambda: download_video(
                source_url,
                resolved_output_dir,
                download_format=settings.media.download_format,
            ),
        )

        media_duration = _run_with_progress(
            4,
            total_steps,
            "Probe media",
            lambda: probe_duration_seconds(video_path, ffprobe_binary=settings.media.ffprobe_binary),
        )

        plan = _run_with_progress(
            5,
            total_steps,
            "Select highlight",
            lambda: plan_highlight(
                segments,
                keywords=keywords,
                clip_length_minutes=resolved_clip_minutes,
                max_line_length=resolved_line_length,
                media_duration_seconds=media_duration,
                fallback_strategy=settings.selection.fallback_strategy,
                time_scale=_time_scale_policy(settings),
            ),
        )
        srt_path = write_srt(plan.cues, resolved_output_dir / SRT_FILENAME)

        clip_path = _run_with_progress(
            6,
            total_steps,
            "Trim clip",
            lambda: trim_clip(
                video_path,
                resolved_output_dir,
                plan.window.start_seconds,
                plan.window.duration_seconds,
                ffmpeg_binary=settings.media.ffmpeg_binary,
            ),
        )

        final_path = _run_with_progress(
            7,
            total_steps,
            "Burn subtitles",
            lambda: burn_subtitles(
                clip_path,
                srt_path,
                resolved_output_dir,
                vertical=resolved_vertical,
                ffmpeg_binary=settings.media.ffmpeg_binary,
            ),
        )
    except (RuntimeError, ValueError, FileNotFoundError) as exc:
        logger.error("Pipeline failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    payload = build_result_payload(
        plan=plan,
        output_dir=resolved_output_dir,
        video_path=video_path,
        clip_path=clip_path,
        srt_path=srt_path,
        final_path=final_path,
    )
    logger.info("Highlight clip ready: %s", final_path)
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _load_transcript(
    *,
    settings: Settings,
    file_meta_id: str | None,
    board_id: str | None,
    transcript_path: Path | None,
    need_keywords: bool,
) -> tuple[list[Any], list[str]]:
    if transcript_path is not None:
        return load_transcript_file(transcript_path), []

    client = TranscriptClient(
        settings.transcript.base_url,
        settings.transcript.access_token,
        timeout_seconds=settings.transcript.timeout_seconds,
        page_limit=settings.transcript.page_limit,
    )
    source = client.resolve_source(file_meta_id=file_meta_id, board_id=board_id)
    keywords = list(source.keywords)
    if need_keywords and not keywords:
        keywords = client.fetch_keywords(source.file_meta_id)

    documents = client.fetch_script_pages(source.file_meta_id)
    logger.debug("Transcript source resolved: %s", asdict(source))
    return documents, keywords


if __name__ == "__main__":
    app()
