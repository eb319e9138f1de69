from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import highlight_clip.cli as cli
from highlight_clip.config import ClipSettings, Settings
from highlight_clip.transcript.client import TranscriptFetchError


def _settings(tmp_path: Path) -> Settings:
    return Settings(clip=ClipSettings(output_dir=tmp_path / "out"))


def _never(label: str):
    def _fail(*args: object, **kwargs: object) -> None:
        raise AssertionError(f"{label} should not run")

    return _fail


def test_run_requires_a_transcript_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "_bootstrap", lambda _: _settings(tmp_path))
    monkeypatch.setattr(cli, "download_video", _never("download"))

    result = CliRunner().invoke(cli.app, ["run", "https://example.com/talk"])

    assert result.exit_code == 1
    assert "Error: Provide --board-id, --file-meta-id or --transcript-path" in result.output
    assert "Traceback" not in result.output


def test_run_fails_fast_on_empty_transcript(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    transcript = tmp_path / "broken.json"
    transcript.write_text(json.dumps({"item": "not a compressed script"}), encoding="utf-8")
    monkeypatch.setattr(cli, "_bootstrap", lambda _: _settings(tmp_path))
    monkeypatch.setattr(cli, "download_video", _never("download"))

    result = CliRunner().invoke(cli.app, ["run", "https://example.com/talk", "--transcript-path", str(transcript)])

    assert result.exit_code == 1
    assert "Error: No segments found in script." in result.output
    assert not (tmp_path / "out").exists()


def test_run_reports_upstream_status(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "_bootstrap", lambda _: _settings(tmp_path))

    def _load_transcript(**kwargs: object) -> None:
        raise TranscriptFetchError("Failed to fetch board: Unauthorized", status=401)

    monkeypatch.setattr(cli, "_load_transcript", _load_transcript)

    result = CliRunner().invoke(cli.app, ["run", "https://example.com/talk", "--board-id", "b1"])

    assert result.exit_code == 1
    assert "[1/7] Fetch transcript failed" in result.output
    assert "Error: Failed to fetch board: Unauthorized" in result.output


def test_run_reports_missing_media_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    transcript = tmp_path / "transcript.json"
    transcript.write_text(
        json.dumps([{"type": "karaoke", "text": "AI is great.", "s": 0, "e": 3}]),
        encoding="utf-8",
    )
    monkeypatch.setattr(cli, "_bootstrap", lambda _: _settings(tmp_path))

    def _download(*args: object, **kwargs: object) -> Path:
        raise RuntimeError("Video download generation failed: /tmp/out/video_full.mp4 does not exist")

    monkeypatch.setattr(cli, "download_video", _download)
    monkeypatch.setattr(cli, "trim_clip", _never("trim"))

    result = CliRunner().invoke(cli.app, ["run", "https://example.com/talk", "--transcript-path", str(transcript)])

    assert result.exit_code == 1
    assert "[3/7] Download video failed" in result.output
    assert "Error: Video download generation failed" in result.output
    assert "Traceback" not in result.output


def test_subtitles_render_reports_empty_transcript(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    transcript = tmp_path / "empty.json"
    transcript.write_text("[]", encoding="utf-8")
    monkeypatch.setattr(cli, "_bootstrap", lambda _: _settings(tmp_path))

    result = CliRunner().invoke(cli.app, ["subtitles", "render", str(transcript)])

    assert result.exit_code == 1
    assert "Error: No segments found in script." in result.output
