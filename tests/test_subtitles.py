from __future__ import annotations

import pytest

from highlight_clip.models import Segment, SubtitleCue, Token
from highlight_clip.subtitles.resplit import resplit_segments, slice_token
from highlight_clip.subtitles.srt import build_cues, format_timestamp, render_srt, wrap_text, write_srt


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0.0, "00:00:00,000"),
        (125.25, "00:02:05,250"),
        (3661.5, "01:01:01,500"),
        (-4.0, "00:00:00,000"),
    ],
)
def test_format_timestamp(seconds: float, expected: str) -> None:
    assert format_timestamp(seconds) == expected


def test_wrap_text_packs_words_greedily() -> None:
    lines = wrap_text("the quick brown fox jumps over the lazy dog", 10)

    assert lines == ["the quick", "brown fox", "jumps over", "the lazy", "dog"]


def test_wrap_text_hard_splits_overlong_words() -> None:
    lines = wrap_text("a " + "x" * 25 + " b", 10)

    assert lines == ["a", "x" * 10, "x" * 10, "x" * 5, "b"]


def test_wrap_text_of_blank_text_is_empty() -> None:
    assert wrap_text("   ", 42) == []


def test_short_segments_pass_through_unchanged() -> None:
    segment = Segment.from_tokens([Token("Short line.", 0, 1)])

    assert resplit_segments([segment], 42)[0] is segment


def test_long_segment_is_resplit_into_budgeted_cues() -> None:
    tokens = [Token(" abcd", float(index), float(index + 1)) for index in range(20)]
    segment = Segment.from_tokens(tokens)
    assert len(segment.text) == 100

    parts = resplit_segments([segment], 42)

    assert len(parts) >= 3
    assert all(len(part.text.strip()) <= 42 for part in parts)
    assert sum(part.duration_seconds for part in parts) == pytest.approx(segment.duration_seconds)
    assert "".join(part.text for part in parts) == segment.text

    cues = build_cues(parts, clip_start_seconds=0.0, max_line_length=42)
    assert len(cues) >= 3
    assert all(len(line) <= 42 for cue in cues for line in cue.text.split("\n"))


def test_oversized_token_is_sliced_with_interpolated_time() -> None:
    token = Token("y" * 100, 0.0, 10.0)

    chunks = slice_token(token, 42)

    assert [len(chunk.text) for chunk in chunks] == [42, 42, 16]
    assert chunks[0].end_seconds == pytest.approx(4.2)
    assert chunks[1].start_seconds == pytest.approx(4.2)
    assert chunks[2].start_seconds == pytest.approx(8.4)
    assert chunks[2].end_seconds == pytest.approx(10.0)

    parts = resplit_segments([Segment.from_tokens([token])], 42)
    assert [len(part.text) for part in parts] == [42, 42, 16]


def test_build_cues_are_clip_relative_and_sequential() -> None:
    segments = [
        Segment.from_tokens([Token("Before the clip.", 0.0, 1.0)]),
        Segment.from_tokens([Token("Straddles start.", 9.0, 11.5)]),
        Segment.from_tokens([Token("   ", 11.5, 12.0)]),
        Segment.from_tokens([Token("Inside.", 12.0, 13.25)]),
    ]

    cues = build_cues(segments, clip_start_seconds=10.0, max_line_length=42)

    assert [cue.index for cue in cues] == [1, 2]
    assert (cues[0].start_seconds, cues[0].end_seconds) == (0.0, 1.5)
    assert cues[1].start_seconds == pytest.approx(2.0)
    assert cues[1].end_seconds == pytest.approx(3.25)
    assert all(cue.start_seconds <= cue.end_seconds for cue in cues)


def test_render_srt_uses_standard_blocks(tmp_path) -> None:
    cues = [
        SubtitleCue(index=1, start_seconds=0.0, end_seconds=1.5, text="first line\nsecond line"),
        SubtitleCue(index=2, start_seconds=1.5, end_seconds=3.0, text="next"),
    ]

    rendered = render_srt(cues)

    assert rendered == (
        "1\n00:00:00,000 --> 00:00:01,500\nfirst line\nsecond line\n\n"
        "2\n00:00:01,500 --> 00:00:03,000\nnext\n\n"
    )
    assert render_srt([]) == ""

    path = write_srt(cues, tmp_path / "nested" / "subtitles.srt")
    assert path.read_text(encoding="utf-8") == rendered
