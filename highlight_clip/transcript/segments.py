from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Literal

from highlight_clip.models import Segment, Token
from highlight_clip.transcript.tokens import extract_tokens, traversal_root, unwrap_document

SegmentStrategy = Literal["auto", "paragraph", "punctuation"]

TERMINAL_PUNCTUATION = re.compile(r"[.!?。！？]")


@dataclass(frozen=True, slots=True)
class SegmentAccumulator:
    """Running state of the segment being assembled."""

    text: str = ""
    tokens: tuple[Token, ...] = ()
    start_seconds: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def step(state: SegmentAccumulator, token: Token) -> SegmentAccumulator:
    return replace(
        state,
        text=state.text + token.text,
        tokens=state.tokens + (token,),
        start_seconds=token.start_seconds if state.start_seconds is None else state.start_seconds,
    )


def flush(state: SegmentAccumulator) -> tuple[Segment | None, SegmentAccumulator]:
    """Close the running segment; whitespace-only or token-less state emits nothing."""

    if state.is_empty or not state.text.strip():
        return None, SegmentAccumulator()
    return Segment.from_tokens(list(state.tokens)), SegmentAccumulator()


def closes_segment(token: Token) -> bool:
    return TERMINAL_PUNCTUATION.search(token.text) is not None


def split_by_punctuation(tokens: list[Token]) -> list[Segment]:
    """Group tokens into sentences, closing on terminal punctuation."""

    segments: list[Segment] = []
    state = SegmentAccumulator()

    for token in tokens:
        state = step(state, token)
        if closes_segment(token):
            segment, state = flush(state)
            if segment is not None:
                segments.append(segment)

    segment, _ = flush(state)
    if segment is not None:
        segments.append(segment)

    return segments


def split_by_paragraph(document: Any) -> list[Segment]:
    """One segment per paragraph of an ``editorState.root.children`` tree."""

    segments: list[Segment] = []
    for paragraph in paragraph_nodes(document):
        tokens = extract_tokens(paragraph)
        if not tokens:
            continue
        segment = Segment.from_tokens(tokens)
        if segment.text.strip():
            segments.append(segment)
    return segments


def paragraph_nodes(document: Any) -> list[dict[str, Any]]:
    unwrapped = unwrap_document(document)
    if not isinstance(unwrapped, dict) or not isinstance(unwrapped.get("editorState"), dict):
        return []

    root = traversal_root(unwrapped)
    children = root.get("children") if isinstance(root, dict) else None
    if not isinstance(children, list):
        return []
    return [child for child in children if isinstance(child, dict)]


def build_segments(document: Any, strategy: SegmentStrategy = "auto") -> list[Segment]:
    """Build sentence-level segments from one transcript document."""

    if strategy == "paragraph":
        return split_by_paragraph(document)
    if strategy == "punctuation":
        return split_by_punctuation(extract_tokens(document))
    if strategy != "auto":
        raise ValueError(f"Unsupported segment strategy '{strategy}'. Expected one of: auto, paragraph, punctuation.")

    if paragraph_nodes(document):
        return split_by_paragraph(document)
    return split_by_punctuation(extract_tokens(document))
