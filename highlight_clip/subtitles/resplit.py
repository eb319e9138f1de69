from __future__ import annotations

from highlight_clip.models import Segment, Token
from highlight_clip.transcript.segments import SegmentAccumulator, flush, step


def resplit_segments(segments: list[Segment], max_chars: int) -> list[Segment]:
    """Subdivide segments whose text is longer than ``max_chars``."""

    if max_chars <= 0:
        raise ValueError("max_chars must be positive.")

    resplit: list[Segment] = []
    for segment in segments:
        if len(segment.text.strip()) <= max_chars:
            resplit.append(segment)
            continue
        resplit.extend(_split_segment(segment, max_chars))
    return resplit


def slice_token(token: Token, max_chars: int) -> list[Token]:
    """Cut an oversized token into ``max_chars`` chunks with interpolated timing."""

    if len(token.text) <= max_chars:
        return [token]

    per_char_seconds = (token.end_seconds - token.start_seconds) / len(token.text)
    chunks: list[Token] = []
    for offset in range(0, len(token.text), max_chars):
        text = token.text[offset : offset + max_chars]
        chunks.append(
            Token(
                text=text,
                start_seconds=token.start_seconds + per_char_seconds * offset,
                end_seconds=token.start_seconds + per_char_seconds * (offset + len(text)),
            )
        )
    return chunks


def _split_segment(segment: Segment, max_chars: int) -> list[Segment]:
    pieces = [chunk for token in segment.tokens for chunk in slice_token(token, max_chars)]

    parts: list[Segment] = []
    state = SegmentAccumulator()
    for piece in pieces:
        if not state.is_empty and len((state.text + piece.text).strip()) > max_chars:
            part, state = flush(state)
            if part is not None:
                parts.append(part)
        state = step(state, piece)

    part, _ = flush(state)
    if part is not None:
        parts.append(part)
    return parts
