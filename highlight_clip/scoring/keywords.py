from __future__ import annotations

import re

from highlight_clip.models import ScoredSegment, Segment


def score_segments(segments: list[Segment], keywords: list[str]) -> list[ScoredSegment]:
    """Attach keyword hit counts and hits-per-second density to each segment."""

    patterns = compile_keyword_patterns(keywords)
    scored: list[ScoredSegment] = []
    for index, segment in enumerate(segments):
        score = sum(len(pattern.findall(segment.text)) for pattern in patterns)
        duration = segment.duration_seconds
        density = score / duration if duration > 0 else 0.0
        scored.append(ScoredSegment(segment=segment, index=index, score=score, density=density))
    return scored


def rank_scored_segments(scored: list[ScoredSegment]) -> list[ScoredSegment]:
    """Order by density, then raw score (both descending), then earliest index."""

    return sorted(scored, key=lambda item: (-item.density, -item.score, item.index))


def compile_keyword_patterns(keywords: list[str]) -> list[re.Pattern[str]]:
    # literal substrings, one pattern per listed keyword; repeats count again
    return [re.compile(re.escape(keyword.strip()), re.IGNORECASE) for keyword in keywords if keyword.strip()]
