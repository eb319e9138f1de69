from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Token:
    """Smallest timestamped unit of transcript text (roughly one word)."""

    text: str
    start_seconds: float
    end_seconds: float


@dataclass(slots=True)
class Segment:
    """Sentence-level run of tokens; the unit that is scored and stitched into a clip."""

    text: str
    start_seconds: float
    end_seconds: float
    tokens: list[Token]

    @property
    def duration_seconds(self) -> float:
        return self.end_seconds - self.start_seconds

    @classmethod
    def from_tokens(cls, tokens: list[Token]) -> Segment:
        if not tokens:
            raise ValueError("A segment needs at least one token.")
        return cls(
            text="".join(token.text for token in tokens),
            start_seconds=min(token.start_seconds for token in tokens),
            end_seconds=max(token.end_seconds for token in tokens),
            tokens=list(tokens),
        )


@dataclass(slots=True)
class ScoredSegment:
    segment: Segment
    index: int
    score: int
    density: float


@dataclass(slots=True)
class HighlightWindow:
    """Contiguous run of segments forming the output clip's time range."""

    segments: list[Segment] = field(default_factory=list)
    start_seconds: float = 0.0
    end_seconds: float = 0.0

    @property
    def duration_seconds(self) -> float:
        return self.end_seconds - self.start_seconds


@dataclass(slots=True)
class SubtitleCue:
    index: int
    start_seconds: float
    end_seconds: float
    text: str


@dataclass(slots=True)
class HighlightPlan:
    """Output of the pure planning stages, handed to the media boundary."""

    window: HighlightWindow
    cues: list[SubtitleCue]
    keywords: list[str]
    time_scale_factor: float
    segment_count_total: int
