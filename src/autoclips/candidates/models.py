"""Data models for signals and clip segments."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union
import json
import os

from autoclips.exceptions import InputError


# =============================================================================
# Signal Models
# =============================================================================

@dataclass
class SilenceInterval:
    """Silence region reported by the audio silence detector."""
    start_s: float
    end_s: float


@dataclass
class TopicChangePoint:
    """Instant where the topic detector saw a change of subject."""
    timestamp_s: float
    confidence: float = 1.0

    def __post_init__(self):
        self.confidence = min(max(float(self.confidence), 0.0), 1.0)


# =============================================================================
# Segment Models
# =============================================================================

@dataclass
class TimeSpan:
    """Absolute time range on the source timeline."""
    start_s: float
    end_s: float

    def __post_init__(self):
        if self.end_s <= self.start_s:
            raise InputError(f"Span end ({self.end_s}) must be after start ({self.start_s})")

    @property
    def duration_s(self) -> float:
        return self.end_s - self.start_s

    def to_dict(self) -> dict:
        return {"start_s": self.start_s, "end_s": self.end_s}


@dataclass
class SequentialSegment(TimeSpan):
    """Span produced by the sequential planner."""
    index: int = 0
    boundary_score: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    kind = "sequential"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "kind": self.kind,
            "duration_s": round(self.duration_s, 3),
            "index": self.index,
            "boundary_score": self.boundary_score,
            "metadata": self.metadata,
        })
        return d


@dataclass
class ScoredSegment(TimeSpan):
    """Candidate segment returned by a judge for one analysis window."""
    score: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    kind = "scored"

    @property
    def title(self) -> str:
        return self.metadata.get("title", "")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "kind": self.kind,
            "duration_s": round(self.duration_s, 3),
            "score": self.score,
            "metadata": self.metadata,
        })
        return d


# Judges produce candidate segments; the two names are interchangeable.
CandidateSegment = ScoredSegment


@dataclass
class JudgedSegment(ScoredSegment):
    """Complete-story block rated for completeness and virality."""
    completeness_score: float = 0.0
    viral_score: float = 0.0
    has_hook: bool = False
    has_development: bool = False
    has_conclusion: bool = False

    kind = "judged"

    @staticmethod
    def rank_score(completeness: float, viral: float) -> float:
        return round(completeness * 0.6 + viral * 0.4, 3)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "completeness_score": self.completeness_score,
            "viral_score": self.viral_score,
            "has_hook": self.has_hook,
            "has_development": self.has_development,
            "has_conclusion": self.has_conclusion,
        })
        return d


Segment = Union[SequentialSegment, ScoredSegment, JudgedSegment]

_SEGMENT_KINDS = {
    SequentialSegment.kind: SequentialSegment,
    ScoredSegment.kind: ScoredSegment,
    JudgedSegment.kind: JudgedSegment,
}


def segment_from_dict(data: dict) -> Segment:
    """Rebuild a segment from its ``to_dict`` form using the ``kind`` tag."""
    kind = data.get("kind")
    if kind not in _SEGMENT_KINDS:
        raise InputError(f"Unknown segment kind '{kind}'")
    values = {k: v for k, v in data.items() if k not in ("kind", "duration_s")}
    return _SEGMENT_KINDS[kind](**values)


def save_segments(segments: List[Segment], output_path: str, **extra: Any) -> None:
    """Save tagged segments (plus any extra top-level fields) to JSON."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    data = dict(extra)
    data["segments"] = [s.to_dict() for s in segments]
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_segments(path: str) -> List[Segment]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [segment_from_dict(s) for s in data.get("segments", [])]
