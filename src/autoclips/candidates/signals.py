"""Signal aggregation for boundary scoring.

Normalizes the heterogeneous inputs of a job (cue list, silence intervals,
topic-change points) into one read-only index. Malformed entries are
dropped with a warning; a missing signal category is just an empty list
and contributes nothing to scoring.
"""
from __future__ import annotations
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from autoclips.candidates.models import SilenceInterval, TopicChangePoint
from autoclips.models.transcript import Cue

logger = logging.getLogger(__name__)

SENTENCE_END_RE = re.compile(r"[.!?]$")


@dataclass(frozen=True)
class CueGap:
    """Pause between two consecutive cues."""
    prev_end_s: float
    next_start_s: float

    @property
    def gap_s(self) -> float:
        return self.next_start_s - self.prev_end_s


@dataclass
class SignalIndex:
    """Sorted, validated signals for one job."""
    cues: List[Cue] = field(default_factory=list)
    silences: List[SilenceInterval] = field(default_factory=list)
    topic_changes: List[TopicChangePoint] = field(default_factory=list)
    gaps: List[CueGap] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        cues: Optional[Iterable[Cue]] = None,
        silences: Optional[Iterable[SilenceInterval]] = None,
        topic_changes: Optional[Iterable[TopicChangePoint]] = None,
    ) -> "SignalIndex":
        """
        Build the index from raw signal inputs.

        Args:
            cues: Global cue list (any order)
            silences: Silence intervals from the silence detector
            topic_changes: Topic-change points from the topic detector

        Returns:
            SignalIndex with every category sorted by time
        """
        valid_cues = []
        for cue in cues or []:
            if cue.end_s <= cue.start_s:
                logger.warning(f"Dropping cue with non-positive duration at {cue.start_s:.2f}s")
                continue
            valid_cues.append(cue)
        valid_cues.sort(key=lambda c: c.start_s)

        valid_silences = []
        for s in silences or []:
            if s.start_s < 0 or s.end_s < s.start_s:
                logger.warning(f"Dropping malformed silence interval {s.start_s}-{s.end_s}")
                continue
            valid_silences.append(s)
        valid_silences.sort(key=lambda s: s.start_s)

        valid_topics = []
        for tc in topic_changes or []:
            if tc.timestamp_s < 0:
                logger.warning(f"Dropping topic change with negative timestamp {tc.timestamp_s}")
                continue
            valid_topics.append(tc)
        valid_topics.sort(key=lambda tc: tc.timestamp_s)

        gaps = [
            CueGap(prev_end_s=prev.end_s, next_start_s=nxt.start_s)
            for prev, nxt in zip(valid_cues, valid_cues[1:])
        ]

        logger.debug(
            f"Signal index: {len(valid_cues)} cues, {len(valid_silences)} silences, "
            f"{len(valid_topics)} topic changes"
        )
        return cls(cues=valid_cues, silences=valid_silences, topic_changes=valid_topics, gaps=gaps)

    def in_silence(self, t: float, pad_s: float) -> bool:
        """True if ``t`` lies in a silence interval expanded by ``pad_s``."""
        return any(s.start_s - pad_s <= t <= s.end_s + pad_s for s in self.silences)

    def topic_change_near(self, t: float, tolerance_s: float) -> Optional[TopicChangePoint]:
        """First topic change (in time order) closer than ``tolerance_s`` to ``t``."""
        for tc in self.topic_changes:
            if abs(tc.timestamp_s - t) < tolerance_s:
                return tc
        return None

    def pauses_around(self, t: float, min_gap_s: float, slack_s: float) -> List[CueGap]:
        """Natural pauses longer than ``min_gap_s`` whose slack-expanded range holds ``t``."""
        return [
            g for g in self.gaps
            if g.gap_s > min_gap_s and g.prev_end_s - slack_s <= t <= g.next_start_s + slack_s
        ]

    def sentence_end_near(self, t: float, tolerance_s: float) -> Optional[Cue]:
        """First cue ending within ``tolerance_s`` of ``t`` on terminal punctuation."""
        for cue in self.cues:
            if abs(cue.end_s - t) <= tolerance_s and SENTENCE_END_RE.search(cue.text.strip()):
                return cue
        return None

    def cue_at(self, t: float) -> Optional[Cue]:
        """First cue strictly containing ``t``."""
        for cue in self.cues:
            if cue.start_s < t < cue.end_s:
                return cue
            if cue.start_s >= t:
                break
        return None


# =============================================================================
# Loaders
# =============================================================================

def load_silences(path: str) -> List[SilenceInterval]:
    """Load silence intervals from a JSON list of ``{start, end}`` objects."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    silences = []
    for item in data:
        try:
            silences.append(SilenceInterval(
                start_s=float(item.get("start_s", item.get("start"))),
                end_s=float(item.get("end_s", item.get("end"))),
            ))
        except (TypeError, ValueError):
            logger.warning(f"Skipping malformed silence entry: {item}")
    logger.info(f"Loaded {len(silences)} silence intervals from '{path}'")
    return silences


def load_topic_changes(path: str) -> List[TopicChangePoint]:
    """Load topic-change points from a JSON list of ``{timestamp, confidence}`` objects."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    points = []
    for item in data:
        try:
            points.append(TopicChangePoint(
                timestamp_s=float(item.get("timestamp_s", item.get("timestamp"))),
                confidence=float(item.get("confidence", 1.0)),
            ))
        except (TypeError, ValueError):
            logger.warning(f"Skipping malformed topic change entry: {item}")
    logger.info(f"Loaded {len(points)} topic changes from '{path}'")
    return points


_SILENCE_START_RE = re.compile(r"silence_start: ([\d.]+)")
_SILENCE_END_RE = re.compile(r"silence_end: ([\d.]+)")


def parse_silencedetect_log(text: str) -> List[SilenceInterval]:
    """Pair ``silence_start``/``silence_end`` lines from an ffmpeg silencedetect log."""
    starts = [float(m) for m in _SILENCE_START_RE.findall(text)]
    ends = [float(m) for m in _SILENCE_END_RE.findall(text)]
    return [SilenceInterval(start_s=s, end_s=e) for s, e in zip(starts, ends)]
