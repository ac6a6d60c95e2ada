"""Boundary scorer for sequential segmentation.

Scans a search window at a fixed step and scores every candidate cut
instant from the available signals. The highest-scoring instant wins;
ties go to the earliest instant in scan order.

Scoring Components (defaults from ScoringConfig):
- silence (+3.0): instant inside a padded silence interval
- topic_change (+2.5 x confidence): topic change within 5s
- natural_pause (+3.5 x min(gap, 2.0)): instant inside a pause between cues
- sentence_end (+4.0): a cue ends on terminal punctuation within 2s;
  the instant snaps to that cue end when it is within 1s and in bounds
- mid_speech (-3.0): instant strictly inside a cue with real text
- edge (-1.0): instant within 5s of either window bound
- duration preference: max(0, 1.5 - |span - ideal| / 20)

The scorer never fails: with no signals at all the duration preference
alone still yields a well-defined maximum.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List

from autoclips.config import ScoringConfig
from autoclips.candidates.signals import SignalIndex

logger = logging.getLogger(__name__)


@dataclass
class BoundaryScore:
    """Score of one candidate cut instant."""
    time_s: float
    score: float
    reasons: List[str] = field(default_factory=list)


def score_instant(
    t: float,
    window_start: float,
    window_end: float,
    origin: float,
    ideal_duration_s: float,
    signals: SignalIndex,
    weights: ScoringConfig,
) -> BoundaryScore:
    """
    Score a single candidate cut instant.

    Args:
        t: Candidate instant (absolute seconds)
        window_start: Earliest allowed cut
        window_end: Latest allowed cut
        origin: Start of the span this cut closes
        ideal_duration_s: Span duration the preference term peaks at
        signals: Normalized signal index
        weights: Scorer weights and tolerances

    Returns:
        BoundaryScore, with ``time_s`` moved to a sentence end if it snapped
    """
    score = 0.0
    reasons = []

    if signals.in_silence(t, weights.silence_pad_s):
        score += weights.silence_weight
        reasons.append("silence")

    topic = signals.topic_change_near(t, weights.topic_tolerance_s)
    if topic is not None:
        score += weights.topic_weight * topic.confidence
        reasons.append("topic_change")

    for gap in signals.pauses_around(t, weights.min_pause_gap_s, weights.pause_slack_s):
        score += weights.pause_weight * min(gap.gap_s, weights.pause_gap_cap_s)
        reasons.append("natural_pause")

    sentence_cue = signals.sentence_end_near(t, weights.sentence_end_tolerance_s)
    if sentence_cue is not None:
        score += weights.sentence_end_weight
        reasons.append("sentence_end")
        end = sentence_cue.end_s
        if abs(end - t) < weights.snap_distance_s and window_start <= end <= window_end:
            t = end
            reasons.append("snapped")

    cue = signals.cue_at(t)
    if cue is not None and len(cue.text.strip()) > weights.mid_speech_min_chars:
        score -= weights.mid_speech_penalty
        reasons.append("mid_speech_penalty")

    if min(t - window_start, window_end - t) < weights.edge_margin_s:
        score -= weights.edge_penalty
        reasons.append("edge_penalty")

    duration_diff = abs(t - origin - ideal_duration_s)
    score += max(0.0, weights.duration_peak - duration_diff / weights.duration_decay_s)

    return BoundaryScore(time_s=t, score=score, reasons=reasons)


def find_best_boundary(
    window_start: float,
    window_end: float,
    step_s: float,
    origin: float,
    ideal_duration_s: float,
    signals: SignalIndex,
    weights: ScoringConfig,
) -> BoundaryScore:
    """
    Find the best cut instant in ``[window_start, window_end]``.

    Candidates are ``window_start + i * step_s`` up to and including
    ``window_end``. A degenerate window (end before start) returns
    ``window_start`` scored on its own.

    Returns:
        BoundaryScore of the first instant reaching the maximum score
    """
    if step_s <= 0:
        step_s = 1.0

    best = None
    i = 0
    while True:
        t = window_start + i * step_s
        # epsilon keeps the window end reachable under float drift
        if t > window_end + 1e-9:
            break
        t = min(t, window_end)
        candidate = score_instant(t, window_start, window_end, origin, ideal_duration_s, signals, weights)
        if best is None or candidate.score > best.score:
            best = candidate
        i += 1

    if best is None:
        best = score_instant(window_start, window_start, window_start, origin, ideal_duration_s, signals, weights)

    logger.debug(
        f"Best boundary in [{window_start:.1f}, {window_end:.1f}]: "
        f"{best.time_s:.2f}s score={best.score:.2f} ({', '.join(best.reasons) or 'duration only'})"
    )
    return best
