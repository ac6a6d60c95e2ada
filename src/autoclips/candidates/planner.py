"""Sequential segment planner.

Walks the timeline forward in a single greedy pass:

1. cursor = 0
2. window = [cursor + min, min(cursor + max, duration)]
3. if cursor + min >= duration: the final cut is ``duration``, stop
4. otherwise cut at the best-scored instant of the window and move the
   cursor there

A chosen boundary is never revisited.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from autoclips.config import PlannerConfig, ScoringConfig
from autoclips.exceptions import ConfigError
from autoclips.candidates.models import SequentialSegment
from autoclips.candidates.scorer import find_best_boundary
from autoclips.candidates.signals import SignalIndex
from autoclips.utils.system import format_clock

logger = logging.getLogger(__name__)


def plan_cut_points(
    total_duration: float,
    signals: SignalIndex,
    planner: PlannerConfig,
    weights: Optional[ScoringConfig] = None,
    boundary_scores: Optional[List[float]] = None,
) -> List[float]:
    """
    Compute the cut-point sequence for the whole timeline.

    Args:
        total_duration: Timeline length in seconds
        signals: Normalized signal index
        planner: Duration bounds, ideal duration and scan step
        weights: Scorer weights (defaults when None)
        boundary_scores: Optional list that receives the score of every
            chosen cut, in order (the final cut scores 0.0)

    Returns:
        Cut points ``[0, t1, ..., duration]``

    Raises:
        ConfigError: if the planner settings are invalid
    """
    if total_duration <= 0:
        raise ConfigError(f"Total duration must be positive, got {total_duration}")
    planner.validate()
    weights = weights or ScoringConfig()

    logger.info(
        f"Planning cuts: duration={total_duration:.1f}s, "
        f"min={planner.min_duration_s}s, max={planner.max_duration_s}s, "
        f"ideal={planner.ideal_duration_s}s, cues={len(signals.cues)}"
    )

    cut_points = [0.0]
    cursor = 0.0

    while True:
        window_start = cursor + planner.min_duration_s
        if window_start >= total_duration:
            if cut_points[-1] < total_duration:
                cut_points.append(total_duration)
                if boundary_scores is not None:
                    boundary_scores.append(0.0)
            break

        window_end = min(cursor + planner.max_duration_s, total_duration)
        best = find_best_boundary(
            window_start,
            window_end,
            planner.scan_step_s,
            cursor,
            planner.ideal_duration_s,
            signals,
            weights,
        )
        cut_points.append(best.time_s)
        if boundary_scores is not None:
            boundary_scores.append(round(best.score, 3))
        cursor = best.time_s
        logger.debug(f"Clip {len(cut_points) - 1} - cut at {cursor:.1f}s")

    logger.info(f"Planned {len(cut_points) - 1} segments")
    return cut_points


def expand_with_margin(
    cut_points: List[float],
    margin_s: float,
    boundary_scores: Optional[List[float]] = None,
) -> List[SequentialSegment]:
    """
    Turn cut points into clip spans with extra context around internal cuts.

    Every clip but the first starts ``margin_s`` earlier and every clip but
    the last ends ``margin_s`` later, clamped to the timeline.

    Args:
        cut_points: Sequence produced by ``plan_cut_points``
        margin_s: Context added on each side of an internal cut
        boundary_scores: Score of the cut closing each span (optional)

    Returns:
        One SequentialSegment per span, numbered from 1
    """
    if len(cut_points) < 2:
        return []

    duration = cut_points[-1]
    num_clips = len(cut_points) - 1
    segments = []

    for i in range(num_clips):
        start = cut_points[i]
        end = cut_points[i + 1]
        if i > 0:
            start = max(0.0, start - margin_s)
        if i < num_clips - 1:
            end = min(duration, end + margin_s)
        if end <= start:
            continue

        score = boundary_scores[i] if boundary_scores and i < len(boundary_scores) else 0.0
        segments.append(SequentialSegment(
            start_s=round(start, 3),
            end_s=round(end, 3),
            index=i + 1,
            boundary_score=score,
            metadata={"cut_start_s": cut_points[i], "cut_end_s": cut_points[i + 1]},
        ))

    return segments


def plan_segments(
    total_duration: float,
    signals: SignalIndex,
    planner: PlannerConfig,
    weights: Optional[ScoringConfig] = None,
    margin_s: Optional[float] = None,
) -> List[SequentialSegment]:
    """Plan cut points and return them as sequential segments."""
    scores: List[float] = []
    cut_points = plan_cut_points(total_duration, signals, planner, weights, boundary_scores=scores)
    margin = planner.cut_margin_s if margin_s is None else margin_s
    segments = expand_with_margin(cut_points, margin, scores)

    for seg in segments:
        cut_start = seg.metadata["cut_start_s"]
        cut_end = seg.metadata["cut_end_s"]
        logger.info(
            f"Clip {seg.index}: {format_clock(cut_start)} - {format_clock(cut_end)} "
            f"({round(cut_end - cut_start)}s)"
        )
    return segments
