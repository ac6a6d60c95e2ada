"""
Boundary refinement for judged blocks.

Judges return approximate times; these helpers move them onto the nearest
speech boundaries so clips start on a sentence and end after one.
"""
from __future__ import annotations
import logging
from typing import Sequence

from autoclips.candidates.models import TimeSpan
from autoclips.candidates.signals import SENTENCE_END_RE
from autoclips.models.transcript import Cue

logger = logging.getLogger(__name__)


def adjust_to_natural_pauses(
    start: float,
    end: float,
    cues: Sequence[Cue],
    tolerance: float = 2.0,
) -> TimeSpan:
    """
    Snap a block onto natural speech pauses.

    The start moves to the first cue start within ``tolerance``; the end
    moves to the first cue end within ``tolerance`` whose text closes a
    sentence. Either bound is left alone when nothing qualifies, and the
    original bounds are kept if the adjusted span would be empty.

    Args:
        start: Block start in seconds
        end: Block end in seconds
        cues: Global cue list
        tolerance: Maximum distance a bound may move

    Returns:
        Adjusted TimeSpan
    """
    adjusted_start = start
    for cue in cues:
        if abs(cue.start_s - start) <= tolerance:
            adjusted_start = cue.start_s
            break

    adjusted_end = end
    for cue in cues:
        if abs(cue.end_s - end) <= tolerance and SENTENCE_END_RE.search(cue.text.strip()):
            adjusted_end = cue.end_s
            break

    if adjusted_end <= adjusted_start:
        logger.debug(f"Pause adjustment collapsed [{start:.2f}, {end:.2f}], keeping original bounds")
        return TimeSpan(start, end)

    if (adjusted_start, adjusted_end) != (start, end):
        logger.debug(
            f"Adjusted block [{start:.2f}, {end:.2f}] -> [{adjusted_start:.2f}, {adjusted_end:.2f}]"
        )
    return TimeSpan(adjusted_start, adjusted_end)
