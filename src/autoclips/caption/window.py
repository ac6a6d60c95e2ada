"""Per-clip caption windows.

Re-expresses a slice of the global cue list on the clip's own timeline:
cues outside the clip are dropped, cues straddling a clip edge are
truncated (never dropped), and survivors are renumbered from 1.

Word sub-timings move with their cue but are not clamped here; a karaoke
highlight may overrun the clip edge slightly where a cue was truncated.
Word-by-word events are clamped when they are rendered.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from autoclips.models.transcript import Cue, Word

logger = logging.getLogger(__name__)


@dataclass
class ClipCue:
    """Cue retimed relative to the start of a clip."""
    index: int
    start_s: float
    end_s: float
    text: str
    words: List[Word] = field(default_factory=list)


def extract_caption_window(
    cues: Sequence[Cue],
    clip_start: float,
    clip_end: float,
) -> List[ClipCue]:
    """
    Retime and clamp the cues that overlap ``[clip_start, clip_end)``.

    Args:
        cues: Global cue list (absolute times, sorted by start)
        clip_start: Clip start on the source timeline
        clip_end: Clip end on the source timeline

    Returns:
        Clip-relative cues numbered from 1, in input order
    """
    if clip_end <= clip_start:
        logger.debug(f"Empty caption window [{clip_start}, {clip_end}]")
        return []

    clip_len = clip_end - clip_start
    window = []

    for cue in cues:
        if cue.end_s <= clip_start or cue.start_s >= clip_end:
            continue

        new_start = max(0.0, cue.start_s - clip_start)
        new_end = min(clip_len, cue.end_s - clip_start)
        if new_end <= new_start:
            continue

        window.append(ClipCue(
            index=len(window) + 1,
            start_s=new_start,
            end_s=new_end,
            text=cue.text,
            words=[w.shifted(-clip_start) for w in cue.words],
        ))

    return window
