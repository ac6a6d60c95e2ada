"""
Segment discovery: signals, boundary scoring, planning and judged chunks.

Modules:
- models: Signal and segment data models
- signals: Signal aggregation and loaders
- scorer: Boundary scoring over a search window
- planner: Greedy sequential segment planner
- chunking: Long-input window dispatch and candidate reconciliation
- refinement: Natural-pause boundary adjustment

Note: To avoid circular imports, import functions directly from submodules:
    from autoclips.candidates.planner import plan_segments
    from autoclips.candidates.chunking import ChunkCoordinator
"""

# Only export models at package level (no circular import risk)
from autoclips.candidates.models import (
    SilenceInterval,
    TopicChangePoint,
    TimeSpan,
    SequentialSegment,
    ScoredSegment,
    CandidateSegment,
    JudgedSegment,
    Segment,
)

__all__ = [
    # Models
    "SilenceInterval",
    "TopicChangePoint",
    "TimeSpan",
    "SequentialSegment",
    "ScoredSegment",
    "CandidateSegment",
    "JudgedSegment",
    "Segment",
]
