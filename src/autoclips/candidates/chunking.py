"""Chunked judge dispatch for long inputs.

Long timelines are split into overlapping windows, each window is sent to
the external judge under bounded concurrency, and the pooled candidates
are reconciled:

1. Partition [0, duration] into fixed-length windows with fixed overlap
2. Dispatch windows in sequential batches of ``max_parallel`` calls,
   each with its own timeout
3. A failed or timed-out window contributes no candidates and a warning
4. Sort all candidates by score, drop any whose start is within
   ``proximity_threshold_s`` of an accepted one, keep the top N

Inputs at or below the long-input threshold skip chunking and use a
single judge call. Final ranking depends only on scores, never on the
order in which judge calls complete.
"""
from __future__ import annotations
import logging
import math
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from autoclips.config import ChunkConfig
from autoclips.candidates.models import CandidateSegment
from autoclips.models.transcript import Cue, join_cue_text

logger = logging.getLogger(__name__)

# (window_text, window_cues) -> candidates
Judge = Callable[[str, Sequence[Cue]], List[CandidateSegment]]


@dataclass
class ChunkWindow:
    """One analysis window of a long timeline."""
    index: int
    start_s: float
    end_s: float
    cues: List[Cue] = field(default_factory=list)

    @property
    def text(self) -> str:
        return join_cue_text(self.cues)


@dataclass
class WindowResult:
    """Outcome of one judge call."""
    window_index: int
    candidates: List[CandidateSegment] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ChunkingResult:
    """Reconciled candidates for the whole input."""
    segments: List[CandidateSegment] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    chunking_used: bool = False
    windows_processed: int = 0


def partition_windows(
    cues: Sequence[Cue],
    duration: float,
    window_length_s: float,
    overlap_s: float,
) -> List[ChunkWindow]:
    """
    Split ``[0, duration]`` into overlapping windows.

    Each window holds the cues whose start lies in ``[start, end)``.
    Windows without cues are skipped and do not consume an index.
    """
    windows = []
    window_start = 0.0
    while window_start < duration:
        window_end = min(window_start + window_length_s, duration)
        window_cues = [c for c in cues if window_start <= c.start_s < window_end]
        if window_cues:
            windows.append(ChunkWindow(
                index=len(windows),
                start_s=window_start,
                end_s=window_end,
                cues=window_cues,
            ))
        if window_end >= duration:
            break
        window_start = window_end - overlap_s
    return windows


def reconcile_candidates(
    candidates: Sequence[CandidateSegment],
    proximity_threshold_s: float,
    max_count: Optional[int] = None,
) -> List[CandidateSegment]:
    """
    Deduplicate pooled candidates by start-time proximity.

    Candidates are ranked by score (stable for equal scores); a candidate
    is accepted only if no accepted one starts within
    ``proximity_threshold_s`` of it. End times are not compared.
    """
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    accepted: List[CandidateSegment] = []
    for candidate in ranked:
        if max_count is not None and len(accepted) >= max_count:
            break
        if any(abs(a.start_s - candidate.start_s) < proximity_threshold_s for a in accepted):
            continue
        accepted.append(candidate)
    return accepted


class ChunkCoordinator:
    """Runs a judge over a cue list, chunking long inputs."""

    def __init__(self, cfg: ChunkConfig):
        cfg.validate()
        self.cfg = cfg

    def needs_chunking(self, duration: float) -> bool:
        return duration > self.cfg.long_input_threshold_s

    def candidates_per_window(self, max_count: int, chunked: bool) -> int:
        """Candidates to ask of each window; chunked runs ask for headroom to dedup."""
        if not chunked:
            return max_count
        return math.ceil(max_count / 2) + 2

    def run(
        self,
        cues: Sequence[Cue],
        judge: Judge,
        max_count: int,
        duration: Optional[float] = None,
    ) -> ChunkingResult:
        """
        Produce the reconciled candidate list for the whole input.

        Args:
            cues: Global cue list
            judge: External scoring call
            max_count: Maximum number of segments to return
            duration: Timeline length (defaults to the last cue end)

        Returns:
            ChunkingResult with segments in descending score order
        """
        if not cues:
            logger.warning("No cues to analyze")
            return ChunkingResult(warnings=["No cues provided"])

        if duration is None:
            duration = cues[-1].end_s

        if not self.needs_chunking(duration):
            logger.info(f"Input of {duration:.1f}s is at or below the chunking threshold, single judge call")
            window = ChunkWindow(index=0, start_s=0.0, end_s=duration, cues=list(cues))
            result = self._dispatch_batch([window], judge)[0]
            return ChunkingResult(
                segments=list(result.candidates)[:max_count],
                warnings=result.warnings,
                chunking_used=False,
                windows_processed=1,
            )

        windows = partition_windows(cues, duration, self.cfg.window_length_s, self.cfg.overlap_s)
        logger.info(
            f"Long input detected ({duration:.1f}s): {len(windows)} windows of "
            f"{self.cfg.window_length_s:.0f}s with {self.cfg.overlap_s:.0f}s overlap"
        )

        results: List[WindowResult] = []
        batch_size = self.cfg.max_parallel
        for i in range(0, len(windows), batch_size):
            batch = windows[i:i + batch_size]
            logger.info(f"Processing windows {i + 1}-{i + len(batch)} of {len(windows)}...")
            results.extend(self._dispatch_batch(batch, judge))

        pooled = [c for r in results for c in r.candidates]
        warnings = [w for r in results for w in r.warnings]
        logger.info(f"Total candidates before dedup: {len(pooled)}")

        segments = reconcile_candidates(pooled, self.cfg.proximity_threshold_s, max_count)
        logger.info(f"Candidates after dedup: {len(segments)}")

        return ChunkingResult(
            segments=segments,
            warnings=warnings,
            chunking_used=True,
            windows_processed=len(windows),
        )

    def _dispatch_batch(self, batch: List[ChunkWindow], judge: Judge) -> List[WindowResult]:
        """
        Run one batch concurrently; every call gets the same per-call timeout.

        Calls that overrun are abandoned, not interrupted: their worker thread
        keeps running until the judge returns, and interpreter exit still
        joins it. Judges should carry their own request timeout.
        """
        executor = ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="judge")
        try:
            futures = {executor.submit(judge, w.text, w.cues): w for w in batch}
            done, _ = wait(futures, timeout=self.cfg.call_timeout_s)

            results = []
            for future, window in futures.items():
                if future not in done:
                    future.cancel()
                    message = f"window {window.index} timed out after {self.cfg.call_timeout_s:.0f}s"
                    logger.warning(message)
                    results.append(WindowResult(window_index=window.index, warnings=[message]))
                    continue
                try:
                    candidates = list(future.result())
                except Exception as e:
                    message = f"window {window.index} failed: {e}"
                    logger.warning(message)
                    results.append(WindowResult(window_index=window.index, warnings=[message]))
                    continue
                logger.debug(f"Window {window.index} returned {len(candidates)} candidates")
                results.append(WindowResult(window_index=window.index, candidates=candidates))
            return results
        finally:
            # do not block on calls that overran their timeout
            executor.shutdown(wait=False, cancel_futures=True)
