import os
import uuid
import logging
from dataclasses import replace
from typing import List, Dict, Optional, Tuple

from autoclips.config import Config
from autoclips.exceptions import InputError
from autoclips.models.transcript import Transcript, caption_cues_for_style
from autoclips.caption.parsers import load_caption_file
from autoclips.caption.generators import CaptionRequest, write_clip_captions
from autoclips.candidates.models import Segment, save_segments
from autoclips.candidates.signals import (
    SignalIndex, load_silences, load_topic_changes, parse_silencedetect_log,
)
from autoclips.candidates.planner import plan_segments
from autoclips.candidates.chunking import ChunkCoordinator, Judge
from autoclips.candidates.refinement import adjust_to_natural_pauses
from autoclips.jobs.repository import JobRepository, get_job_repository
from autoclips.llm.judge import (
    ClipJudge, OpenAIViralJudge, OpenAICuriosityJudge, detect_llm_availability,
)


def setup_logging(debug: bool):
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    app_logger = logging.getLogger("autoclips")
    app_logger.setLevel(level)
    app_logger.propagate = False

    # Clean up existing handlers to avoid duplication (for long-running processes)
    if app_logger.hasHandlers():
        app_logger.handlers.clear()

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    app_logger.addHandler(ch)

    # Root logger (suppress others)
    root = logging.getLogger()
    root.setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def load_transcript(path: str, transcript_format: str = "json") -> Transcript:
    """Load the global cue list from transcript JSON or an existing SRT/ASS file."""
    if not os.path.exists(path):
        raise InputError(f"Transcript not found: {path}")
    if transcript_format in ("srt", "ass"):
        return Transcript(cues=load_caption_file(path, transcript_format))
    return Transcript.load(path)


def load_signals(cfg: Config, transcript: Transcript) -> SignalIndex:
    paths = cfg.paths
    silences = []
    if paths.silences:
        silences = load_silences(paths.silences)
    elif paths.silencedetect_log:
        with open(paths.silencedetect_log, "r", encoding="utf-8") as f:
            silences = parse_silencedetect_log(f.read())
        logger.info(f"Parsed {len(silences)} silence intervals from '{paths.silencedetect_log}'")

    topics = load_topic_changes(paths.topic_changes) if paths.topic_changes else []
    return SignalIndex.build(transcript.cues, silences, topics)


def _judged_segments(
    cfg: Config,
    transcript: Transcript,
    judge: Judge,
    max_count: int,
) -> Tuple[List[Segment], List[str], bool]:
    coordinator = ChunkCoordinator(cfg.chunk)
    chunked = coordinator.needs_chunking(transcript.duration_s)
    if isinstance(judge, ClipJudge):
        judge.max_count = coordinator.candidates_per_window(max_count, chunked)
    result = coordinator.run(transcript.cues, judge, max_count, duration=transcript.duration_s)
    return list(result.segments), result.warnings, result.chunking_used


def select_segments(
    cfg: Config,
    transcript: Transcript,
    signals: SignalIndex,
    judge: Optional[Judge] = None,
) -> Tuple[List[Segment], List[str], bool]:
    """
    Choose clip spans for the configured mode.

    Returns:
        (segments, warnings, chunking_used)
    """
    mode = cfg.mode
    warnings = []
    if mode != "sequential" and judge is None and not detect_llm_availability():
        message = f"Mode '{mode}' needs OPENAI_API_KEY. Falling back to sequential planning."
        logger.warning(message)
        warnings.append(message)
        mode = "sequential"

    if mode == "sequential":
        segments = plan_segments(transcript.duration_s, signals, cfg.planner, cfg.scoring)
        return list(segments), warnings, False

    if mode == "viral":
        if judge is None:
            judge = OpenAIViralJudge(cfg.judge, max_count=cfg.judge.max_clips)
        return _judged_segments(cfg, transcript, judge, cfg.judge.max_clips)

    if judge is None:
        judge = OpenAICuriosityJudge(cfg.judge, cfg.curiosity)
    segments, warnings, chunked = _judged_segments(cfg, transcript, judge, cfg.curiosity.max_blocks)
    refined = []
    for seg in segments:
        span = adjust_to_natural_pauses(seg.start_s, seg.end_s, transcript.cues, cfg.curiosity.pause_tolerance_s)
        refined.append(replace(seg, start_s=span.start_s, end_s=span.end_s))
    return refined, warnings, chunked


def run_pipeline(
    cfg: Config,
    judge: Optional[Judge] = None,
    repository: Optional[JobRepository] = None,
    job_id: Optional[str] = None,
) -> List[Dict]:
    """Plan clips for one transcript and write their caption files and the clip plan."""
    setup_logging(cfg.debug)
    cfg.validate()

    repository = repository or get_job_repository(cfg.storage)
    job_id = job_id or uuid.uuid4().hex
    repository.create(job_id, processing_type=cfg.mode)
    logger.info(f"Job {job_id} started ({cfg.mode} mode)")

    try:
        # 1. Inputs
        repository.update(job_id, progress=5.0, current_step="Loading transcript")
        transcript = load_transcript(cfg.paths.transcript, cfg.paths.transcript_format)
        if transcript.duration_s <= 0:
            raise InputError(f"Transcript '{cfg.paths.transcript}' has no timed content")
        logger.info(f"Transcript: {len(transcript.cues)} cues, {transcript.duration_s:.1f}s")
        signals = load_signals(cfg, transcript)

        # 2. Segments
        repository.update(job_id, progress=20.0, current_step="Selecting segments")
        segments, warnings, chunking_used = select_segments(cfg, transcript, signals, judge)
        logger.info(f"Selected {len(segments)} segments")

        # 3. Captions
        os.makedirs(cfg.paths.output_dir, exist_ok=True)
        request = CaptionRequest.from_config(cfg.caption)
        caption_cues = caption_cues_for_style(transcript, cfg.caption.style, cfg.caption.words_per_line)

        entries = []
        for number, seg in enumerate(segments, start=1):
            base = os.path.join(cfg.paths.output_dir, f"clip_{number:03d}")
            caption_path = write_clip_captions(caption_cues, seg.start_s, seg.end_s, base, request, cfg.caption)
            entry = seg.to_dict()
            entry.update({"number": number, "caption_path": caption_path})
            entries.append(entry)
            progress = 20.0 + 75.0 * number / len(segments)
            repository.update(job_id, progress=round(progress, 1), current_step=f"Captions for clip {number}/{len(segments)}")

        # 4. Plan hand-off
        save_segments(
            segments,
            cfg.paths.clips_plan_json,
            job_id=job_id,
            mode=cfg.mode,
            duration_s=transcript.duration_s,
            chunking_used=chunking_used,
            caption_files=[e["caption_path"] for e in entries],
            warnings=warnings,
        )
        logger.info(f"Clip plan written to '{cfg.paths.clips_plan_json}'")
    except Exception as e:
        logger.error(f"Job {job_id} failed: {e}")
        repository.fail(job_id, str(e))
        raise

    repository.complete(job_id, entries, warnings)
    logger.info(f"Job {job_id} completed with {len(entries)} clips")
    return entries
