import sys
import argparse
import logging
from autoclips.config import Config, MODES
from autoclips.exceptions import AutoclipsError, ConfigError
from autoclips.main import run_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clip planner and caption generator")
    parser.add_argument("--transcript", type=str, help="Transcript file")
    parser.add_argument("--transcript-format", choices=["json", "srt", "ass"], help="Transcript file format (default: json)")
    parser.add_argument("--silences", type=str, help="Silence intervals JSON")
    parser.add_argument("--silencedetect-log", type=str, help="ffmpeg silencedetect log to read silences from")
    parser.add_argument("--topics", type=str, help="Topic-change points JSON")
    parser.add_argument("--project", type=str, help="Project name (creates a project folder)")
    parser.add_argument("--mode", choices=list(MODES), help="Segment selection mode")
    parser.add_argument("--format", choices=["srt", "ass"], help="Caption file format")
    parser.add_argument("--style", choices=["standard", "word_by_word", "karaoke"], help="Caption style")
    parser.add_argument("--min-duration", type=float, help="Shortest planned segment (seconds)")
    parser.add_argument("--max-duration", type=float, help="Longest planned segment (seconds)")
    parser.add_argument("--ideal-duration", type=float, help="Preferred segment length (seconds)")
    parser.add_argument("--max-clips", type=int, help="Maximum clips in judged modes")
    parser.add_argument("--llm-model", type=str, help="Override LLM model")
    parser.add_argument("--job-id", type=str, help="Job identifier (generated when omitted)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def apply_args(cfg: Config, args: argparse.Namespace) -> Config:
    if args.debug: cfg.debug = True
    if args.transcript: cfg.paths.transcript = args.transcript
    if args.transcript_format: cfg.paths.transcript_format = args.transcript_format
    if args.silences: cfg.paths.silences = args.silences
    if args.silencedetect_log: cfg.paths.silencedetect_log = args.silencedetect_log
    if args.topics: cfg.paths.topic_changes = args.topics
    if args.project: cfg.paths.project_name = args.project
    if args.mode: cfg.mode = args.mode
    if args.format: cfg.caption.format = args.format
    if args.style: cfg.caption.style = args.style
    if args.min_duration is not None: cfg.planner.min_duration_s = args.min_duration
    if args.max_duration is not None: cfg.planner.max_duration_s = args.max_duration
    if args.ideal_duration is not None: cfg.planner.ideal_duration_s = args.ideal_duration
    if args.max_clips is not None:
        cfg.judge.max_clips = args.max_clips
        cfg.curiosity.max_blocks = args.max_clips
    if args.llm_model: cfg.judge.model = args.llm_model
    return cfg


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = apply_args(Config.from_env(), args)
        run_pipeline(cfg, job_id=args.job_id)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2
    except AutoclipsError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
