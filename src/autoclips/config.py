from __future__ import annotations
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from autoclips.exceptions import ConfigError


@dataclass
class PlannerConfig:
    """Sequential segmentation parameters."""
    min_duration_s: float = 60.0      # shortest span the planner may cut
    max_duration_s: float = 80.0      # longest span the planner may cut
    ideal_duration_s: float = 70.0    # duration-preference peak
    scan_step_s: float = 1.0          # scorer resolution inside a window
    cut_margin_s: float = 1.5         # extra context added around internal cuts

    def validate(self) -> None:
        if self.min_duration_s <= 0:
            raise ConfigError(f"min_duration_s must be positive, got {self.min_duration_s}")
        if self.min_duration_s >= self.max_duration_s:
            raise ConfigError(
                f"min_duration_s ({self.min_duration_s}) must be lower than max_duration_s ({self.max_duration_s})"
            )
        if self.scan_step_s <= 0:
            raise ConfigError(f"scan_step_s must be positive, got {self.scan_step_s}")
        if self.cut_margin_s < 0:
            raise ConfigError(f"cut_margin_s cannot be negative, got {self.cut_margin_s}")


@dataclass
class ScoringConfig:
    """Boundary scorer weights and tolerances."""
    silence_weight: float = 3.0
    silence_pad_s: float = 1.0
    topic_weight: float = 2.5
    topic_tolerance_s: float = 5.0
    pause_weight: float = 3.5
    min_pause_gap_s: float = 0.3
    pause_slack_s: float = 0.5
    pause_gap_cap_s: float = 2.0
    sentence_end_weight: float = 4.0
    sentence_end_tolerance_s: float = 2.0
    snap_distance_s: float = 1.0
    mid_speech_penalty: float = 3.0
    mid_speech_min_chars: int = 10
    edge_penalty: float = 1.0
    edge_margin_s: float = 5.0
    duration_peak: float = 1.5
    duration_decay_s: float = 20.0


@dataclass
class CaptionConfig:
    """Caption output format and ASS style configuration."""
    format: str = "srt"                  # "srt" or "ass"
    style: str = "standard"              # "standard", "word_by_word", "karaoke"
    words_per_line: int = 4
    font_name: str = "Arial"
    font_size: int = 48
    primary_color: str = "&H00FFFFFF"    # White (AABBGGRR format)
    highlight_color: str = "&H0000FFFF"  # Yellow for karaoke highlight
    outline_color: str = "&H00000000"    # Black outline
    back_color: str = "&H80000000"       # Semi-transparent black background
    outline_width: int = 3
    shadow_depth: int = 1
    margin_v: int = 60
    play_res_x: int = 1080
    play_res_y: int = 1920
    title: str = "Clip Captions"


@dataclass
class ChunkConfig:
    """Long-input chunking and judge dispatch."""
    long_input_threshold_s: float = 1200.0  # 20 minutes activates chunking
    window_length_s: float = 300.0
    overlap_s: float = 30.0
    max_parallel: int = 3
    call_timeout_s: float = 120.0
    proximity_threshold_s: float = 10.0

    def validate(self) -> None:
        if self.overlap_s < 0:
            raise ConfigError(f"overlap_s cannot be negative, got {self.overlap_s}")
        if self.window_length_s <= self.overlap_s:
            raise ConfigError(
                f"window_length_s ({self.window_length_s}) must exceed overlap_s ({self.overlap_s})"
            )
        if self.max_parallel < 1:
            raise ConfigError(f"max_parallel must be at least 1, got {self.max_parallel}")
        if self.call_timeout_s <= 0:
            raise ConfigError(f"call_timeout_s must be positive, got {self.call_timeout_s}")
        if self.proximity_threshold_s < 0:
            raise ConfigError(f"proximity_threshold_s cannot be negative, got {self.proximity_threshold_s}")


@dataclass
class JudgeConfig:
    """External LLM judge configuration."""
    provider: str = "openai"
    model: str = "gpt-4o"
    max_tokens: int = 4000
    temperature: float = 0.7
    request_timeout_s: float = 120.0
    min_score: float = 6.0              # viral_score floor applied by the judge
    clip_duration_s: float = 60.0       # requested clip length for viral mode
    max_clips: int = 8
    max_transcript_chars: int = 15000
    categories: List[str] = field(default_factory=lambda: ["curiosidades", "historia", "filmes", "misterios"])


@dataclass
class CuriosityConfig:
    """Complete-story (curiosity) judge configuration."""
    min_duration_s: float = 20.0
    max_duration_s: float = 240.0
    ideal_duration_s: float = 90.0
    min_completeness_score: float = 7.0
    max_blocks: int = 10
    priority: str = "balanced"          # "completeness", "viral", "balanced"
    max_transcript_chars: int = 20000
    pause_tolerance_s: float = 2.0


@dataclass
class StorageConfig:
    """Job repository backend."""
    backend: str = "memory"             # "memory" or "sql"
    database_url: str = "sqlite:///autoclips.db"


@dataclass
class PathConfig:
    """File paths and directories."""
    transcript: str = "transcript.json"
    transcript_format: str = "json"   # "json", "srt" or "ass"
    silences: Optional[str] = None
    silencedetect_log: Optional[str] = None
    topic_changes: Optional[str] = None
    project_name: Optional[str] = None

    @property
    def project_root(self) -> str:
        return self.project_name if self.project_name else "."

    @property
    def output_dir(self) -> str:
        return os.path.join(self.project_root, "clips_output")

    @property
    def clips_plan_json(self) -> str:
        """Final clip plan handed to the encoder."""
        return os.path.join(self.project_root, "clips_plan.json")


MODES = ("sequential", "viral", "curiosity")


class EnvSettings(BaseSettings):
    """Deployment knobs loaded from environment variables."""
    openai_parallel_requests: Optional[int] = None
    curiosity_min_duration: Optional[float] = None
    curiosity_max_duration: Optional[float] = None
    curiosity_ideal_duration: Optional[float] = None
    curiosity_min_completeness_score: Optional[float] = None
    default_subtitle_style: Optional[str] = None
    autoclips_database_url: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )


@dataclass
class Config:
    """Main configuration container combining all settings."""
    paths: PathConfig = field(default_factory=PathConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    caption: CaptionConfig = field(default_factory=CaptionConfig)
    chunk: ChunkConfig = field(default_factory=ChunkConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    curiosity: CuriosityConfig = field(default_factory=CuriosityConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    mode: str = "sequential"          # "sequential", "viral", "curiosity"
    debug: bool = False               # --debug flag for verbose logging

    @classmethod
    def from_env(cls) -> "Config":
        """Build a config with the environment overrides applied."""
        try:
            env = EnvSettings()
        except ValidationError as e:
            raise ConfigError(f"Invalid environment settings: {e}")
        cfg = cls()
        cfg.apply_env_overrides(env)
        return cfg

    def apply_env_overrides(self, env: EnvSettings) -> None:
        """Copy every knob the environment set onto its config section."""
        targets = {
            "openai_parallel_requests": (self.chunk, "max_parallel"),
            "curiosity_min_duration": (self.curiosity, "min_duration_s"),
            "curiosity_max_duration": (self.curiosity, "max_duration_s"),
            "curiosity_ideal_duration": (self.curiosity, "ideal_duration_s"),
            "curiosity_min_completeness_score": (self.curiosity, "min_completeness_score"),
            "default_subtitle_style": (self.caption, "style"),
            "autoclips_database_url": (self.storage, "database_url"),
        }
        for name, (section, attr) in targets.items():
            value = getattr(env, name)
            if value is not None:
                setattr(section, attr, value)

    def validate(self) -> None:
        """Check every setting once, before any planning work starts.

        Raises:
            ConfigError: on the first invalid setting found
        """
        self.planner.validate()
        self.chunk.validate()

        if self.curiosity.min_duration_s >= self.curiosity.max_duration_s:
            raise ConfigError("curiosity min_duration_s must be lower than max_duration_s")
        if self.judge.max_clips < 1:
            raise ConfigError(f"max_clips must be at least 1, got {self.judge.max_clips}")
        if self.curiosity.max_blocks < 1:
            raise ConfigError(f"max_blocks must be at least 1, got {self.curiosity.max_blocks}")
        if self.paths.transcript_format not in ("json", "srt", "ass"):
            raise ConfigError(f"Unknown transcript format '{self.paths.transcript_format}'")
        if self.caption.format not in ("srt", "ass"):
            raise ConfigError(f"Unknown caption format '{self.caption.format}'")
        if self.caption.style not in ("standard", "word_by_word", "karaoke"):
            raise ConfigError(f"Unknown caption style '{self.caption.style}'")
        if self.caption.words_per_line < 1:
            raise ConfigError("words_per_line must be at least 1")
        if self.mode not in MODES:
            raise ConfigError(f"Unknown mode '{self.mode}', expected one of {', '.join(MODES)}")
        if self.storage.backend not in ("memory", "sql"):
            raise ConfigError(f"Unknown storage backend '{self.storage.backend}'")
