import pytest

from autoclips.config import Config
from autoclips.exceptions import ConfigError


def test_defaults_are_valid():
    cfg = Config()
    cfg.validate()
    assert cfg.planner.min_duration_s == 60.0
    assert cfg.planner.max_duration_s == 80.0
    assert cfg.chunk.long_input_threshold_s == 1200.0
    assert cfg.caption.words_per_line == 4


def test_min_must_be_below_max():
    cfg = Config()
    cfg.planner.min_duration_s = 90.0
    with pytest.raises(ConfigError):
        cfg.validate()


def test_window_must_exceed_overlap():
    cfg = Config()
    cfg.chunk.overlap_s = cfg.chunk.window_length_s
    with pytest.raises(ConfigError):
        cfg.validate()


def test_unknown_mode_and_format():
    cfg = Config()
    cfg.mode = "random"
    with pytest.raises(ConfigError):
        cfg.validate()
    cfg = Config()
    cfg.caption.format = "vtt"
    with pytest.raises(ConfigError):
        cfg.validate()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("OPENAI_PARALLEL_REQUESTS", "5")
    monkeypatch.setenv("CURIOSITY_MAX_DURATION", "180")
    monkeypatch.setenv("DEFAULT_SUBTITLE_STYLE", "karaoke")
    cfg = Config.from_env()
    assert cfg.chunk.max_parallel == 5
    assert cfg.curiosity.max_duration_s == 180.0
    assert cfg.caption.style == "karaoke"


def test_bad_environment_value(monkeypatch):
    monkeypatch.setenv("OPENAI_PARALLEL_REQUESTS", "many")
    with pytest.raises(ConfigError):
        Config.from_env()


def test_empty_environment_value_is_ignored(monkeypatch):
    monkeypatch.setenv("OPENAI_PARALLEL_REQUESTS", "")
    monkeypatch.setenv("AUTOCLIPS_DATABASE_URL", "sqlite:///jobs.db")
    cfg = Config.from_env()
    assert cfg.chunk.max_parallel == 3
    assert cfg.storage.database_url == "sqlite:///jobs.db"


@pytest.mark.parametrize("section, attr", [("judge", "max_clips"), ("curiosity", "max_blocks")])
def test_clip_limits_must_be_positive(section, attr):
    cfg = Config()
    setattr(getattr(cfg, section), attr, 0)
    with pytest.raises(ConfigError):
        cfg.validate()
