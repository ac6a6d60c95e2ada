import json
import os

import pytest

from autoclips.cli import main as cli_main
from autoclips.config import Config
from autoclips.exceptions import ConfigError, InputError
from autoclips.candidates.models import JudgedSegment, ScoredSegment, load_segments
from autoclips.jobs import InMemoryJobRepository, JobStatus
from autoclips.main import run_pipeline


def make_config(transcript_path, tmp_path, mode="sequential") -> Config:
    cfg = Config()
    cfg.paths.transcript = transcript_path
    cfg.paths.project_name = str(tmp_path / "project")
    cfg.mode = mode
    return cfg


def test_sequential_pipeline(transcript_path, tmp_path):
    cfg = make_config(transcript_path, tmp_path)
    repository = InMemoryJobRepository()

    entries = run_pipeline(cfg, repository=repository, job_id="seq")

    assert [e["number"] for e in entries] == [1, 2, 3]
    assert [(e["start_s"], e["end_s"]) for e in entries] == [(0.0, 71.5), (68.5, 141.5), (138.5, 200.0)]
    for entry in entries:
        assert entry["caption_path"].endswith(".srt")
        assert os.path.exists(entry["caption_path"])

    with open(entries[1]["caption_path"], encoding="utf-8") as f:
        first_block = f.read().split("\n\n")[0]
    assert first_block.startswith("1\n00:00:00,000 --> 00:00:01,500\n")

    plan = load_segments(cfg.paths.clips_plan_json)
    assert [s.kind for s in plan] == ["sequential"] * 3

    job = repository.get("seq")
    assert job.status == JobStatus.COMPLETED
    assert len(job.segments) == 3


def test_viral_pipeline_with_injected_judge(transcript_path, tmp_path):
    cfg = make_config(transcript_path, tmp_path, mode="viral")
    cfg.caption.format = "ass"
    calls = []

    def judge(text, cues):
        calls.append(len(cues))
        return [ScoredSegment(100.0, 160.0, score=7.0), ScoredSegment(10.0, 70.0, score=8.0)]

    entries = run_pipeline(cfg, judge=judge, repository=InMemoryJobRepository())

    assert calls == [40]
    assert [e["start_s"] for e in entries] == [100.0, 10.0]
    assert entries[0]["caption_path"].endswith("clip_001.ass")
    with open(entries[0]["caption_path"], encoding="utf-8") as f:
        assert f.read().startswith("[Script Info]")

    with open(cfg.paths.clips_plan_json, encoding="utf-8") as f:
        plan = json.load(f)
    assert plan["mode"] == "viral"
    assert plan["chunking_used"] is False


def test_curiosity_pipeline_refines_boundaries(tmp_path):
    transcript = {
        "duration_s": 60.0,
        "cues": [
            {"start_s": 0.0, "end_s": 9.0, "text": "Did you know octopuses have three hearts?"},
            {"start_s": 9.5, "end_s": 30.0, "text": "Two pump blood to the gills"},
            {"start_s": 30.0, "end_s": 44.0, "text": "and one to the rest of the body."},
            {"start_s": 44.5, "end_s": 60.0, "text": "Next up, squid."},
        ],
    }
    path = tmp_path / "transcript.json"
    path.write_text(json.dumps(transcript), encoding="utf-8")
    cfg = make_config(str(path), tmp_path, mode="curiosity")

    def judge(text, cues):
        return [JudgedSegment(1.2, 42.5, score=8.6, completeness_score=9, viral_score=8)]

    entries = run_pipeline(cfg, judge=judge, repository=InMemoryJobRepository())

    assert len(entries) == 1
    assert entries[0]["kind"] == "judged"
    assert (entries[0]["start_s"], entries[0]["end_s"]) == (0.0, 44.0)


def test_judged_mode_without_api_key_falls_back(transcript_path, tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    cfg = make_config(transcript_path, tmp_path, mode="viral")
    entries = run_pipeline(cfg, repository=InMemoryJobRepository())
    assert [e["kind"] for e in entries] == ["sequential"] * 3


def test_invalid_config_fails_before_work(transcript_path, tmp_path):
    cfg = make_config(transcript_path, tmp_path)
    cfg.planner.min_duration_s = 90.0
    repository = InMemoryJobRepository()
    with pytest.raises(ConfigError):
        run_pipeline(cfg, repository=repository, job_id="bad")
    assert repository.get("bad") is None
    assert not os.path.exists(cfg.paths.output_dir)


def test_missing_transcript_marks_job_failed(tmp_path):
    cfg = make_config(str(tmp_path / "nope.json"), tmp_path)
    repository = InMemoryJobRepository()
    with pytest.raises(InputError):
        run_pipeline(cfg, repository=repository, job_id="missing")
    job = repository.get("missing")
    assert job.status == JobStatus.FAILED
    assert "not found" in job.error


def test_cli_exit_codes(transcript_path, tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    project = str(tmp_path / "cli")
    assert cli_main(["--transcript", transcript_path, "--project", project]) == 0
    assert os.path.exists(os.path.join(project, "clips_plan.json"))
    assert cli_main([
        "--transcript", transcript_path, "--project", project,
        "--min-duration", "90", "--max-duration", "80",
    ]) == 2
    assert cli_main(["--transcript", transcript_path, "--project", project, "--max-clips", "0"]) == 2


def test_srt_input_is_read_when_format_says_so(tmp_path):
    blocks = [
        f"{i + 1}\n00:{i // 6:02d}:{(i % 6) * 10:02d},000 --> 00:{i // 6:02d}:{(i % 6) * 10 + 9:02d},500\nLine {i + 1}."
        for i in range(12)
    ]
    path = tmp_path / "source.srt"
    path.write_text("\n\n".join(blocks) + "\n", encoding="utf-8")
    cfg = make_config(str(path), tmp_path)
    cfg.paths.transcript_format = "srt"

    entries = run_pipeline(cfg, repository=InMemoryJobRepository())

    assert entries[0]["start_s"] == 0.0
    assert entries[-1]["end_s"] == 119.5
