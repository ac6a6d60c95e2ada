import json
import pytest

from autoclips.models.transcript import Cue


def make_cues(duration: float = 200.0, step: float = 5.0, text: str = "word word word word"):
    """Back-to-back cues of ``step`` seconds, none closing a sentence."""
    cues = []
    t = 0.0
    while t < duration:
        cues.append(Cue(start_s=t, end_s=min(t + step, duration), text=text))
        t += step
    return cues


@pytest.fixture
def scenario_cues():
    return make_cues()


@pytest.fixture
def transcript_path(tmp_path):
    data = {
        "language": "en",
        "duration_s": 200.0,
        "cues": [
            {"start_s": c.start_s, "end_s": c.end_s, "text": c.text, "words": []}
            for c in make_cues()
        ],
    }
    path = tmp_path / "transcript.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def cue_factory():
    return make_cues
