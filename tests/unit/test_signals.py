import json

import pytest

from autoclips.exceptions import InputError
from autoclips.candidates.models import (
    SilenceInterval, TopicChangePoint, TimeSpan, SequentialSegment, JudgedSegment,
    save_segments, load_segments,
)
from autoclips.candidates.signals import (
    SignalIndex, load_silences, load_topic_changes, parse_silencedetect_log,
)
from autoclips.candidates.refinement import adjust_to_natural_pauses
from autoclips.models.transcript import Cue, Transcript


def test_signal_index_sorts_and_drops_invalid():
    signals = SignalIndex.build(
        [Cue(10.0, 12.0, "second"), Cue(0.0, 5.0, "first"), Cue(7.0, 7.0, "empty")],
        [SilenceInterval(20.0, 21.0), SilenceInterval(-1.0, 2.0), SilenceInterval(3.0, 4.0)],
        [TopicChangePoint(50.0), TopicChangePoint(-5.0)],
    )
    assert [c.text for c in signals.cues] == ["first", "second"]
    assert [s.start_s for s in signals.silences] == [3.0, 20.0]
    assert len(signals.topic_changes) == 1
    assert len(signals.gaps) == 1
    assert signals.gaps[0].gap_s == 5.0


def test_topic_confidence_is_clamped():
    assert TopicChangePoint(1.0, 1.7).confidence == 1.0
    assert TopicChangePoint(1.0, -0.2).confidence == 0.0


def test_parse_silencedetect_log():
    log = (
        "[silencedetect @ 0x1] silence_start: 12.5\n"
        "[silencedetect @ 0x1] silence_end: 13.75 | silence_duration: 1.25\n"
        "[silencedetect @ 0x1] silence_start: 40\n"
        "[silencedetect @ 0x1] silence_end: 41.2 | silence_duration: 1.2\n"
    )
    silences = parse_silencedetect_log(log)
    assert [(s.start_s, s.end_s) for s in silences] == [(12.5, 13.75), (40.0, 41.2)]


def test_signal_loaders(tmp_path):
    silences_path = tmp_path / "silences.json"
    silences_path.write_text(json.dumps([{"start": 1.0, "end": 2.0}, {"start": "bad"}]), encoding="utf-8")
    topics_path = tmp_path / "topics.json"
    topics_path.write_text(json.dumps([{"timestamp": 30.0, "confidence": 0.4}]), encoding="utf-8")

    assert [(s.start_s, s.end_s) for s in load_silences(str(silences_path))] == [(1.0, 2.0)]
    topics = load_topic_changes(str(topics_path))
    assert topics[0].timestamp_s == 30.0
    assert topics[0].confidence == 0.4


def test_time_span_rejects_empty_range():
    with pytest.raises(InputError):
        TimeSpan(5.0, 5.0)


def test_segments_round_trip_through_plan_file(tmp_path):
    segments = [
        SequentialSegment(0.0, 70.0, index=1, boundary_score=1.5),
        JudgedSegment(80.0, 170.0, score=8.6, completeness_score=9.0, viral_score=8.0, has_hook=True),
    ]
    path = str(tmp_path / "plan.json")
    save_segments(segments, path, mode="mixed")
    loaded = load_segments(path)
    assert [s.kind for s in loaded] == ["sequential", "judged"]
    assert loaded[1].has_hook is True
    assert loaded[1].score == 8.6


def test_adjust_to_natural_pauses():
    cues = [
        Cue(0.0, 5.0, "Did you know this?"),
        Cue(5.5, 10.0, "and there is more"),
        Cue(10.0, 15.0, "The end."),
    ]
    span = adjust_to_natural_pauses(1.0, 14.0, cues)
    assert (span.start_s, span.end_s) == (0.0, 15.0)

    untouched = adjust_to_natural_pauses(1.0, 10.5, cues)
    assert untouched.end_s == 10.5


def test_transcript_accepts_whisper_segments():
    transcript = Transcript.from_dict({
        "language": "pt",
        "duration": 12.0,
        "segments": [
            {"start": 5.0, "end": 12.0, "text": " Segundo. "},
            {"start": 0.0, "end": 5.0, "text": "Primeiro."},
        ],
    })
    assert transcript.duration_s == 12.0
    assert [c.text for c in transcript.cues] == ["Primeiro.", "Segundo."]
