import pytest

from autoclips.config import PlannerConfig, ScoringConfig
from autoclips.exceptions import ConfigError
from autoclips.candidates.signals import SignalIndex
from autoclips.candidates.planner import plan_cut_points, expand_with_margin, plan_segments
from autoclips.models.transcript import Cue


def test_plan_scenario_without_sentence_ends(scenario_cues):
    signals = SignalIndex.build(scenario_cues)
    cuts = plan_cut_points(200.0, signals, PlannerConfig())
    assert cuts == [0.0, 70.0, 140.0, 200.0]
    spans = [b - a for a, b in zip(cuts, cuts[1:])]
    assert len(spans) == 3
    assert abs(sum(spans) - 200.0) < 1e-9


@pytest.mark.parametrize("duration", [61.0, 137.0, 200.0, 451.5, 1000.0])
def test_span_lengths_stay_in_bounds(duration, cue_factory):
    planner = PlannerConfig()
    signals = SignalIndex.build(cue_factory(duration, step=3.7, text="spoken text here."))
    cuts = plan_cut_points(duration, signals, planner)

    assert cuts[0] == 0.0
    assert cuts[-1] == duration
    assert all(a < b for a, b in zip(cuts, cuts[1:]))
    spans = [b - a for a, b in zip(cuts, cuts[1:])]
    for span in spans[:-1]:
        assert planner.min_duration_s <= span <= planner.max_duration_s
    assert 0 < spans[-1] <= planner.max_duration_s


def test_short_timeline_is_one_span():
    signals = SignalIndex.build([Cue(0.0, 30.0, "short")])
    assert plan_cut_points(45.0, signals, PlannerConfig()) == [0.0, 45.0]


def test_cut_lands_on_strong_signal(cue_factory):
    cues = cue_factory(200.0) + [Cue(200.0, 240.0, "tail")]
    cues[12] = Cue(60.0, 65.0, "That settles it.")
    signals = SignalIndex.build(cues)
    cuts = plan_cut_points(240.0, signals, PlannerConfig(), ScoringConfig())
    assert cuts[1] == 65.0


def test_invalid_bounds_raise_config_error():
    signals = SignalIndex.build()
    with pytest.raises(ConfigError):
        plan_cut_points(200.0, signals, PlannerConfig(min_duration_s=80, max_duration_s=80))
    with pytest.raises(ConfigError):
        plan_cut_points(200.0, signals, PlannerConfig(min_duration_s=0))
    with pytest.raises(ConfigError):
        plan_cut_points(0.0, signals, PlannerConfig())


def test_expand_with_margin_widens_internal_cuts():
    segments = expand_with_margin([0.0, 70.0, 140.0, 200.0], 1.5)
    assert [(s.start_s, s.end_s) for s in segments] == [(0.0, 71.5), (68.5, 141.5), (138.5, 200.0)]
    assert [s.index for s in segments] == [1, 2, 3]
    assert segments[1].metadata == {"cut_start_s": 70.0, "cut_end_s": 140.0}


def test_plan_segments_records_boundary_scores(scenario_cues):
    segments = plan_segments(200.0, SignalIndex.build(scenario_cues), PlannerConfig())
    assert len(segments) == 3
    assert all(s.kind == "sequential" for s in segments)
    assert segments[0].boundary_score == 1.5
    assert segments[-1].boundary_score == 0.0
