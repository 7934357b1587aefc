from core.config import ScoringWeights
from features.scoring.services.spot_scorer import ADDITIONAL_REPORT_FIELDS, SpotScorer
from features.tides.models.tide_types import TideTrend

from conftest import make_conditions, make_tide

REPORT = {
    "main_alert": "Clean lines",
    "wave_size": "chest high",
    "wind": "light offshore",
    "best_time": "7am",
    "vibe": "mellow",
    "tips": ["a", "b", "c"],
}


def ideal(spot_id: str = "malibu"):
    return make_conditions(
        spot_id,
        tide=make_tide(TideTrend.RISING, 3.0),
        wave_height=4.0,
        swell_period=12.0,
        wind_speed=5.0,
        wind_direction=270
    )


def test_every_bonus_adds_up():
    assert SpotScorer(limit=3).score(ideal(), 70) == 115


def test_missing_inputs_withhold_bonuses():
    bare = make_conditions()
    assert SpotScorer(limit=3).score(bare, 70) == 70


def test_thresholds_are_strict():
    edge = make_conditions(
        tide=make_tide(TideTrend.STABLE, 2.0),
        wave_height=6.0,
        swell_period=8.0,
        wind_speed=10.0,
        wind_direction=180
    )
    assert SpotScorer(limit=3).score(edge, 0) == 0


def test_falling_tide_keeps_range_bonus():
    conditions = make_conditions(tide=make_tide(TideTrend.FALLING, 4.0))
    assert SpotScorer(limit=3).score(conditions, 10) == 15


def test_weights_are_configurable():
    weights = ScoringWeights(rising_tide_bonus=0, wave_height_bonus=20)
    scorer = SpotScorer(weights=weights, limit=3)
    assert scorer.score(ideal(), 70) == 115 - 10 + 10


def test_rank_is_stable_for_equal_scores():
    scorer = SpotScorer(limit=3)
    first = scorer.build(make_conditions("a"), 50)
    second = scorer.build(make_conditions("b"), 50)
    best = scorer.build(make_conditions("c"), 60)

    ranked = scorer.rank([first, second, best])
    assert [s.conditions.spot_id for s in ranked] == ["c", "a", "b"]


def test_select_top_trims_to_limit_and_report_fields():
    scorer = SpotScorer(limit=3)
    candidates = [scorer.build(make_conditions(f"s{i}"), 10 * i, REPORT) for i in range(5)]

    selection = scorer.select_top(candidates)

    assert selection.featured.conditions.spot_id == "s4"
    assert selection.featured.report == REPORT
    assert [s.conditions.spot_id for s in selection.additional] == ["s3", "s2"]
    for spot in selection.additional:
        assert set(spot.report) == set(ADDITIONAL_REPORT_FIELDS)


def test_select_top_single_candidate():
    scorer = SpotScorer(limit=3)
    selection = scorer.select_top([scorer.build(make_conditions(), 40)])
    assert selection.featured.score == 40
    assert selection.additional == []


def test_select_top_nothing_to_rank():
    assert SpotScorer(limit=3).select_top([]) is None
