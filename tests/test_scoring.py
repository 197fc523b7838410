from __future__ import annotations

import pytest

from cropadvisor.models.crops import OptimumRange
from cropadvisor.models.enums import SeasonEnum
from cropadvisor.schemas.recommend import InputConditions
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.scoring import ScoringCalibration, score_by_optimum, score_crop, shortlist

RANGE = OptimumRange(min=4, opt=6, max=10)


def test_score_by_optimum_peaks_at_optimum() -> None:
    assert score_by_optimum(6, RANGE) == 5.0


def test_score_by_optimum_absent_value_is_neutral() -> None:
    assert score_by_optimum(None, RANGE) == 0.0


@pytest.mark.parametrize("value", [3.99, 10.01, -100, 1e6])
def test_score_by_optimum_penalises_out_of_range(value: float) -> None:
    assert score_by_optimum(value, RANGE) == -5.0


def test_score_by_optimum_tapers_linearly_and_never_negative_inside() -> None:
    # half range = 3
    assert score_by_optimum(7.5, RANGE) == pytest.approx(2.5)
    assert score_by_optimum(9, RANGE) == pytest.approx(0.0)
    assert score_by_optimum(10, RANGE) == 0.0
    assert score_by_optimum(4, RANGE) == pytest.approx(1.6666666, rel=1e-5)


def test_score_by_optimum_degenerate_range() -> None:
    point = OptimumRange(min=5, opt=5, max=5)
    assert score_by_optimum(5, point) == 5.0
    assert score_by_optimum(5.1, point) == -5.0


def test_score_crop_sums_season_factors_and_priority() -> None:
    rice = get_knowledge_base().require("Rice")
    calibration = ScoringCalibration()
    at_optimum = InputConditions(
        ph=6.5, rainfall=1200, moisture=80, temperature=28,
        nitrogen=100, phosphorus=60, potassium=60, season="Kharif",
    )
    # +10 season, 7 factors * 5, +2 priority
    assert score_crop(rice, at_optimum, calibration) == pytest.approx(47.0)

    off_season = at_optimum.model_copy(update={"season": SeasonEnum.rabi})
    assert score_crop(rice, off_season, calibration) == pytest.approx(25.0)


def test_score_crop_uses_calibration_constants() -> None:
    rice = get_knowledge_base().require("Rice")
    empty = InputConditions(season="Rabi")
    calibration = ScoringCalibration(season_match_bonus=12.0, season_mismatch_penalty=-15.0)
    assert score_crop(rice, empty, calibration) == pytest.approx(-13.0)


def test_shortlist_length_and_order(rice_conditions: InputConditions) -> None:
    kb = get_knowledge_base()
    for limit in (1, 3, 7, 100):
        ranked = shortlist(rice_conditions, limit)
        assert len(ranked) == min(limit, len(kb))
        scores = [item.score for item in ranked]
        assert scores == sorted(scores, reverse=True)


def test_shortlist_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        shortlist(InputConditions(), 0)


def test_shortlist_ties_keep_knowledge_base_order() -> None:
    kb = get_knowledge_base()
    twins = KnowledgeBase([kb.require("Mustard"), kb.require("Rapeseed")])
    ranked = shortlist(InputConditions(season="Rabi"), 2, knowledge_base=twins)
    assert [item.name for item in ranked] == ["Mustard", "Rapeseed"]
    assert ranked[0].score == ranked[1].score


def test_scoring_is_deterministic(rice_conditions: InputConditions) -> None:
    first = shortlist(rice_conditions, 7)
    second = shortlist(rice_conditions, 7)
    assert [(c.name, c.score) for c in first] == [(c.name, c.score) for c in second]


def test_rice_like_crop_ranks_top_three(rice_conditions: InputConditions) -> None:
    top = [item.name for item in shortlist(rice_conditions, 3)]
    assert "Rice" in top


def test_invalid_season_scores_like_kharif(rice_conditions: InputConditions) -> None:
    invalid = InputConditions(**{**rice_conditions.model_dump(), "season": "InvalidValue"})
    assert invalid.season == rice_conditions.season
    assert [(c.name, c.score) for c in shortlist(invalid, 7)] == [
        (c.name, c.score) for c in shortlist(rice_conditions, 7)
    ]
