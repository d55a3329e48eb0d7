"""Burnout score normalization, clamping and tiering."""

import pytest

from workwell.services.errors import InvalidInput
from workwell.services.scoring import (
    BurnoutTier,
    categorize_burnout,
    compute_burnout,
    raw_burnout,
    validate_signal,
)


def test_nominal_minimum_scores_zero():
    score, tier = compute_burnout(35, 10, 1.0)
    assert score == 0
    assert tier == BurnoutTier.LOW


def test_nominal_maximum_is_high():
    score, tier = compute_burnout(70, 60, 0.1)
    # 40 + 40 + 18: the stress term tops out at 18 with affect 0.1
    assert score == pytest.approx(98.0)
    assert tier == BurnoutTier.HIGH


def test_full_stress_reaches_hundred():
    score, _ = compute_burnout(70, 60, 0.0)
    assert score == 100.0


def test_weighted_blend_rounded_to_two_decimals():
    # hours 5/35*100*0.4 = 5.714..., load 10/50*100*0.4 = 8, stress 50*0.2 = 10
    score, tier = compute_burnout(40, 20, 0.5)
    assert score == 23.71
    assert tier == BurnoutTier.LOW


def test_intermediate_terms_are_not_clamped():
    # caseload 70 normalizes to 120; clamping it to 100 would give 40
    score, tier = compute_burnout(35, 70, 1.0)
    assert score == 48.0
    assert tier == BurnoutTier.MEDIUM


def test_negative_term_pulls_score_down():
    # hours 20 normalizes to about -42.86; clamping it to 0 would give 60
    score, _ = compute_burnout(20, 60, 0.0)
    assert score == 42.86


def test_final_score_clamped_high_and_low():
    assert raw_burnout(80, 70, 0.0) > 100
    assert compute_burnout(80, 70, 0.0)[0] == 100.0
    assert raw_burnout(20, 5, 1.0) < 0
    assert compute_burnout(20, 5, 1.0)[0] == 0.0


@pytest.mark.parametrize(
    "score,tier",
    [
        (0, BurnoutTier.LOW),
        (39.99, BurnoutTier.LOW),
        (40.0, BurnoutTier.MEDIUM),
        (69.99, BurnoutTier.MEDIUM),
        (70.0, BurnoutTier.HIGH),
        (100, BurnoutTier.HIGH),
    ],
)
def test_tier_bands(score, tier):
    assert categorize_burnout(score) == tier


@pytest.mark.parametrize("hours", [20, 35, 52.5, 70, 90])
@pytest.mark.parametrize("caseload", [0, 10, 35, 60, 80])
@pytest.mark.parametrize("affect", [0.0, 0.3, 1.0])
def test_score_always_in_range_and_tier_consistent(hours, caseload, affect):
    score, tier = compute_burnout(hours, caseload, affect)
    assert 0 <= score <= 100
    assert tier == categorize_burnout(score)


def test_validate_signal_accepts_original_field_names():
    signal = {"doctorId": 4, "weeklyHours": 50, "patientLoad": 30, "emotionScore": 0.4}
    assert validate_signal(signal) == (4, 50.0, 30.0, 0.4)


def test_validate_signal_reports_every_missing_field():
    with pytest.raises(InvalidInput) as exc_info:
        validate_signal({"id": 1, "weeklyHours": 40})
    assert exc_info.value.missing == ["caseload", "affect_score"]


def test_validate_signal_rejects_non_numeric():
    with pytest.raises(InvalidInput):
        validate_signal({"id": 1, "weeklyHours": "lots", "caseload": 20, "affectScore": 0.5})


def test_validate_signal_rejects_nan():
    with pytest.raises(InvalidInput):
        validate_signal({"id": 1, "weeklyHours": float("nan"), "caseload": 20, "affectScore": 0.5})
