"""Tier-banded and dashboard ceiling policies."""

import pytest

from workwell.services.policy import (
    dashboard_ceiling,
    dashboard_max_load,
    is_dashboard_overloaded,
    tier_band_limit,
    tier_banded_ceiling,
)


@pytest.mark.parametrize(
    "score,limit",
    [(100, 25), (70, 25), (69.99, 35), (50, 35), (49.99, 40), (30, 40), (29.99, 50), (0, 50)],
)
def test_band_limits(score, limit):
    assert tier_band_limit(score) == limit


def test_ceiling_is_min_of_band_and_load():
    assert tier_banded_ceiling(80, 50) == 25
    assert tier_banded_ceiling(80, 10) == 10
    assert tier_banded_ceiling(20, 45) == 45
    assert tier_banded_ceiling(20, 60) == 50


@pytest.mark.parametrize("score", [0, 29.99, 30, 49.99, 50, 69.99, 70, 100])
@pytest.mark.parametrize("load", [0, 1, 24, 25, 26, 35, 40, 50, 80])
def test_ceiling_never_exceeds_load_and_is_idempotent(score, load):
    once = tier_banded_ceiling(score, load)
    assert once <= load
    assert tier_banded_ceiling(score, once) == once


def test_dashboard_overload_flag():
    assert is_dashboard_overloaded(70.01, 10)
    assert is_dashboard_overloaded(10, 41)
    assert not is_dashboard_overloaded(70, 40)


def test_dashboard_trims_overloaded_to_target():
    assert dashboard_ceiling(80, 50, average_load=30) == 35
    assert dashboard_ceiling(20, 45, average_load=30) == 35
    # Overloaded by score but already under the target: unchanged
    assert dashboard_ceiling(90, 20, average_load=30) == 20


def test_dashboard_nudges_underloaded_toward_average():
    assert dashboard_ceiling(20, 10, average_load=30) == 15
    # Capped at the fleet average
    assert dashboard_ceiling(20, 10, average_load=14.5) == 14.5


def test_dashboard_leaves_others_alone():
    # Not under 70% of the average
    assert dashboard_ceiling(20, 10, average_load=12) == 10
    # Burnout too high to take more
    assert dashboard_ceiling(60, 10, average_load=30) == 10


def test_dashboard_can_grow_where_tier_banded_cannot():
    load = 10
    assert tier_banded_ceiling(20, load) == load
    assert dashboard_ceiling(20, load, average_load=30) > load


def test_dashboard_max_load():
    assert dashboard_max_load(70.5) == 25
    assert dashboard_max_load(70) == 40
