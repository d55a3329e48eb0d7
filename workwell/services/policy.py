"""
Recommendation Policies.

Two ceilings coexist on purpose and answer different questions:

tier-banded
    Used by the optimizer. How much of the current load is sustainable for
    this burnout level. Never grows past the current load.

dashboard
    Used by the balancer report. Trims overloaded workers to a fixed target
    and nudges under-used workers toward the fleet average.
"""

from typing import List, Tuple

# (minimum score, band limit), highest band first
TIER_BANDS: List[Tuple[float, int]] = [
    (70.0, 25),
    (50.0, 35),
    (30.0, 40),
]
BASE_BAND_LIMIT = 50

# Dashboard policy
OVERLOAD_SCORE = 70.0
OVERLOAD_LOAD = 40
DASHBOARD_TARGET_LOAD = 35
AVAILABLE_SCORE = 50.0
UNDERLOAD_RATIO = 0.7
UNDERLOAD_STEP = 5
REDUCED_MAX_LOAD = 25
STANDARD_MAX_LOAD = 40


# ─── Tier-banded ───

def tier_band_limit(score: float) -> int:
    """The raw band limit for a burnout score (25/35/40/50)."""
    for floor, limit in TIER_BANDS:
        if score >= floor:
            return limit
    return BASE_BAND_LIMIT


def tier_banded_ceiling(score: float, current_load: int) -> int:
    """Sustainable share of ``current_load`` under the tier bands."""
    return min(tier_band_limit(score), current_load)


# ─── Dashboard ───

def is_dashboard_overloaded(score: float, current_load: float) -> bool:
    return score > OVERLOAD_SCORE or current_load > OVERLOAD_LOAD


def dashboard_excess(current_load: int) -> int:
    return max(0, current_load - DASHBOARD_TARGET_LOAD)


def dashboard_ceiling(score: float, current_load: int, average_load: float) -> float:
    """Suggested load for the balancer report.

    Overloaded workers are trimmed to the dashboard target. Workers that are
    not overloaded, have a burnout score under 50 and carry less than 70% of
    the fleet average may take up to five more, capped at the average.
    Everyone else keeps their current load.
    """
    if is_dashboard_overloaded(score, current_load):
        return current_load - dashboard_excess(current_load)
    if score < AVAILABLE_SCORE and current_load < UNDERLOAD_RATIO * average_load:
        return min(average_load, current_load + UNDERLOAD_STEP)
    return current_load


def dashboard_max_load(score: float) -> int:
    """Ceiling shown on the single-worker workload view."""
    return REDUCED_MAX_LOAD if score > OVERLOAD_SCORE else STANDARD_MAX_LOAD
