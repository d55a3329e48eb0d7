"""
Burnout Scoring.

Normalizes three raw signals onto a 0-100 scale and blends them:

    hours   (weekly hours, nominal 35-70)       weight 0.4
    load    (caseload, nominal 10-60)           weight 0.4
    stress  (1 - affect score, affect in 0-1)   weight 0.2

Inputs outside their nominal ranges are deliberately left unclamped, so a
single normalized term may be negative or above 100. Only the final blended
score is clamped to [0, 100].
"""

import math
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from workwell.services.errors import InvalidInput


class BurnoutTier(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# Normalization anchors
HOURS_FLOOR = 35.0
HOURS_SPAN = 35.0
CASELOAD_FLOOR = 10.0
CASELOAD_SPAN = 50.0

# Blend weights
HOURS_WEIGHT = 0.4
CASELOAD_WEIGHT = 0.4
STRESS_WEIGHT = 0.2

# Tier bands (lower bound inclusive)
MEDIUM_THRESHOLD = 40.0
HIGH_THRESHOLD = 70.0

# Accepted spellings for each required signal field
SIGNAL_FIELDS = {
    "id": ("id", "workerId", "worker_id", "doctorId"),
    "weekly_hours": ("weekly_hours", "weeklyHours"),
    "caseload": ("caseload", "patientLoad", "patient_load"),
    "affect_score": ("affect_score", "affectScore", "emotionScore", "emotion_score"),
}


def categorize_burnout(score: float) -> BurnoutTier:
    """Map a burnout score onto its risk tier."""
    if score < MEDIUM_THRESHOLD:
        return BurnoutTier.LOW
    if score < HIGH_THRESHOLD:
        return BurnoutTier.MEDIUM
    return BurnoutTier.HIGH


def raw_burnout(weekly_hours: float, caseload: float, affect_score: float) -> float:
    """Weighted blend before rounding and clamping. Can leave [0, 100]."""
    hours_norm = (weekly_hours - HOURS_FLOOR) / HOURS_SPAN * 100
    load_norm = (caseload - CASELOAD_FLOOR) / CASELOAD_SPAN * 100
    stress_norm = (1 - affect_score) * 100
    return (
        hours_norm * HOURS_WEIGHT
        + load_norm * CASELOAD_WEIGHT
        + stress_norm * STRESS_WEIGHT
    )


def compute_burnout(
    weekly_hours: float,
    caseload: float,
    affect_score: float,
) -> Tuple[float, BurnoutTier]:
    """Return ``(score, tier)`` for one worker's signals.

    The score is rounded to two decimals, then clamped to [0, 100].
    """
    raw = raw_burnout(weekly_hours, caseload, affect_score)
    score = max(0.0, min(100.0, round(raw, 2)))
    return score, categorize_burnout(score)


def _pick(signal: Mapping[str, Any], names: Tuple[str, ...]) -> Optional[Any]:
    for name in names:
        value = signal.get(name)
        if value is not None:
            return value
    return None


def validate_signal(signal: Mapping[str, Any]) -> Tuple[int, float, float, float]:
    """Check a raw signal carries everything ``compute_burnout`` needs.

    Returns ``(worker_id, weekly_hours, caseload, affect_score)``.

    Raises:
        InvalidInput: a required field is absent or not numeric.
    """
    values = {key: _pick(signal, names) for key, names in SIGNAL_FIELDS.items()}
    missing = [key for key, value in values.items() if value is None]
    if missing:
        raise InvalidInput(
            f"Missing required fields: {', '.join(missing)}",
            missing=missing,
        )

    try:
        worker_id = int(values["id"])
        weekly_hours = float(values["weekly_hours"])
        caseload = float(values["caseload"])
        affect_score = float(values["affect_score"])
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Signal fields must be numeric: {exc}") from exc

    for name, value in (
        ("weekly_hours", weekly_hours),
        ("caseload", caseload),
        ("affect_score", affect_score),
    ):
        if math.isnan(value) or math.isinf(value):
            raise InvalidInput(f"{name} must be a finite number")

    return worker_id, weekly_hours, caseload, affect_score
