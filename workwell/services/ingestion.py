"""
Burnout Ingestion.

Turns raw worker signals into scored WorkerRecords. A signal must carry an
id, weekly hours, caseload and affect score; anything else (name,
department, current load) is optional and merged when present.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Union

from workwell.services.errors import InvalidInput
from workwell.services.repository import WorkerRepository
from workwell.services.scoring import BurnoutTier, compute_burnout, validate_signal
from workwell.services.worker_schema import WorkerRecord

logger = logging.getLogger("workwell.ingestion")

OPTIONAL_FIELDS = {
    "name": ("name",),
    "department": ("department",),
    "current_load": ("current_load", "currentLoad", "currentPatients"),
}


def _whole_load(value: Any) -> int:
    """A non-negative whole number of units, or InvalidInput.

    Whole floats (``12.0``) and numeric strings are accepted; fractions and
    booleans are not.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"current_load must be an integer, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"current_load must be an integer: {exc}") from exc
    if not number.is_integer():
        raise InvalidInput(f"current_load must be a whole number, got {value!r}")
    if number < 0:
        raise InvalidInput("current_load cannot be negative")
    return int(number)


class BurnoutService:
    """Scores worker signals and stores the result."""

    def __init__(self, repository: WorkerRepository):
        self.repository = repository

    async def predict(self, signal: Mapping[str, Any]) -> WorkerRecord:
        """Score one signal and upsert the worker.

        Raises:
            InvalidInput: required fields missing or malformed.
        """
        worker_id, weekly_hours, caseload, affect_score = validate_signal(signal)
        score, tier = compute_burnout(weekly_hours, caseload, affect_score)

        fields: Dict[str, Any] = {
            "weekly_hours": weekly_hours,
            "caseload": caseload,
            "affect_score": affect_score,
            "burnout_score": score,
        }
        for field, names in OPTIONAL_FIELDS.items():
            for name in names:
                if signal.get(name) is not None:
                    fields[field] = signal[name]
                    break

        if "current_load" in fields:
            fields["current_load"] = _whole_load(fields["current_load"])

        record = await self.repository.upsert(worker_id, fields)
        logger.debug("Worker %d scored %.2f (%s)", worker_id, score, tier.value)
        return record

    async def ingest_many(self, signals: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
        """Score a batch. Invalid signals are skipped and counted."""
        distribution = {tier.value: 0 for tier in BurnoutTier}
        processed = 0
        rejected = 0

        for signal in signals:
            try:
                record = await self.predict(signal)
            except InvalidInput as e:
                rejected += 1
                logger.warning("Rejected signal %s: %s", signal.get("id", "?"), e.message)
                continue
            distribution[record.tier.value] += 1
            processed += 1

        logger.info(
            "Ingested %d worker signals (%d rejected). Tiers: %s",
            processed,
            rejected,
            distribution,
        )
        return {
            "processed": processed,
            "rejected": rejected,
            "distribution": distribution,
        }

    async def ingest_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Score every signal in a JSON file.

        Accepts a top-level array or an object with a ``workers`` array.
        """
        with open(path) as f:
            data = json.load(f)
        signals = data.get("workers", []) if isinstance(data, dict) else data
        if not isinstance(signals, list):
            raise InvalidInput(f"{path}: expected a list of worker signals")
        return await self.ingest_many(s for s in signals if isinstance(s, dict))
