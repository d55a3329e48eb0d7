"""
Worker Schema Definitions.

The stored worker record plus the report shapes produced by the balancer
and the optimizer. Field names are snake_case in Python and camelCase on
the wire.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from workwell.services.scoring import BurnoutTier, categorize_burnout

DEFAULT_DEPARTMENT = "General"


class CamelModel(BaseModel):
    """Base model that reads either spelling and writes camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkerRecord(CamelModel):
    """One worker as held by the repository.

    ``tier`` always follows ``burnout_score``; whatever tier is supplied is
    replaced on validation.
    """
    id: int
    name: str = ""
    department: str = DEFAULT_DEPARTMENT

    # Raw signals
    weekly_hours: Optional[float] = None
    caseload: Optional[float] = None
    affect_score: Optional[float] = None

    # Derived
    burnout_score: float = Field(default=0.0, ge=0, le=100)
    tier: BurnoutTier = BurnoutTier.LOW

    # Load
    current_load: Optional[int] = Field(default=None, ge=0)
    recommended_load: int = Field(default=0, ge=0)

    last_updated: Optional[datetime] = None

    @model_validator(mode="after")
    def _derive_defaults(self) -> "WorkerRecord":
        if not self.name:
            self.name = f"Worker {self.id}"
        if not self.department:
            self.department = DEFAULT_DEPARTMENT
        self.tier = categorize_burnout(self.burnout_score)
        return self


# Wire name -> field name, for callers that hand over camelCase updates
FIELD_ALIASES: Dict[str, str] = {
    field.alias or name: name for name, field in WorkerRecord.model_fields.items()
}
FIELD_ALIASES.update({"patientLoad": "caseload", "emotionScore": "affect_score"})


def normalize_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Map an update onto WorkerRecord field names.

    Unknown keys, ``id`` (immutable) and ``tier`` (derived) are dropped.
    """
    normalized = {}
    for key, value in fields.items():
        name = FIELD_ALIASES.get(key, key)
        if name in ("id", "tier") or name not in WorkerRecord.model_fields:
            continue
        normalized[name] = value
    return normalized


# ─── Balancer report ───

class WorkerStatus(str, Enum):
    OVERLOADED = "Overloaded"
    AT_RISK = "AtRisk"
    NORMAL = "Normal"


class SuggestedTransfer(CamelModel):
    to_id: int
    to_name: str
    count: int


class WorkerBalance(CamelModel):
    id: int
    name: str
    department: str
    burnout_score: float
    tier: BurnoutTier
    current_load: int
    recommended_load: int
    is_overloaded: bool
    status: WorkerStatus
    suggested_transfers: List[SuggestedTransfer] = Field(default_factory=list)


class BalanceSummary(CamelModel):
    total_workers: int
    overloaded_count: int
    average_load: float
    total_load: int
    redistribution_needed: bool


class BalanceReport(CamelModel):
    summary: BalanceSummary
    workers: List[WorkerBalance] = Field(default_factory=list)


class WorkerWorkload(CamelModel):
    """Single-worker workload view."""
    id: int
    name: str
    department: str
    burnout_score: float
    tier: BurnoutTier
    current_load: int
    is_overloaded: bool
    recommended_max_load: int


# ─── Optimizer report ───

class PassStatus(str, Enum):
    BALANCED = "balanced"
    REDISTRIBUTED = "redistributed"
    ABORTED = "aborted"


class WorkerLoadSnapshot(CamelModel):
    id: int
    name: str
    current_load: int
    ceiling: int
    burnout_score: float


class LoadTransfer(CamelModel):
    to_id: int
    to_name: str
    count: int
    before: int
    after: int


class LoadReduction(CamelModel):
    worker_id: int
    name: str
    before: int
    after: int


class PassReport(CamelModel):
    """Outcome of one optimizer pass."""
    status: PassStatus
    started_at: datetime
    duration_seconds: float = 0.0
    reason: Optional[str] = None

    overworked_count: int = 0
    underworked_count: int = 0
    total_excess: int = 0
    redistributed: int = 0
    dropped_excess: int = 0

    transfers: List[LoadTransfer] = Field(default_factory=list)
    reductions: List[LoadReduction] = Field(default_factory=list)
    failed_worker_ids: List[int] = Field(default_factory=list)

    before: List[WorkerLoadSnapshot] = Field(default_factory=list)
    after: List[WorkerLoadSnapshot] = Field(default_factory=list)
    total_load_before: int = 0
    total_load_after: int = 0
