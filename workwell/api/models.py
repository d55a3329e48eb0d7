"""
WorkWell API Models. Request schemas; responses reuse the service schemas.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BurnoutSignal(BaseModel):
    """Raw per-worker signal posted for scoring.

    Every field is optional at the schema level so that a missing required
    field surfaces as a 400 from the scoring validation, not a 422.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("id", "workerId", "doctorId"),
    )
    name: Optional[str] = Field(default=None, max_length=200)
    department: Optional[str] = Field(default=None, max_length=200)
    weekly_hours: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("weeklyHours", "weekly_hours"),
    )
    caseload: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("caseload", "patientLoad"),
    )
    affect_score: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("affectScore", "affect_score", "emotionScore"),
    )
    current_load: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("currentLoad", "current_load", "currentPatients"),
    )


class StatusResponse(BaseModel):
    """Engine status."""
    status: str
    version: str
    storage: str
    optimizer_state: str
    passes_completed: int
    last_pass_status: Optional[str] = None
    last_pass_at: Optional[str] = None
    timestamp: str
