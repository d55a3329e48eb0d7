"""
Health and status endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from workwell import __version__
from workwell.api.dependencies import get_repository, get_scheduler_optimizer
from workwell.api.models import StatusResponse
from workwell.services.optimizer import SchedulerOptimizer
from workwell.services.repository import WorkerRepository

router = APIRouter(tags=["System"])


@router.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "WorkWell",
        "version": __version__,
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health", response_model=StatusResponse)
async def health_check(
    repository: WorkerRepository = Depends(get_repository),
    optimizer: SchedulerOptimizer = Depends(get_scheduler_optimizer),
):
    """Storage backend in use and the optimizer's latest pass."""
    last = optimizer.last_report
    return StatusResponse(
        status="degraded" if repository.backend == "memory-fallback" else "healthy",
        version=__version__,
        storage=repository.backend,
        optimizer_state=optimizer.state.value,
        passes_completed=optimizer.passes_completed,
        last_pass_status=last.status.value if last else None,
        last_pass_at=last.started_at.isoformat() if last else None,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
