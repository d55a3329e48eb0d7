"""
Burnout Routes. Score incoming worker signals and read stored workers.

Endpoints:
    POST /ai/predictBurnout     Score a signal and upsert the worker
    GET  /ai/workers            Every stored worker
    GET  /ai/workers/{id}       One stored worker
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from workwell.api.dependencies import get_burnout_service, get_repository
from workwell.api.models import BurnoutSignal
from workwell.services.ingestion import BurnoutService
from workwell.services.repository import WorkerRepository
from workwell.services.worker_schema import WorkerRecord

router = APIRouter(prefix="/ai", tags=["Burnout"])
logger = logging.getLogger("workwell.routes.burnout")


@router.post("/predictBurnout", response_model=WorkerRecord)
async def predict_burnout(
    signal: BurnoutSignal,
    service: BurnoutService = Depends(get_burnout_service),
):
    """Compute a worker's burnout score and tier, then store the record.

    Invalid signals surface as 400 through the app's InvalidInput handler.
    """
    return await service.predict(signal.model_dump(exclude_none=True))


@router.get("/workers", response_model=List[WorkerRecord])
async def list_workers(repository: WorkerRepository = Depends(get_repository)):
    """All stored workers, ordered by id."""
    return await repository.load_all()


@router.get("/workers/{worker_id}", response_model=WorkerRecord)
async def get_worker(
    worker_id: int,
    repository: WorkerRepository = Depends(get_repository),
):
    """One stored worker."""
    worker = await repository.load_one(worker_id)
    if worker is None:
        raise HTTPException(status_code=404, detail=f"Unknown worker: {worker_id}")
    return worker
