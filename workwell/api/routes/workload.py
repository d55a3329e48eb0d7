"""
Workload Routes. Dashboard balance report and on-demand optimization.

Endpoints:
    GET  /ai/balanceWorkload    Advisory fleet report (never writes)
    GET  /ai/workload/{id}      One worker's workload view
    POST /ai/optimize           Run an optimizer pass now
"""

from fastapi import APIRouter, Depends, HTTPException

from workwell.api.dependencies import get_scheduler_optimizer, get_workload_balancer
from workwell.services.balancer import WorkloadBalancer
from workwell.services.optimizer import SchedulerOptimizer
from workwell.services.worker_schema import BalanceReport, PassReport, WorkerWorkload

router = APIRouter(prefix="/ai", tags=["Workload"])


@router.get("/balanceWorkload", response_model=BalanceReport)
async def balance_workload(balancer: WorkloadBalancer = Depends(get_workload_balancer)):
    """Current distribution with overload flags and suggested transfers."""
    return await balancer.balance()


@router.get("/workload/{worker_id}", response_model=WorkerWorkload)
async def worker_workload(
    worker_id: int,
    balancer: WorkloadBalancer = Depends(get_workload_balancer),
):
    """Load, overload flag and max recommended load for one worker."""
    workload = await balancer.worker_workload(worker_id)
    if workload is None:
        raise HTTPException(status_code=404, detail=f"Unknown worker: {worker_id}")
    return workload


@router.post("/optimize", response_model=PassReport)
async def optimize_workload(optimizer: SchedulerOptimizer = Depends(get_scheduler_optimizer)):
    """Run one optimization pass, queued behind any pass in flight."""
    return await optimizer.run_pass()
