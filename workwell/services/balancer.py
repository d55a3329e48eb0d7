"""
Workload Balancer.

Point-in-time distribution report for dashboards. Reads the fleet, flags
overloaded workers, and suggests peer transfers and load targets using the
dashboard policy. Purely advisory: the balancer never writes to the
repository and never touches the records it is given.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from workwell.services.policy import (
    AVAILABLE_SCORE,
    dashboard_ceiling,
    dashboard_excess,
    dashboard_max_load,
    is_dashboard_overloaded,
)
from workwell.services.repository import WorkerRepository, get_worker_repository
from workwell.services.sampling import LoadSampler, default_sampler
from workwell.services.worker_schema import (
    BalanceReport,
    BalanceSummary,
    SuggestedTransfer,
    WorkerBalance,
    WorkerRecord,
    WorkerStatus,
    WorkerWorkload,
)

logger = logging.getLogger("workwell.balancer")

MAX_RECIPIENTS = 3
AT_RISK_SCORE = 50.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def split_excess(
    excess: int,
    recipients: Sequence[Tuple[WorkerRecord, int]],
) -> List[SuggestedTransfer]:
    """Spread ``excess`` over ``recipients`` in order, ceiling-divided.

    Each share is capped by what is still left, so the counts add up to
    ``excess`` and trailing recipients may get nothing.
    """
    if excess <= 0 or not recipients:
        return []
    share = math.ceil(excess / len(recipients))
    remaining = excess
    transfers = []
    for worker, _ in recipients:
        count = min(share, remaining)
        if count <= 0:
            break
        transfers.append(SuggestedTransfer(to_id=worker.id, to_name=worker.name, count=count))
        remaining -= count
    return transfers


class WorkloadBalancer:
    """Read-side workload report over the worker repository."""

    def __init__(self, repository: WorkerRepository, sampler: LoadSampler = None):
        self.repository = repository
        self.sampler = sampler or default_sampler()

    def _effective_load(self, worker: WorkerRecord) -> int:
        if worker.current_load is not None:
            return worker.current_load
        return self.sampler.sample(worker.id)

    async def balance(self) -> BalanceReport:
        """Report on the whole fleet as currently stored."""
        workers = await self.repository.load_all()
        if not workers:
            logger.info("No workers stored; balance report is empty")
        return self.build_report(workers)

    def build_report(self, workers: Sequence[WorkerRecord]) -> BalanceReport:
        """Build the report for an explicit set of workers."""
        if not workers:
            return BalanceReport(
                summary=BalanceSummary(
                    total_workers=0,
                    overloaded_count=0,
                    average_load=0.0,
                    total_load=0,
                    redistribution_needed=False,
                ),
            )

        loads = [(worker, self._effective_load(worker)) for worker in workers]
        total_load = sum(load for _, load in loads)
        average_load = total_load / len(loads)

        flagged = {
            worker.id: is_dashboard_overloaded(worker.burnout_score, load)
            for worker, load in loads
        }
        overloaded_count = sum(1 for is_flagged in flagged.values() if is_flagged)
        available = [
            (worker, load)
            for worker, load in loads
            if not flagged[worker.id] and worker.burnout_score < AVAILABLE_SCORE
        ]
        recipients = available[:MAX_RECIPIENTS]

        details: List[WorkerBalance] = []
        for worker, load in loads:
            overloaded = flagged[worker.id]
            transfers = split_excess(dashboard_excess(load), recipients) if overloaded else []
            target = dashboard_ceiling(worker.burnout_score, load, average_load)

            if overloaded:
                status = WorkerStatus.OVERLOADED
            elif worker.burnout_score > AT_RISK_SCORE:
                status = WorkerStatus.AT_RISK
            else:
                status = WorkerStatus.NORMAL

            details.append(WorkerBalance(
                id=worker.id,
                name=worker.name,
                department=worker.department,
                burnout_score=worker.burnout_score,
                tier=worker.tier,
                current_load=load,
                recommended_load=_round_half_up(target),
                is_overloaded=overloaded,
                status=status,
                suggested_transfers=transfers,
            ))

        details.sort(key=lambda d: d.burnout_score, reverse=True)

        return BalanceReport(
            summary=BalanceSummary(
                total_workers=len(details),
                overloaded_count=overloaded_count,
                average_load=round(average_load, 2),
                total_load=total_load,
                redistribution_needed=overloaded_count > 0,
            ),
            workers=details,
        )

    async def worker_workload(self, worker_id: int) -> Optional[WorkerWorkload]:
        """Workload view for one worker, or None when unknown."""
        worker = await self.repository.load_one(worker_id)
        if worker is None:
            return None
        load = self._effective_load(worker)
        return WorkerWorkload(
            id=worker.id,
            name=worker.name,
            department=worker.department,
            burnout_score=worker.burnout_score,
            tier=worker.tier,
            current_load=load,
            is_overloaded=is_dashboard_overloaded(worker.burnout_score, load),
            recommended_max_load=dashboard_max_load(worker.burnout_score),
        )


# Singleton
_balancer: Optional[WorkloadBalancer] = None


async def get_balancer() -> WorkloadBalancer:
    """Get or create the balancer singleton over the shared repository."""
    global _balancer
    if _balancer is None:
        _balancer = WorkloadBalancer(await get_worker_repository())
    return _balancer


def reset_balancer():
    """Forget the singleton so the next call rebinds to a fresh repository."""
    global _balancer
    _balancer = None
