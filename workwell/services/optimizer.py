"""
Workload Optimizer.

The only component that rewrites stored loads. Each pass:

    1. snapshot the fleet (missing loads are sampled once)
    2. split it against each worker's tier band limit:
         overworked   load > limit
         underworked  load < limit and burnout < 50, least burned out first
    3. hand the summed excess to underworked workers, capped by each one's
       spare capacity, in equal ceiling-divided shares
    4. cut every overworked worker down to its limit
    5. write the changed workers back and log a before/after table

Excess nobody can absorb is dropped, not queued, so a pass can lower the
fleet's total load. The report carries that amount as ``dropped_excess``.

Runs once at startup, then on a fixed interval, and on demand. A lock keeps
at most one pass in flight: scheduled ticks that find a pass running are
dropped, manual triggers wait their turn.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence

from workwell.config.settings import settings
from workwell.services.errors import PassAbort, PerWorkerPersistFailure
from workwell.services.policy import AVAILABLE_SCORE, tier_band_limit, tier_banded_ceiling
from workwell.services.repository import WorkerRepository, get_worker_repository
from workwell.services.sampling import LoadSampler, default_sampler
from workwell.services.worker_schema import (
    LoadReduction,
    LoadTransfer,
    PassReport,
    PassStatus,
    WorkerLoadSnapshot,
    WorkerRecord,
)

logger = logging.getLogger("workwell.optimizer")


class OptimizerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class LoadSlot:
    """Working copy of one worker's load during a pass."""
    worker: WorkerRecord
    load: int
    limit: int
    sampled: bool = False

    @property
    def score(self) -> float:
        return self.worker.burnout_score

    def snapshot(self, load: int = None) -> WorkerLoadSnapshot:
        load = self.load if load is None else load
        return WorkerLoadSnapshot(
            id=self.worker.id,
            name=self.worker.name,
            current_load=load,
            ceiling=tier_banded_ceiling(self.score, load),
            burnout_score=self.score,
        )


@dataclass
class PlannedWrite:
    worker_id: int
    current_load: int
    recommended_load: int

    def fields(self) -> Dict[str, int]:
        return {
            "current_load": self.current_load,
            "recommended_load": self.recommended_load,
        }


@dataclass
class PassPlan:
    """Everything a pass decided, before anything is written."""
    status: PassStatus
    overworked_count: int = 0
    underworked_count: int = 0
    total_excess: int = 0
    redistributed: int = 0
    transfers: List[LoadTransfer] = field(default_factory=list)
    reductions: List[LoadReduction] = field(default_factory=list)
    writes: List[PlannedWrite] = field(default_factory=list)
    before: List[WorkerLoadSnapshot] = field(default_factory=list)
    after: List[WorkerLoadSnapshot] = field(default_factory=list)

    @property
    def dropped_excess(self) -> int:
        return self.total_excess - self.redistributed


def plan_pass(workers: Sequence[WorkerRecord], sampler: LoadSampler) -> PassPlan:
    """Compute one greedy pass over an in-memory snapshot. No I/O."""
    slots: List[LoadSlot] = []
    for worker in workers:
        sampled = worker.current_load is None
        load = sampler.sample(worker.id) if sampled else worker.current_load
        slots.append(LoadSlot(
            worker=worker,
            load=load,
            limit=tier_band_limit(worker.burnout_score),
            sampled=sampled,
        ))

    before = [slot.snapshot() for slot in slots]

    overworked = [slot for slot in slots if slot.load > slot.limit]
    underworked = sorted(
        (slot for slot in slots if slot.load < slot.limit and slot.score < AVAILABLE_SCORE),
        key=lambda slot: slot.score,
    )

    if not overworked:
        return PassPlan(
            status=PassStatus.BALANCED,
            underworked_count=len(underworked),
            before=before,
            after=list(before),
        )

    plan = PassPlan(
        status=PassStatus.REDISTRIBUTED,
        overworked_count=len(overworked),
        underworked_count=len(underworked),
        total_excess=sum(slot.load - slot.limit for slot in overworked),
        before=before,
    )

    # Redistribution
    remaining = plan.total_excess
    if underworked and remaining > 0:
        share = math.ceil(plan.total_excess / len(underworked))
        for slot in underworked:
            if remaining <= 0:
                break
            capacity = slot.limit - slot.load
            transfer = min(share, capacity, remaining)
            if transfer <= 0:
                continue
            new_load = slot.load + transfer
            plan.transfers.append(LoadTransfer(
                to_id=slot.worker.id,
                to_name=slot.worker.name,
                count=transfer,
                before=slot.load,
                after=new_load,
            ))
            plan.writes.append(PlannedWrite(
                worker_id=slot.worker.id,
                current_load=new_load,
                recommended_load=tier_banded_ceiling(slot.score, new_load),
            ))
            slot.load = new_load
            remaining -= transfer
    plan.redistributed = plan.total_excess - remaining

    # Reduction, independent of how much was absorbed above
    for slot in overworked:
        plan.reductions.append(LoadReduction(
            worker_id=slot.worker.id,
            name=slot.worker.name,
            before=slot.load,
            after=slot.limit,
        ))
        plan.writes.append(PlannedWrite(
            worker_id=slot.worker.id,
            current_load=slot.limit,
            recommended_load=tier_banded_ceiling(slot.score, slot.limit),
        ))
        slot.load = slot.limit

    plan.after = [slot.snapshot() for slot in slots]
    return plan


def log_pass_report(report: PassReport) -> None:
    """Before/after table for the optimizer log."""
    rule = "─" * 80
    logger.info("BEFORE redistribution:")
    logger.info(rule)
    for row in report.before:
        logger.info(
            "  %-20s | Current: %3d | Ceiling: %3d | Burnout: %6.2f",
            row.name, row.current_load, row.ceiling, row.burnout_score,
        )
    logger.info("  Total load: %d", report.total_load_before)
    logger.info(rule)

    for transfer in report.transfers:
        logger.info(
            "  + %d to %s (%d -> %d)",
            transfer.count, transfer.to_name, transfer.before, transfer.after,
        )
    for reduction in report.reductions:
        logger.info(
            "  - %s reduced (%d -> %d)",
            reduction.name, reduction.before, reduction.after,
        )

    logger.info("AFTER redistribution:")
    logger.info(rule)
    for row in report.after:
        logger.info(
            "  %-20s | Current: %3d | Ceiling: %3d | Burnout: %6.2f",
            row.name, row.current_load, row.ceiling, row.burnout_score,
        )
    logger.info("  Total load: %d", report.total_load_after)
    logger.info(rule)


class SchedulerOptimizer:
    """Periodic, single-flight workload optimizer."""

    def __init__(
        self,
        repository: WorkerRepository,
        sampler: LoadSampler = None,
        interval: float = None,
        timeout: float = None,
    ):
        self.repository = repository
        self.sampler = sampler or default_sampler()
        self.interval = settings.optimize_interval if interval is None else interval
        self.timeout = settings.repository_timeout if timeout is None else timeout

        self._lock = asyncio.Lock()
        self._state = OptimizerState.IDLE
        self._running = False
        self._task: Optional[asyncio.Task] = None

        self.last_report: Optional[PassReport] = None
        self.passes_completed = 0
        self.ticks_dropped = 0

    @property
    def state(self) -> OptimizerState:
        return self._state

    # ─── Pass execution ───

    async def run_pass(self) -> PassReport:
        """Run one pass now, waiting for any pass already in flight."""
        async with self._lock:
            self._state = OptimizerState.RUNNING
            try:
                return await self._execute_pass()
            finally:
                self._state = OptimizerState.IDLE

    async def tick(self) -> Optional[PassReport]:
        """Scheduled trigger. Dropped when a pass is already running."""
        if self._lock.locked():
            self.ticks_dropped += 1
            logger.info("Optimization pass still running; skipping this tick")
            return None
        return await self.run_pass()

    async def _snapshot(self) -> List[WorkerRecord]:
        try:
            workers = await asyncio.wait_for(self.repository.load_all(), self.timeout)
        except asyncio.TimeoutError as exc:
            raise PassAbort(f"worker fetch timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise PassAbort(f"worker fetch failed: {exc}") from exc
        if not workers:
            raise PassAbort("no workers found")
        return workers

    async def _write(self, write: PlannedWrite) -> None:
        try:
            await asyncio.wait_for(
                self.repository.upsert(write.worker_id, write.fields()),
                self.timeout,
            )
        except Exception as exc:
            raise PerWorkerPersistFailure(write.worker_id, exc) from exc

    async def _persist(self, writes: List[PlannedWrite]) -> List[int]:
        """Issue every write concurrently. Returns ids whose write failed."""
        results = await asyncio.gather(
            *(self._write(write) for write in writes),
            return_exceptions=True,
        )
        failed = []
        for result in results:
            if isinstance(result, PerWorkerPersistFailure):
                logger.error("%s", result)
                failed.append(result.worker_id)
            elif isinstance(result, BaseException):
                raise result
        return failed

    async def _execute_pass(self) -> PassReport:
        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        logger.info("Workload optimization pass starting")

        try:
            workers = await self._snapshot()
        except PassAbort as e:
            logger.warning("Optimization pass skipped: %s", e.reason)
            report = PassReport(
                status=PassStatus.ABORTED,
                started_at=started_at,
                reason=e.reason,
                duration_seconds=round(time.monotonic() - start, 3),
            )
            self.last_report = report
            return report

        plan = plan_pass(workers, self.sampler)
        logger.info(
            "Overworked: %d | Underworked: %d | Excess: %d",
            plan.overworked_count,
            plan.underworked_count,
            plan.total_excess,
        )

        failed = await self._persist(plan.writes) if plan.writes else []

        # Failed writes keep their old load in the reported outcome
        before_by_id = {row.id: row for row in plan.before}
        after = [before_by_id[row.id] if row.id in failed else row for row in plan.after]

        report = PassReport(
            status=plan.status,
            started_at=started_at,
            overworked_count=plan.overworked_count,
            underworked_count=plan.underworked_count,
            total_excess=plan.total_excess,
            redistributed=plan.redistributed,
            dropped_excess=plan.dropped_excess,
            transfers=plan.transfers,
            reductions=plan.reductions,
            failed_worker_ids=failed,
            before=plan.before,
            after=after,
            total_load_before=sum(row.current_load for row in plan.before),
            total_load_after=sum(row.current_load for row in after),
            duration_seconds=round(time.monotonic() - start, 3),
        )

        if plan.status == PassStatus.BALANCED:
            logger.info("All workers within their ceilings. No redistribution needed.")
        else:
            log_pass_report(report)
            if report.dropped_excess:
                logger.warning(
                    "%d units of excess load had no recipient and were dropped",
                    report.dropped_excess,
                )
            logger.info(
                "Optimization complete in %.2fs (%d writes, %d failed)",
                report.duration_seconds,
                len(plan.writes),
                len(failed),
            )

        self.passes_completed += 1
        self.last_report = report
        return report

    # ─── Scheduling ───

    async def _loop(self):
        """Background loop: one pass immediately, then every interval."""
        logger.info("Workload optimizer started (interval: %ss)", self.interval)
        while self._running:
            try:
                await self.tick()
            except Exception as e:
                logger.error("Optimization cycle failed: %s", e)
            await asyncio.sleep(self.interval)

    def start(self):
        """Start the background optimizer loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())

    def stop(self):
        """Stop the background optimizer loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
        logger.info("Workload optimizer stopped")


# Singleton
_optimizer: Optional[SchedulerOptimizer] = None


async def get_optimizer() -> SchedulerOptimizer:
    """Get or create the optimizer singleton over the shared repository."""
    global _optimizer
    if _optimizer is None:
        _optimizer = SchedulerOptimizer(await get_worker_repository())
    return _optimizer


def reset_optimizer():
    """Stop and forget the singleton."""
    global _optimizer
    if _optimizer:
        _optimizer.stop()
        _optimizer = None
