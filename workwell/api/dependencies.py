"""
WorkWell API Dependencies. Shared dependency injection.
"""

from workwell.services.balancer import WorkloadBalancer, get_balancer
from workwell.services.ingestion import BurnoutService
from workwell.services.optimizer import SchedulerOptimizer, get_optimizer
from workwell.services.repository import WorkerRepository, get_worker_repository


async def get_repository() -> WorkerRepository:
    """Shared worker repository."""
    return await get_worker_repository()


async def get_workload_balancer() -> WorkloadBalancer:
    """Read-side balancer."""
    return await get_balancer()


async def get_scheduler_optimizer() -> SchedulerOptimizer:
    """The single optimizer instance."""
    return await get_optimizer()


async def get_burnout_service() -> BurnoutService:
    """Burnout scoring bound to the shared repository."""
    return BurnoutService(await get_worker_repository())
