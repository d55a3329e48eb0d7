#!/usr/bin/env python3
"""
WorkWell Optimizer Daemon.

Runs the workload optimizer outside the API process.

Modes:
- single     one pass, then exit
- scheduled  one pass immediately, then every WORKWELL_OPTIMIZE_INTERVAL seconds
- balance    print the advisory balance report as JSON
"""

import asyncio
import logging
from pathlib import Path

from workwell.config.settings import settings
from workwell.services.balancer import WorkloadBalancer
from workwell.services.optimizer import SchedulerOptimizer
from workwell.services.repository import close_worker_repository, get_worker_repository

logger = logging.getLogger("workwell.daemon")

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_dir: Path = None, level: int = logging.INFO) -> Path:
    """Console plus file logging. Returns the log file path."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)

    log_dir = log_dir or settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "optimizer.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logging.getLogger("workwell").addHandler(file_handler)
    return log_file


async def run_single_pass():
    """Run exactly one optimization pass."""
    logger.info("=" * 56)
    logger.info("  WORKWELL OPTIMIZER: SINGLE PASS")
    logger.info("=" * 56)

    repository = await get_worker_repository()
    logger.info("Worker storage: %s", repository.backend)

    optimizer = SchedulerOptimizer(repository)
    try:
        report = await optimizer.run_pass()
        logger.info(
            "Pass %s: excess %d, redistributed %d, dropped %d",
            report.status.value,
            report.total_excess,
            report.redistributed,
            report.dropped_excess,
        )
        return report
    finally:
        await close_worker_repository()


async def run_scheduled():
    """Run as a daemon until interrupted."""
    logger.info("=" * 56)
    logger.info("  WORKWELL OPTIMIZER: DAEMON MODE")
    logger.info("  Interval: %ss", settings.optimize_interval)
    logger.info("=" * 56)

    repository = await get_worker_repository()
    logger.info("Worker storage: %s", repository.backend)

    optimizer = SchedulerOptimizer(repository)
    try:
        # tick() drops a trigger while a pass is still in flight
        while True:
            try:
                await optimizer.tick()
            except Exception as e:
                logger.error("Optimization cycle failed: %s", e)
            await asyncio.sleep(optimizer.interval)
    finally:
        await close_worker_repository()


async def show_balance():
    """Print the current balance report."""
    repository = await get_worker_repository()
    try:
        report = await WorkloadBalancer(repository).balance()
    finally:
        await close_worker_repository()

    print(report.model_dump_json(by_alias=True, indent=2))
    return report
