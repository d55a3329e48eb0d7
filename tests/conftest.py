"""Shared fixtures and test doubles."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from workwell.services.repository import InMemoryWorkerRepository
from workwell.services.worker_schema import WorkerRecord


def make_worker(worker_id: int, score: float = 0.0, load: Optional[int] = None, **extra) -> WorkerRecord:
    return WorkerRecord(id=worker_id, burnout_score=score, current_load=load, **extra)


class SpyRepository(InMemoryWorkerRepository):
    """In-memory repository that records every call."""

    def __init__(self, records: List[WorkerRecord] = None):
        super().__init__(records)
        self.writes: List[Dict[str, Any]] = []
        self.loads = 0

    async def load_all(self):
        self.loads += 1
        return await super().load_all()

    async def upsert(self, worker_id, fields):
        self.writes.append({"id": worker_id, **fields})
        return await super().upsert(worker_id, fields)


class FlakyRepository(InMemoryWorkerRepository):
    """Upserts for the listed ids raise."""

    def __init__(self, records: List[WorkerRecord], failing_ids):
        super().__init__(records)
        self.failing_ids = set(failing_ids)

    async def upsert(self, worker_id, fields):
        if worker_id in self.failing_ids:
            raise ConnectionError(f"write to worker {worker_id} failed")
        return await super().upsert(worker_id, fields)


class BrokenRepository(InMemoryWorkerRepository):
    """load_all always fails."""

    def __init__(self):
        super().__init__()
        self.write_count = 0

    async def load_all(self):
        raise ConnectionError("store is down")

    async def upsert(self, worker_id, fields):
        self.write_count += 1
        return await super().upsert(worker_id, fields)


class GatedRepository(InMemoryWorkerRepository):
    """load_all blocks until ``gate`` is set; tracks concurrent readers."""

    def __init__(self, records: List[WorkerRecord]):
        super().__init__(records)
        self.gate = asyncio.Event()
        self.active = 0
        self.max_active = 0

    async def load_all(self):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await self.gate.wait()
            return await super().load_all()
        finally:
            self.active -= 1


@pytest.fixture
def worker_factory():
    return make_worker


@pytest.fixture
def spy_repository():
    return SpyRepository()
