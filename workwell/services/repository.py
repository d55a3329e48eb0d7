"""
Worker Repository.

Key-value persistence for WorkerRecords, keyed by worker id. Two
implementations share one contract:

    InMemoryWorkerRepository   process-local dict
    RedisWorkerRepository      Redis documents, degrading to an in-memory
                               dict once Redis stops answering

``upsert`` merges: fields not supplied keep their stored value, a missing
record is created with defaults, and ``last_updated`` is always refreshed.
Every record handed out is a copy.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from workwell.config.settings import settings
from workwell.services.errors import RepositoryUnavailable
from workwell.services.redis import RedisService, get_redis_service, close_redis_service
from workwell.services.worker_schema import WorkerRecord, normalize_fields

logger = logging.getLogger("workwell.repository")

T = TypeVar("T")

UNAVAILABLE_ERRORS = (
    RedisConnectionError,
    RedisTimeoutError,
    OSError,
    asyncio.TimeoutError,
)


def merge_record(
    existing: Optional[WorkerRecord],
    worker_id: int,
    fields: Dict[str, Any],
) -> WorkerRecord:
    """Apply a partial update on top of ``existing`` (or on defaults)."""
    data = existing.model_dump() if existing else {}
    data.update(normalize_fields(fields))
    data["id"] = worker_id
    data["last_updated"] = datetime.now(timezone.utc)
    return WorkerRecord.model_validate(data)


class WorkerRepository(ABC):
    """Load/save contract consumed by the optimizer and the balancer."""

    backend: str = "abstract"

    @abstractmethod
    async def load_all(self) -> List[WorkerRecord]:
        """Every stored worker, ordered by id."""

    @abstractmethod
    async def load_one(self, worker_id: int) -> Optional[WorkerRecord]:
        """One worker, or None when unknown."""

    @abstractmethod
    async def upsert(self, worker_id: int, fields: Dict[str, Any]) -> WorkerRecord:
        """Merge ``fields`` into the worker's record and return the result."""


class InMemoryWorkerRepository(WorkerRepository):
    """Process-local store. Lives as long as the instance does."""

    backend = "memory"

    def __init__(self, records: List[WorkerRecord] = None):
        self._records: Dict[int, WorkerRecord] = {}
        for record in records or []:
            self._records[record.id] = record.model_copy(deep=True)

    async def load_all(self) -> List[WorkerRecord]:
        return [
            self._records[worker_id].model_copy(deep=True)
            for worker_id in sorted(self._records)
        ]

    async def load_one(self, worker_id: int) -> Optional[WorkerRecord]:
        record = self._records.get(worker_id)
        return record.model_copy(deep=True) if record else None

    async def upsert(self, worker_id: int, fields: Dict[str, Any]) -> WorkerRecord:
        record = merge_record(self._records.get(worker_id), worker_id, fields)
        self._records[worker_id] = record
        return record.model_copy(deep=True)

    def put(self, record: WorkerRecord) -> None:
        """Store ``record`` as-is, replacing whatever is held for its id."""
        self._records[record.id] = record.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._records)


class RedisWorkerRepository(WorkerRepository):
    """Redis-backed store with an in-process fallback.

    The first connection failure flips the repository into degraded mode
    for the rest of the process: every later call is served by the
    fallback mapping with the same merge semantics. Every record read from
    or written to Redis is mirrored into the fallback, so degrading midway
    through a pass keeps the fleet as last seen.
    """

    def __init__(
        self,
        redis_service: RedisService,
        fallback: InMemoryWorkerRepository = None,
    ):
        self.redis_service = redis_service
        self.fallback = InMemoryWorkerRepository() if fallback is None else fallback
        self.degraded = False

    @property
    def backend(self) -> str:
        return "memory-fallback" if self.degraded else "redis"

    def mark_unavailable(self, reason: Any) -> None:
        """Switch to the in-memory fallback. Logged once."""
        if self.degraded:
            return
        self.degraded = True
        logger.warning(
            "Worker store unavailable (%s). Using in-memory fallback for the "
            "lifetime of this process.",
            reason,
        )

    async def _durable(self, op: Callable[[], Awaitable[T]]) -> T:
        if self.redis_service.redis is None:
            raise RepositoryUnavailable("Redis client not connected")
        try:
            return await op()
        except UNAVAILABLE_ERRORS as exc:
            raise RepositoryUnavailable(str(exc)) from exc

    @staticmethod
    def _decode(document: str) -> Optional[WorkerRecord]:
        try:
            return WorkerRecord.model_validate(json.loads(document))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Skipping unreadable worker document: %s", exc)
            return None

    async def load_all(self) -> List[WorkerRecord]:
        if not self.degraded:
            try:
                documents = await self._durable(self.redis_service.get_workers)
                records = [r for r in map(self._decode, documents) if r is not None]
                for record in records:
                    self.fallback.put(record)
                return sorted(records, key=lambda r: r.id)
            except RepositoryUnavailable as exc:
                self.mark_unavailable(exc)
        return await self.fallback.load_all()

    async def load_one(self, worker_id: int) -> Optional[WorkerRecord]:
        if not self.degraded:
            try:
                document = await self._durable(
                    lambda: self.redis_service.get_worker(worker_id)
                )
                record = self._decode(document) if document else None
                if record is not None:
                    self.fallback.put(record)
                return record
            except RepositoryUnavailable as exc:
                self.mark_unavailable(exc)
        return await self.fallback.load_one(worker_id)

    async def upsert(self, worker_id: int, fields: Dict[str, Any]) -> WorkerRecord:
        if not self.degraded:
            record = None
            try:
                document = await self._durable(
                    lambda: self.redis_service.get_worker(worker_id)
                )
                existing = self._decode(document) if document else None
                record = merge_record(existing, worker_id, fields)
                await self._durable(
                    lambda: self.redis_service.put_worker(
                        worker_id, record.model_dump_json(by_alias=True)
                    )
                )
                self.fallback.put(record)
                return record
            except RepositoryUnavailable as exc:
                self.mark_unavailable(exc)
                if record is not None:
                    # Read succeeded, write did not: keep the merged record
                    self.fallback.put(record)
                    return record
        return await self.fallback.upsert(worker_id, fields)


# Singleton
_repository: Optional[WorkerRepository] = None


async def create_worker_repository(storage: str = None) -> WorkerRepository:
    """Build the repository named by ``storage`` (default: settings)."""
    storage = (storage or settings.storage).lower()
    if storage == "memory":
        logger.info("Worker store: in-memory")
        return InMemoryWorkerRepository()

    redis_service = await get_redis_service()
    repository = RedisWorkerRepository(redis_service)
    if await redis_service.ping():
        logger.info("Worker store: redis at %s", redis_service.url)
    else:
        repository.mark_unavailable(f"no answer from {redis_service.url}")
    return repository


async def get_worker_repository() -> WorkerRepository:
    """Get or create the repository singleton."""
    global _repository
    if _repository is None:
        _repository = await create_worker_repository()
    return _repository


async def close_worker_repository():
    """Drop the repository singleton and its Redis connection."""
    global _repository
    _repository = None
    await close_redis_service()
