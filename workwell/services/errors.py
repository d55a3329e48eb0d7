"""
Engine error taxonomy.

None of these are meant to reach the top of the process. Each one marks a
unit of work (a request, a write, a pass) that gets skipped while the
service keeps running.
"""

from typing import List, Optional


class WorkWellError(Exception):
    """Base for all engine errors."""


class InvalidInput(WorkWellError):
    """A burnout signal is missing required fields or carries bad values."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.missing = missing or []


class RepositoryUnavailable(WorkWellError):
    """The durable worker store could not be reached."""


class PerWorkerPersistFailure(WorkWellError):
    """Writing one worker's new load failed during an optimizer pass."""

    def __init__(self, worker_id: int, cause: BaseException):
        super().__init__(f"Persist failed for worker {worker_id}: {cause}")
        self.worker_id = worker_id
        self.cause = cause


class PassAbort(WorkWellError):
    """An optimizer pass could not start (fetch failed or fleet empty)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
