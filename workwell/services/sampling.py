"""
Synthetic load sampling for workers that have no stored currentLoad.

The balancer uses a sample only for the duration of one report. The
optimizer uses it as the starting load of a pass, which becomes real once
that worker is written back.
"""

import random
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from workwell.config.settings import settings


class LoadSampler(ABC):
    """Strategy interface: produce a load for a worker with none stored."""

    @abstractmethod
    def sample(self, worker_id: int) -> int:
        """A load for ``worker_id``."""


class RandomLoadSampler(LoadSampler):
    """Uniform integer in ``[low, high)``, optionally seeded."""

    def __init__(self, low: int = None, high: int = None, seed: Optional[int] = None):
        self.low = settings.load_sample_min if low is None else low
        self.high = settings.load_sample_max if high is None else high
        if self.high <= self.low:
            raise ValueError(f"Empty sample range [{self.low}, {self.high})")
        self._rng = random.Random(seed)

    def sample(self, worker_id: int) -> int:
        return self._rng.randrange(self.low, self.high)


class FixedLoadSampler(LoadSampler):
    """Deterministic loads: per-worker overrides, then a default."""

    def __init__(self, default: int = 0, per_worker: Dict[int, int] = None):
        self.default = default
        self.per_worker = dict(per_worker or {})

    def sample(self, worker_id: int) -> int:
        return self.per_worker.get(worker_id, self.default)


class SequenceLoadSampler(LoadSampler):
    """Hands out values in order, repeating the last one when exhausted."""

    def __init__(self, values: Iterable[int]):
        self._values = list(values)
        if not self._values:
            raise ValueError("SequenceLoadSampler needs at least one value")
        self._index = 0

    def sample(self, worker_id: int) -> int:
        value = self._values[min(self._index, len(self._values) - 1)]
        self._index += 1
        return value


def default_sampler() -> LoadSampler:
    """Sampler configured from settings."""
    return RandomLoadSampler(seed=settings.load_sample_seed)
