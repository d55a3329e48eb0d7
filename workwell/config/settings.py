"""
WorkWell Settings.

Resolved from environment variables (WORKWELL_ prefix). Every value has a
default so the engine boots with nothing configured and falls back to the
in-memory store when Redis is not around.
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger("workwell.config")

LOG_DIR = Path.home() / ".workwell"


class Settings:
    """WorkWell configuration, resolved from the environment."""

    # Storage
    storage: str = "redis"  # "redis" or "memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origins: str = ""

    # Optimizer
    optimize_interval: float = 60.0  # seconds between scheduled passes
    repository_timeout: float = 5.0  # seconds per repository call
    # Per Redis round trip; an upsert makes two inside one repository call
    redis_socket_timeout: Optional[float] = None  # default: repository_timeout / 3

    # Synthetic load for workers with no stored currentLoad
    load_sample_min: int = 5
    load_sample_max: int = 55  # exclusive
    load_sample_seed: Optional[int] = None

    # Paths
    log_dir: Path = LOG_DIR

    def __init__(self):
        self.storage = os.getenv("WORKWELL_STORAGE", self.storage).lower()
        self.redis_host = os.getenv("WORKWELL_REDIS_HOST", self.redis_host)
        self.redis_port = int(os.getenv("WORKWELL_REDIS_PORT", str(self.redis_port)))
        self.redis_db = int(os.getenv("WORKWELL_REDIS_DB", str(self.redis_db)))
        self.api_host = os.getenv("WORKWELL_API_HOST", self.api_host)
        self.api_port = int(os.getenv("WORKWELL_API_PORT", str(self.api_port)))
        self.cors_origins = os.getenv("WORKWELL_CORS_ORIGINS", self.cors_origins)
        self.optimize_interval = float(
            os.getenv("WORKWELL_OPTIMIZE_INTERVAL", str(self.optimize_interval))
        )
        self.repository_timeout = float(
            os.getenv("WORKWELL_REPOSITORY_TIMEOUT", str(self.repository_timeout))
        )

        socket_timeout = os.getenv("WORKWELL_REDIS_SOCKET_TIMEOUT")
        self.redis_socket_timeout = float(socket_timeout) if socket_timeout else self.repository_timeout / 3
        if self.redis_socket_timeout * 2 >= self.repository_timeout:
            logger.warning(
                "Redis socket timeout %.2fs leaves no room for two round trips in %.2fs; using %.2fs",
                self.redis_socket_timeout,
                self.repository_timeout,
                self.repository_timeout / 3,
            )
            self.redis_socket_timeout = self.repository_timeout / 3

        self.load_sample_min = int(os.getenv("WORKWELL_LOAD_SAMPLE_MIN", str(self.load_sample_min)))
        self.load_sample_max = int(os.getenv("WORKWELL_LOAD_SAMPLE_MAX", str(self.load_sample_max)))

        seed = os.getenv("WORKWELL_LOAD_SAMPLE_SEED")
        if seed:
            self.load_sample_seed = int(seed)

        log_dir = os.getenv("WORKWELL_LOG_DIR")
        if log_dir:
            self.log_dir = Path(log_dir)

        if self.load_sample_max <= self.load_sample_min:
            logger.warning(
                "Load sample range [%d, %d) is empty; using defaults",
                self.load_sample_min,
                self.load_sample_max,
            )
            self.load_sample_min, self.load_sample_max = 5, 55

    @property
    def redis_url(self) -> str:
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


settings = Settings()
