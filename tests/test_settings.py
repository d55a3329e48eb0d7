"""Environment-driven settings and daemon logging."""

import logging

from workwell.config.settings import Settings, settings
from workwell.scheduler.daemon import configure_logging
from workwell.services.redis import RedisService


def test_defaults(monkeypatch):
    for name in ("WORKWELL_STORAGE", "WORKWELL_REDIS_HOST", "WORKWELL_OPTIMIZE_INTERVAL"):
        monkeypatch.delenv(name, raising=False)
    s = Settings()

    assert s.storage == "redis"
    assert s.redis_url == "redis://localhost:6379/0"
    assert s.optimize_interval == 60.0


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("WORKWELL_STORAGE", "MEMORY")
    monkeypatch.setenv("WORKWELL_REDIS_PORT", "6380")
    monkeypatch.setenv("WORKWELL_LOAD_SAMPLE_SEED", "7")
    monkeypatch.setenv("WORKWELL_LOG_DIR", str(tmp_path))
    s = Settings()

    assert s.storage == "memory"
    assert s.redis_port == 6380
    assert s.load_sample_seed == 7
    assert s.log_dir == tmp_path


def test_empty_sample_range_falls_back(monkeypatch):
    monkeypatch.setenv("WORKWELL_LOAD_SAMPLE_MIN", "30")
    monkeypatch.setenv("WORKWELL_LOAD_SAMPLE_MAX", "30")
    s = Settings()

    assert (s.load_sample_min, s.load_sample_max) == (5, 55)


def test_configure_logging_writes_optimizer_log(tmp_path):
    log_file = configure_logging(tmp_path / "logs")
    handlers = logging.getLogger("workwell").handlers
    try:
        assert log_file == tmp_path / "logs" / "optimizer.log"
        assert log_file.exists()
    finally:
        for handler in list(handlers):
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_file):
                logging.getLogger("workwell").removeHandler(handler)
                handler.close()


def test_redis_socket_timeout_fits_two_round_trips(monkeypatch):
    monkeypatch.setenv("WORKWELL_REPOSITORY_TIMEOUT", "6")
    monkeypatch.delenv("WORKWELL_REDIS_SOCKET_TIMEOUT", raising=False)
    s = Settings()

    assert s.redis_socket_timeout == 2.0
    assert s.redis_socket_timeout * 2 < s.repository_timeout


def test_redis_socket_timeout_too_long_is_clamped(monkeypatch):
    monkeypatch.setenv("WORKWELL_REPOSITORY_TIMEOUT", "6")
    monkeypatch.setenv("WORKWELL_REDIS_SOCKET_TIMEOUT", "5")
    assert Settings().redis_socket_timeout == 2.0

    monkeypatch.setenv("WORKWELL_REDIS_SOCKET_TIMEOUT", "1.5")
    assert Settings().redis_socket_timeout == 1.5


def test_redis_service_uses_socket_timeout():
    service = RedisService()
    assert service.timeout == settings.redis_socket_timeout
    assert service.timeout * 2 < settings.repository_timeout
