"""Pytest configuration and shared fixtures for logsight tests."""

import logging
from datetime import datetime, timezone

import pytest

from logsight.records import Level, LogRecord


APACHE_LINES = [
    '127.0.0.1 - - [10/Oct/2023:13:55:36 -0700] "GET /index.html HTTP/1.1" 200 1024',
    '10.0.0.2 - - [10/Oct/2023:13:55:40 -0700] "POST /api/login HTTP/1.1" 401 512',
    '10.0.0.3 - - [10/Oct/2023:13:56:02 -0700] "GET /missing HTTP/1.1" 404 128',
    '10.0.0.2 - - [10/Oct/2023:13:57:11 -0700] "GET /api/orders HTTP/1.1" 500 64',
]

SYSLOG_LINES = [
    'Oct 11 22:14:15 web01 sshd[1234]: Accepted publickey for deploy',
    'Oct 11 22:14:20 web01 kernel: ERROR disk failure on sda',
    'Oct 11 22:15:01 web01 cron[99]: WARNING job took too long',
]

JSON_LINES = [
    '{"timestamp": "2023-10-10T12:00:00Z", "level": "info", "message": "started", "service": "api"}',
    '{"timestamp": 1696939200, "level": "error", "msg": "db timeout", "ip": "10.1.1.1", "status": 503}',
    '{"level": "warn", "message": "slow request"}',
]


def make_record(
    timestamp: datetime | None = None,
    level: Level = Level.INFO,
    source: str = 'apache',
    message: str | None = 'GET / 200',
    ip_address: str | None = '10.0.0.1',
    status_code: int | None = 200,
    response_size: int | None = 1024,
    method: str | None = 'GET',
    url: str | None = '/',
    raw_log: str = 'raw',
) -> LogRecord:
    """Helper to create a LogRecord for testing."""
    return LogRecord(
        timestamp=timestamp or datetime(2023, 10, 10, 12, 0, 0, tzinfo=timezone.utc),
        raw_log=raw_log,
        level=level,
        source=source,
        message=message,
        ip_address=ip_address,
        status_code=status_code,
        response_size=response_size,
        method=method,
        url=url,
    )


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep LOGSIGHT_* settings from the developer's shell out of tests."""
    for key in (
        'LOGSIGHT_LOG_LEVEL',
        'LOGSIGHT_CACHE_TTL_SECONDS',
        'LOGSIGHT_CACHE_ENABLED',
        'LOGSIGHT_CONTAMINATION',
        'LOGSIGHT_RANDOM_STATE',
        'LOGSIGHT_N_ESTIMATORS',
        'LOGSIGHT_MAX_DEPTH',
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def restore_root_log_level():
    """setup_logging() changes the root level; put it back after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def apache_lines() -> list[str]:
    return list(APACHE_LINES)


@pytest.fixture
def syslog_lines() -> list[str]:
    return list(SYSLOG_LINES)


@pytest.fixture
def json_lines() -> list[str]:
    return list(JSON_LINES)
