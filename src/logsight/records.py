"""Normalized log record and the closed sets it draws from."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any


class Level(str, Enum):
    """Severity level of a normalized record."""

    ERROR = 'ERROR'
    WARNING = 'WARNING'
    INFO = 'INFO'
    DEBUG = 'DEBUG'
    UNKNOWN = 'UNKNOWN'


class FormatVariant(str, Enum):
    """Recognized log grammars."""

    APACHE = 'apache'
    NGINX = 'nginx'
    SYSLOG = 'syslog'
    JSON = 'json'
    CUSTOM = 'custom'


class AnomalyType(str, Enum):
    """Classification attached to a scored record, checked in this order."""

    ERROR_SPIKE = 'error_spike'
    UNUSUAL_TIME = 'unusual_time'
    LARGE_RESPONSE = 'large_response'
    SUSPICIOUS_IP = 'suspicious_ip'
    POTENTIAL_SQL_INJECTION = 'potential_sql_injection'
    UNUSUAL_REQUEST = 'unusual_request'
    UNKNOWN = 'unknown'


def now() -> datetime:
    """Current time as an aware datetime in the host timezone."""
    return datetime.now().astimezone()


@dataclass(frozen=True)
class LogRecord:
    """One parsed log line.

    Only ``raw_log`` is guaranteed to equal the source input; every other
    field is best-effort. Records are never mutated after creation, use
    ``dataclasses.replace`` to derive a modified copy.
    """

    timestamp: datetime
    raw_log: str
    level: Level = Level.UNKNOWN
    source: str = 'unknown'
    message: str | None = None
    ip_address: str | None = None
    status_code: int | None = None
    response_size: int | None = None
    user_agent: str | None = None
    referrer: str | None = None
    method: str | None = None
    url: str | None = None
    protocol: str | None = None
    hostname: str | None = None
    service: str | None = None
    payload: dict[str, Any] | None = field(default=None, compare=False)

    def __post_init__(self):
        # Naive timestamps are taken as host-local so mixed batches stay comparable
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, 'timestamp', self.timestamp.astimezone())
        if not isinstance(self.level, Level):
            object.__setattr__(self, 'level', Level(self.level))

    @property
    def day_of_week(self) -> int:
        """Day of week with Sunday = 0 and Saturday = 6."""
        return (self.timestamp.weekday() + 1) % 7

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping of the record, enums reduced to their values."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['level'] = self.level.value
        return data
