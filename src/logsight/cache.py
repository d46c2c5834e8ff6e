"""Time-bounded result cache for analysis reports."""

import logging
import time
from typing import Any, Callable

from logsight.records import LogRecord


logger = logging.getLogger(__name__)


def fingerprint(records: list[LogRecord]) -> str:
    """Cheap batch identity: count plus first and last timestamp in input order.

    Two different batches with the same size and boundary timestamps share a
    fingerprint. That collision is accepted; this is not a content hash.
    """
    if not records:
        return '0--'
    return f'{len(records)}-{records[0].timestamp.isoformat()}-{records[-1].timestamp.isoformat()}'


class ResultCache:
    """Mapping of key -> (value, expiry) evicted lazily on read.

    Plain dict assignment is the insert, so concurrent writers for the same key
    simply race to store equivalent values.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if self.clock() >= expiry:
            logger.debug(f'Cache entry {key} expired')
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any):
        """Store ``value`` and drop every entry that has already expired."""
        now = self.clock()
        expired = [k for k, (_, expiry) in self._entries.items() if now >= expiry]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f'Evicted {len(expired)} expired cache entries')
        self._entries[key] = (value, now + self.ttl_seconds)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class NullCache:
    """Cache that stores nothing."""

    ttl_seconds = 0.0

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any):
        pass

    def clear(self):
        pass

    def __len__(self) -> int:
        return 0
