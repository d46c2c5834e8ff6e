"""Numeric feature vectors for the isolation forest."""

import math
import re
from collections import Counter
from dataclasses import dataclass

import numpy as np

from logsight.records import Level, LogRecord


FEATURE_NAMES = (
    'hour',
    'day_of_week',
    'day_of_month',
    'is_weekend',
    'level_numeric',
    'status_code',
    'is_error_status',
    'is_server_error',
    'response_size',
    'response_size_log',
    'ip_count',
    'message_length',
    'message_word_count',
    'has_error_keywords',
    'has_sql_keywords',
    'has_http_keywords',
    'source_encoded',
    'url_length',
    'has_query_params',
    'has_special_chars',
    'method_encoded',
)

LEVEL_RANK = {Level.ERROR: 4, Level.WARNING: 3, Level.INFO: 2, Level.DEBUG: 1, Level.UNKNOWN: 0}
METHOD_RANK = {'GET': 1, 'POST': 2, 'PUT': 3, 'DELETE': 4, 'PATCH': 5}

ERROR_KEYWORDS = ('error', 'exception', 'fail', 'timeout', 'denied')
SQL_KEYWORDS = ('select', 'insert', 'update', 'delete', 'sql')
HTTP_KEYWORDS = ('http', 'request', 'response', 'api')

SPECIAL_CHARS_PATTERN = re.compile(r'[<>"\']')

SOURCE_HASH_BUCKETS = 1000


def hash_source(source: str) -> int:
    """Bounded 0..999 hash of a source tag.

    Java-style ``h * 31 + c`` over UTF-16 code units with 32-bit signed wrap,
    so the buckets are stable across runs and platforms.
    """
    h = 0
    data = source.encode('utf-16-le')
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h) % SOURCE_HASH_BUCKETS


def _has_any(text: str, keywords: tuple[str, ...]) -> int:
    return 1 if any(k in text for k in keywords) else 0


def record_features(record: LogRecord, ip_count: int) -> list[float]:
    """Feature vector of one record in ``FEATURE_NAMES`` order.

    Missing status defaults to 200, missing method to GET and missing size to 0.

    ``is_weekend`` flags day-of-week 5 and 6 (Friday and Saturday with
    Sunday = 0). Models trained by earlier deployments use this encoding, so
    it is kept even though the report's notion of a weekend differs.
    """
    timestamp = record.timestamp
    day_of_week = record.day_of_week
    status_code = record.status_code or 200
    response_size = record.response_size or 0
    message = record.message or ''
    lowered = message.lower()
    url = record.url or ''

    return [
        timestamp.hour,
        day_of_week,
        timestamp.day,
        1 if day_of_week >= 5 else 0,
        LEVEL_RANK.get(record.level, 0),
        status_code,
        1 if status_code >= 400 else 0,
        1 if status_code >= 500 else 0,
        response_size,
        math.log1p(response_size),
        ip_count,
        len(message),
        len(message.split(' ')),
        _has_any(lowered, ERROR_KEYWORDS),
        _has_any(lowered, SQL_KEYWORDS),
        _has_any(lowered, HTTP_KEYWORDS),
        hash_source(record.source or 'unknown'),
        len(url),
        1 if '?' in url else 0,
        1 if SPECIAL_CHARS_PATTERN.search(url) else 0,
        METHOD_RANK.get(record.method or 'GET', 0),
    ]


def extract_features(records: list[LogRecord]) -> np.ndarray:
    """Feature matrix of shape ``(len(records), 21)``, one row per record.

    ``ip_count`` is the number of records in the batch sharing the record's IP;
    records without an IP share one bucket.
    """
    ip_counts = Counter(r.ip_address for r in records)
    rows = [record_features(r, ip_counts[r.ip_address]) for r in records]
    return np.array(rows, dtype=float).reshape(len(rows), len(FEATURE_NAMES))


@dataclass(frozen=True, eq=False)
class Scaler:
    """Per-dimension standardization fitted on one batch."""

    mean: np.ndarray
    std: np.ndarray

    @classmethod
    def fit(cls, X: np.ndarray) -> 'Scaler':
        """Population mean/std per column; a zero std is floored to 1."""
        X = np.asarray(X, dtype=float)
        std = X.std(axis=0)
        std[std == 0] = 1.0
        return cls(mean=X.mean(axis=0), std=std)

    def transform(self, X: np.ndarray) -> np.ndarray:
        return (np.asarray(X, dtype=float) - self.mean) / self.std
