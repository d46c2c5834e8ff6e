"""Timestamp extraction helpers shared by the format parsers.

Every helper returns ``None`` on failure; callers fall back to the current
time so a bad timestamp never costs a record.
"""

import re
from datetime import datetime, timezone


ACCESS_LOG_FORMAT = '%d/%b/%Y:%H:%M:%S %z'

# Ordered patterns for free-form text, paired with their strptime layout
TEXT_TIMESTAMP_PATTERNS = [
    (re.compile(r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}'), '%Y-%m-%d %H:%M:%S'),
    (re.compile(r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}'), '%Y-%m-%dT%H:%M:%S'),
    (re.compile(r'\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2}'), '%d/%b/%Y:%H:%M:%S'),
    (re.compile(r'\w{3} \d{1,2} \d{2}:\d{2}:\d{2}'), None),  # syslog style, no year
]

STRING_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M:%S.%f',
    '%d/%b/%Y:%H:%M:%S %z',
    '%a %b %d %H:%M:%S %Y',
]


def parse_access_timestamp(value: str) -> datetime | None:
    """Parse ``10/Oct/2023:13:55:36 -0700``."""
    try:
        return datetime.strptime(value.strip('[]'), ACCESS_LOG_FORMAT)
    except ValueError:
        return None


def parse_syslog_timestamp(value: str, year: int | None = None) -> datetime | None:
    """Parse ``Oct  5 13:55:36``; the grammar has no year, so the current one is assumed."""
    if year is None:
        year = datetime.now().year
    try:
        return datetime.strptime(f'{year} {value}', '%Y %b %d %H:%M:%S')
    except ValueError:
        return None


def parse_iso_timestamp(value: str) -> datetime | None:
    """Parse ISO-8601 and a few common layouts found in structured logs."""
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        pass
    for fmt in STRING_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_unix_timestamp(value: int | float) -> datetime | None:
    """Interpret a number as Unix seconds."""
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc).astimezone()
    except (OverflowError, OSError, ValueError):
        return None


def find_timestamp_in_text(text: str) -> datetime | None:
    """Scan a free-form line against the ordered timestamp patterns."""
    for pattern, fmt in TEXT_TIMESTAMP_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        if fmt is None:
            parsed = parse_syslog_timestamp(match.group(0))
        else:
            try:
                parsed = datetime.strptime(match.group(0), fmt)
            except ValueError:
                parsed = None
        if parsed is not None:
            return parsed
    return None
