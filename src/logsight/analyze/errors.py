"""Error record analysis."""

import re

from logsight.analyze.helpers import count_by, rate
from logsight.models import ErrorAnalysis, ErrorPattern
from logsight.records import Level, LogRecord


# Signature library matched against lower-cased error messages
ERROR_PATTERNS = [
    (re.compile(r'(timeout|timed out)', re.IGNORECASE), 'Timeout'),
    (re.compile(r'(connection refused|connection failed)', re.IGNORECASE), 'Connection Error'),
    (re.compile(r'(permission denied|access denied)', re.IGNORECASE), 'Permission Denied'),
    (re.compile(r'(file not found|404)', re.IGNORECASE), 'File Not Found'),
    (re.compile(r'(internal server error|500)', re.IGNORECASE), 'Internal Server Error'),
    (re.compile(r'(database error|sql error)', re.IGNORECASE), 'Database Error'),
    (re.compile(r'(memory error|out of memory)', re.IGNORECASE), 'Memory Error'),
    (re.compile(r'(disk full|no space)', re.IGNORECASE), 'Disk Full'),
]


def is_error(record: LogRecord) -> bool:
    return record.level == Level.ERROR or bool(record.status_code and record.status_code >= 400)


def common_error_patterns(messages: list[str]) -> list[ErrorPattern]:
    """Count messages per signature, dropping zeros, most frequent first."""
    if not messages:
        return []
    found = []
    for pattern, name in ERROR_PATTERNS:
        count = sum(1 for message in messages if pattern.search(message))
        if count:
            found.append(ErrorPattern(pattern=name, count=count, percentage=rate(count, len(messages))))
    # sorted() is stable, so equal counts keep library order
    return sorted(found, key=lambda p: -p.count)


def error_analysis(records: list[LogRecord]) -> ErrorAnalysis:
    errors = [r for r in records if is_error(r)]
    if not errors:
        return ErrorAnalysis(total_errors=0)

    analysis = ErrorAnalysis(
        total_errors=len(errors),
        error_rate=rate(len(errors), len(records)),
        top_error_sources=count_by(errors, lambda r: r.source),
        error_status_codes=count_by(errors, lambda r: r.status_code),
    )
    if any(r.message for r in errors):
        analysis.common_error_patterns = common_error_patterns([(r.message or '').lower() for r in errors])
    return analysis
