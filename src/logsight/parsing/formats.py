"""Per-variant line parsers.

Each parser takes one raw line and returns a ``LogRecord``, or ``None`` when
the line does not fit the variant's grammar. Falling back to a default
record is the caller's job.
"""

import json
import re
from typing import Any, Callable

from logsight.parsing.timestamps import (
    find_timestamp_in_text,
    parse_access_timestamp,
    parse_iso_timestamp,
    parse_syslog_timestamp,
    parse_unix_timestamp,
)
from logsight.records import FormatVariant, Level, LogRecord, now


# Apache and nginx share one grammar; the trailing referrer/user-agent pair is optional
ACCESS_LOG_PATTERN = re.compile(
    r'(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}) - - \[(.*?)\] "(.*?)" (\d{3}) (\d+)'
    r'(?: "([^"]*)" "([^"]*)")?'
)

SYSLOG_PATTERN = re.compile(r'(\w{3}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})\s+(\S+)\s+(\S+):\s+(.*)')

IPV4_PATTERN = re.compile(r'\b(?:[0-9]{1,3}\.){3}[0-9]{1,3}\b')

GRAMMARS: dict[FormatVariant, re.Pattern] = {
    FormatVariant.APACHE: ACCESS_LOG_PATTERN,
    FormatVariant.NGINX: ACCESS_LOG_PATTERN,
    FormatVariant.SYSLOG: SYSLOG_PATTERN,
}

JSON_TIMESTAMP_FIELDS = ('timestamp', 'time', 'datetime', 'created_at', 'date')
JSON_LEVEL_FIELDS = ('level', 'severity')
JSON_MESSAGE_FIELDS = ('message', 'msg')
JSON_SOURCE_FIELDS = ('source', 'service')
JSON_IP_FIELDS = ('ip', 'ip_address', 'ipAddress', 'client_ip', 'remote_addr')
JSON_STATUS_FIELDS = ('status', 'status_code', 'statusCode')
JSON_SIZE_FIELDS = ('response_size', 'responseSize', 'bytes', 'size')
JSON_METHOD_FIELDS = ('method', 'http_method')
JSON_URL_FIELDS = ('url', 'path', 'endpoint')

LEVEL_ALIASES = {
    'error': Level.ERROR,
    'err': Level.ERROR,
    'fatal': Level.ERROR,
    'critical': Level.ERROR,
    'crit': Level.ERROR,
    'emerg': Level.ERROR,
    'alert': Level.ERROR,
    'warn': Level.WARNING,
    'warning': Level.WARNING,
    'info': Level.INFO,
    'information': Level.INFO,
    'notice': Level.INFO,
    'debug': Level.DEBUG,
    'trace': Level.DEBUG,
    'verbose': Level.DEBUG,
    'unknown': Level.UNKNOWN,
}


def level_from_status(status_code: int) -> Level:
    if 200 <= status_code < 400:
        return Level.INFO
    if 400 <= status_code < 500:
        return Level.WARNING
    if 500 <= status_code < 600:
        return Level.ERROR
    return Level.UNKNOWN


def level_from_message(message: str) -> Level:
    """Keyword scan used for syslog and free-form lines (substring match)."""
    upper = message.upper()
    if 'ERROR' in upper or 'ERR' in upper:
        return Level.ERROR
    if 'WARNING' in upper or 'WARN' in upper:
        return Level.WARNING
    if 'INFO' in upper:
        return Level.INFO
    if 'DEBUG' in upper:
        return Level.DEBUG
    return Level.INFO


def normalize_level(value: Any) -> Level:
    """Map a structured-log level name onto the closed level set."""
    return LEVEL_ALIASES.get(str(value).strip().lower(), Level.UNKNOWN)


def split_request(request: str) -> tuple[str, str, str]:
    """Split ``METHOD URL PROTOCOL`` with the defaults used for short request strings."""
    parts = request.split(' ')
    if len(parts) >= 3:
        return parts[0], parts[1], parts[2]
    if len(parts) == 2:
        return parts[0], parts[1], 'HTTP/1.1'
    return 'GET', '/', 'HTTP/1.1'


def _parse_access_line(line: str, variant: FormatVariant) -> LogRecord | None:
    match = ACCESS_LOG_PATTERN.search(line.strip())
    if not match:
        return None

    ip, timestamp_str, request, status_str, size_str, referrer, user_agent = match.groups()
    status_code = int(status_str)
    method, url, protocol = split_request(request)

    return LogRecord(
        timestamp=parse_access_timestamp(timestamp_str) or now(),
        raw_log=line,
        level=level_from_status(status_code),
        source=variant.value,
        message=f'{method} {url} {status_code}',
        ip_address=ip,
        status_code=status_code if status_code < 600 else None,
        response_size=int(size_str),
        user_agent=user_agent or None,
        referrer=referrer or None,
        method=method,
        url=url,
        protocol=protocol,
    )


def parse_apache_line(line: str) -> LogRecord | None:
    return _parse_access_line(line, FormatVariant.APACHE)


def parse_nginx_line(line: str) -> LogRecord | None:
    return _parse_access_line(line, FormatVariant.NGINX)


def parse_syslog_line(line: str) -> LogRecord | None:
    match = SYSLOG_PATTERN.search(line.strip())
    if not match:
        return None

    timestamp_str, hostname, service, message = match.groups()
    return LogRecord(
        timestamp=parse_syslog_timestamp(timestamp_str) or now(),
        raw_log=line,
        level=level_from_message(message),
        source=FormatVariant.SYSLOG.value,
        message=message,
        hostname=hostname,
        service=service,
    )


def load_json_object(line: str) -> dict[str, Any] | None:
    """Decode a line as a self-contained JSON object, or return None."""
    try:
        data = json.loads(line.strip())
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def _first_field(data: dict[str, Any], names: tuple[str, ...]) -> Any:
    """First truthy value among alternate field names."""
    for name in names:
        value = data.get(name)
        if value:
            return value
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _json_timestamp(data: dict[str, Any]):
    for name in JSON_TIMESTAMP_FIELDS:
        value = data.get(name)
        if not value:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            parsed = parse_unix_timestamp(value)
        elif isinstance(value, str):
            parsed = parse_iso_timestamp(value)
        else:
            parsed = None
        if parsed is not None:
            return parsed
    return None


def parse_json_line(line: str) -> LogRecord | None:
    data = load_json_object(line)
    if data is None:
        return None

    level_value = _first_field(data, JSON_LEVEL_FIELDS)
    message = _first_field(data, JSON_MESSAGE_FIELDS)
    source = _first_field(data, JSON_SOURCE_FIELDS)

    status_code = _as_int(_first_field(data, JSON_STATUS_FIELDS))
    if status_code is not None and not 0 <= status_code < 600:
        status_code = None
    response_size = _as_int(_first_field(data, JSON_SIZE_FIELDS))
    if response_size is not None and response_size < 0:
        response_size = None

    ip_address = _first_field(data, JSON_IP_FIELDS)
    method = _first_field(data, JSON_METHOD_FIELDS)
    url = _first_field(data, JSON_URL_FIELDS)
    hostname = _first_field(data, ('hostname', 'host'))

    return LogRecord(
        timestamp=_json_timestamp(data) or now(),
        raw_log=line,
        level=normalize_level(level_value) if level_value else Level.INFO,
        source=str(source) if source else FormatVariant.JSON.value,
        message=str(message) if message else json.dumps(data, separators=(',', ':')),
        ip_address=str(ip_address) if ip_address else None,
        status_code=status_code,
        response_size=response_size,
        method=str(method).upper() if method else None,
        url=str(url) if url else None,
        hostname=hostname if isinstance(hostname, str) else None,
        payload=data,
    )


def parse_custom_line(line: str) -> LogRecord | None:
    ip_match = IPV4_PATTERN.search(line)
    return LogRecord(
        timestamp=find_timestamp_in_text(line) or now(),
        raw_log=line,
        level=level_from_message(line),
        source=FormatVariant.CUSTOM.value,
        message=line.strip(),
        ip_address=ip_match.group(0) if ip_match else None,
    )


LINE_PARSERS: dict[FormatVariant, Callable[[str], LogRecord | None]] = {
    FormatVariant.APACHE: parse_apache_line,
    FormatVariant.NGINX: parse_nginx_line,
    FormatVariant.SYSLOG: parse_syslog_line,
    FormatVariant.JSON: parse_json_line,
    FormatVariant.CUSTOM: parse_custom_line,
}
