"""Format detection and parsing of raw log lines."""

from .detect import detect_format
from .formats import (
    LINE_PARSERS,
    level_from_message,
    level_from_status,
    normalize_level,
    parse_apache_line,
    parse_custom_line,
    parse_json_line,
    parse_nginx_line,
    parse_syslog_line,
    split_request,
)
from .parser import AUTO, LogParser, default_record, parse_lines, resolve_format_hint


__all__ = [
    'AUTO',
    'LINE_PARSERS',
    'LogParser',
    'default_record',
    'detect_format',
    'level_from_message',
    'level_from_status',
    'normalize_level',
    'parse_apache_line',
    'parse_custom_line',
    'parse_json_line',
    'parse_lines',
    'parse_nginx_line',
    'parse_syslog_line',
    'resolve_format_hint',
    'split_request',
]
