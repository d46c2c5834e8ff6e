"""Batch parser: raw lines in, one record per non-blank line out."""

import logging
from time import time

from logsight import prometheus as prom
from logsight.parsing.detect import detect_format
from logsight.parsing.formats import LINE_PARSERS
from logsight.records import FormatVariant, Level, LogRecord, now


logger = logging.getLogger(__name__)

AUTO = 'auto'


def default_record(line: str) -> LogRecord:
    """Record used when a line cannot be parsed by its format's grammar."""
    return LogRecord(
        timestamp=now(),
        raw_log=line,
        level=Level.UNKNOWN,
        source='unknown',
        message=line.strip(),
    )


def resolve_format_hint(format_hint: FormatVariant | str | None) -> FormatVariant | None:
    """Turn a caller hint into a variant; ``None`` means detect."""
    if format_hint is None or isinstance(format_hint, FormatVariant):
        return format_hint
    hint = format_hint.strip().lower()
    if not hint or hint == AUTO:
        return None
    try:
        return FormatVariant(hint)
    except ValueError:
        logger.warning(f'Unknown format hint {format_hint!r}, falling back to detection')
        return None


class LogParser:
    """Parses batches of raw lines into ``LogRecord`` objects.

    Parsing never raises. A line that fails its grammar, or whose extraction
    blows up, is kept as a default record so every non-blank input line is
    represented exactly once in the output.
    """

    def __init__(self):
        self.parsers = dict(LINE_PARSERS)

    def detect(self, lines: list[str]) -> FormatVariant:
        return detect_format(lines)

    def parse_line(self, line: str, variant: FormatVariant) -> tuple[LogRecord, bool]:
        """Parse one line, returning the record and whether it was defaulted."""
        try:
            record = self.parsers[variant](line)
        except Exception as e:
            logger.warning(f'Failed to parse {variant.value} line {line[:100]!r}: {e}')
            record = None
        if record is None:
            return default_record(line), True
        return record, False

    def parse(self, lines: list[str], format_hint: FormatVariant | str | None = None) -> list[LogRecord]:
        if not lines:
            return []

        start_time = time()
        variant = resolve_format_hint(format_hint) or self.detect(lines)

        records = []
        defaulted = 0
        for line in lines:
            if not line.strip():
                continue
            record, was_defaulted = self.parse_line(line, variant)
            records.append(record)
            defaulted += was_defaulted

        logger.info(
            f'Parsed {len(records)} records as {variant.value} in {time() - start_time:.3f}s '
            f'({defaulted} defaulted)'
        )
        prom.record_parse(variant.value, len(records), defaulted)
        return records


_default_parser = LogParser()


def parse_lines(lines: list[str], format_hint: FormatVariant | str | None = None) -> list[LogRecord]:
    """Parse ``lines`` with a shared parser. See ``LogParser.parse``."""
    return _default_parser.parse(lines, format_hint)
