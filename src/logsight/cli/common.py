"""Options and input handling shared by the CLI commands."""

import logging
from typing import IO

import click

from logsight.parsing import AUTO, parse_lines
from logsight.records import FormatVariant, LogRecord


logger = logging.getLogger(__name__)

FORMAT_CHOICES = [AUTO] + [variant.value for variant in FormatVariant]

files_argument = click.argument('files', nargs=-1, required=True, type=click.File('r', encoding='utf-8', errors='replace'))

format_option = click.option(
    '--format',
    '-f',
    'format_hint',
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=AUTO,
    show_default=True,
    help='Log format of the input (auto runs detection)',
)

json_option = click.option(
    '--json',
    'json_output',
    is_flag=True,
    help='Output in JSON format',
)


def read_lines(files: tuple[IO[str], ...]) -> list[str]:
    """All lines of ``files`` in order, line terminators removed."""
    lines = []
    for f in files:
        lines.extend(f.read().splitlines())
    return lines


def load_records(files: tuple[IO[str], ...], format_hint: str) -> list[LogRecord]:
    lines = read_lines(files)
    logger.debug(f'Read {len(lines)} lines from {len(files)} input(s)')
    return parse_lines(lines, format_hint)
