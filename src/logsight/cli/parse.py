"""CLI command for parsing raw lines into normalized records."""

import json

import click

from logsight.cli.common import files_argument, format_option, json_option, load_records
from logsight.records import LogRecord


def _record_json(record: LogRecord) -> dict:
    data = record.to_dict()
    data['timestamp'] = record.timestamp.isoformat()
    return {key: value for key, value in data.items() if value is not None}


@click.command('parse')
@files_argument
@format_option
@click.option(
    '--limit',
    '-n',
    type=int,
    default=None,
    help='Print at most N records',
)
@json_option
def parse_command(files, format_hint: str, limit: int | None, json_output: bool):
    """
    Parse log files into normalized records.

    \b
    Examples:
      logsight parse access.log
      logsight parse app.jsonl --format json --json
      cat syslog | logsight parse - -n 20
    """
    records = load_records(files, format_hint)
    shown = records if limit is None else records[: max(limit, 0)]

    if json_output:
        click.echo(json.dumps([_record_json(r) for r in shown], indent=2))
        return

    for record in shown:
        status = record.status_code if record.status_code is not None else '-'
        click.echo(
            f'{record.timestamp.isoformat()} {record.level.value:<7} {record.source:<8} '
            f'{status} {record.message or ""}'
        )
    if len(shown) < len(records):
        click.echo(f'... {len(records) - len(shown)} more records', err=True)
