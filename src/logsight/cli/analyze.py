"""CLI command for the statistical report."""

import json

import click

from logsight.analyze import StatisticalAnalyzer
from logsight.cache import NullCache
from logsight.cli.common import files_argument, format_option, json_option, load_records


@click.command('analyze')
@files_argument
@format_option
@json_option
def analyze_command(files, format_hint: str, json_output: bool):
    """
    Compute statistics, security findings and recommendations.

    \b
    Examples:
      logsight analyze /var/log/nginx/access.log
      logsight analyze app.log --json
    """
    records = load_records(files, format_hint)
    # One-shot process, nothing to reuse a cache for
    report = StatisticalAnalyzer(cache=NullCache()).process(records)

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo(report.to_cli())
