"""Main CLI entry point with command groups"""

import click

from logsight import prometheus as prom
from logsight.__version__ import __version__
from logsight.cli.advise import advise_command
from logsight.cli.analyze import analyze_command
from logsight.cli.anomalies import anomalies_command
from logsight.cli.parse import parse_command
from logsight.utils import setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name='logsight')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Logging level (default: LOGSIGHT_LOG_LEVEL or WARNING)',
)
@click.option(
    '--metrics-file',
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help='Write Prometheus metrics to this file after the command',
)
@click.pass_context
def cli(ctx, log_level: str | None, metrics_file: str | None):
    """
    logsight - Log parsing, statistics and anomaly detection.

    \b
    Commands:
      logsight parse <file ...>       Normalize log lines into records
      logsight analyze <file ...>     Statistical report and recommendations
      logsight anomalies <file ...>   Isolation forest anomaly detection
      logsight advise <file ...>      Remediation advice or LLM prompt

    \b
    Use - to read from stdin. Formats: apache, nginx, syslog, json, custom
    (detected automatically by default).

    \b
    Examples:
      logsight analyze /var/log/nginx/access.log
      logsight anomalies app.jsonl --format json --json
      tail -n 1000 app.log | logsight parse -
    """
    setup_logging(log_level)
    if metrics_file:
        ctx.call_on_close(lambda: prom.write_metrics(metrics_file))

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


cli.add_command(parse_command, name='parse')
cli.add_command(analyze_command, name='analyze')
cli.add_command(anomalies_command, name='anomalies')
cli.add_command(advise_command, name='advise')


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
