"""CLI command for isolation forest anomaly detection."""

import json
import sys

import click

from logsight.anomaly import AnomalyDetector
from logsight.cli.common import files_argument, format_option, json_option, load_records


@click.command('anomalies')
@files_argument
@format_option
@click.option(
    '--contamination',
    '-c',
    type=float,
    default=None,
    help='Expected fraction of anomalous records, in (0, 0.5] (default: 0.1)',
)
@click.option(
    '--threshold',
    '-t',
    type=float,
    default=None,
    help='Flag records scoring below this value instead of using contamination',
)
@click.option(
    '--seed',
    type=int,
    default=None,
    help='Random seed for tree construction (default: 42)',
)
@click.option(
    '--trees',
    type=int,
    default=None,
    help='Number of isolation trees (default: 100)',
)
@json_option
def anomalies_command(
    files,
    format_hint: str,
    contamination: float | None,
    threshold: float | None,
    seed: int | None,
    trees: int | None,
    json_output: bool,
):
    """
    Fit an isolation forest on the input and report anomalous records.

    Scores are negative; lower means more anomalous.

    \b
    Examples:
      logsight anomalies access.log
      logsight anomalies access.log -c 0.05 --json
      logsight anomalies app.log --threshold -0.6
    """
    try:
        detector = AnomalyDetector(contamination=contamination, random_state=seed, n_estimators=trees)
    except ValueError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    records = load_records(files, format_hint)
    model = detector.fit(records)
    result = detector.detect_anomalies(records, threshold=threshold, model=model)

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(result.to_cli())
