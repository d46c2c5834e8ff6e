"""CLI command for remediation advice."""

import json

import click

from logsight.advice import SYSTEM_PROMPT, build_advice_prompt, fallback_advice, summarize_records
from logsight.analyze import StatisticalAnalyzer
from logsight.cache import NullCache
from logsight.cli.common import files_argument, format_option, json_option, load_records


@click.command('advise')
@files_argument
@format_option
@click.option(
    '--prompt',
    'show_prompt',
    is_flag=True,
    help='Print the prompt to send to an LLM instead of the built-in advice',
)
@json_option
def advise_command(files, format_hint: str, show_prompt: bool, json_output: bool):
    """
    Suggest fixes for the problems found in the logs.

    Without an LLM the advice is derived from the rule-based recommendations.

    \b
    Examples:
      logsight advise error.log
      logsight advise error.log --prompt > prompt.txt
    """
    records = load_records(files, format_hint)
    report = StatisticalAnalyzer(cache=NullCache()).process(records)

    if show_prompt:
        prompt = build_advice_prompt(records, report)
        if json_output:
            click.echo(json.dumps({'system': SYSTEM_PROMPT, 'user': prompt}, indent=2))
        else:
            click.echo(prompt)
        return

    advice = fallback_advice(report)
    if json_output:
        click.echo(json.dumps(advice.to_dict(), indent=2))
        return

    click.echo(summarize_records(records))
    click.echo('')
    click.echo(f'Root cause: {advice.root_cause} (confidence: {advice.confidence})')
    for title, items in (
        ('Fix steps', advice.fix_steps),
        ('Prevention', advice.prevention),
        ('Monitoring', advice.monitoring),
        ('References', advice.references),
    ):
        if items:
            click.echo(f'\n{title}:')
            for item in items:
                click.echo(f'  - {item}')
