"""Data contract towards an LLM-backed remediation advisor.

The model call itself lives outside this package. This module builds the
prompt from an analysis report, validates the model's answer and produces a
deterministic fallback when no model is available.
"""

import json
import logging
import re
from typing import Any

from logsight.models import AdviceResponse, AnalysisReport
from logsight.records import Level, LogRecord


logger = logging.getLogger(__name__)

ERROR_MESSAGE_KEYWORDS = ('error', 'fail', 'exception', 'timeout')

JSON_BLOCK_PATTERN = re.compile(r'\{.*\}', re.DOTALL)

SYSTEM_PROMPT = (
    'You are an expert DevOps engineer and log analysis specialist. '
    'Analyze log data and provide actionable recommendations for fixing issues.'
)

RESPONSE_SCHEMA = """{
  "root_cause": "Brief description of the root cause",
  "fix_steps": ["Step 1", "Step 2", "Step 3"],
  "prevention": ["Prevention strategy 1", "Prevention strategy 2"],
  "monitoring": ["Monitoring recommendation 1", "Monitoring recommendation 2"],
  "references": ["https://example.com/doc1", "https://example.com/doc2"],
  "confidence": "High|Medium|Low"
}"""

FALLBACK_ROOT_CAUSE = 'Multiple issues detected based on log patterns'

FALLBACK_PREVENTION = [
    'Implement comprehensive error logging and monitoring',
    'Set up automated health checks and alerts',
    'Use blue-green deployments to reduce downtime',
    'Implement circuit breakers for external dependencies',
    'Add input validation and sanitization',
]

FALLBACK_MONITORING = [
    'Set up APM (Application Performance Monitoring)',
    'Configure log aggregation and analysis tools',
    'Implement real-time alerting for error thresholds',
    'Create dashboards for key performance metrics',
    'Set up automated log rotation and archival',
]

FALLBACK_REFERENCES = [
    'https://docs.nginx.com/nginx/admin-guide/web-server/reverse-proxy/',
    'https://www.postgresql.org/docs/current/monitoring.html',
    'https://docs.oracle.com/javase/tutorial/garbage/',
    'https://httpstatuses.com/500',
    'https://httpstatuses.com/400',
]


class AdviceParseError(ValueError):
    """Raised when a model answer contains no usable JSON object."""


def sample_error_messages(records: list[LogRecord], limit: int = 10) -> list[str]:
    messages = []
    for record in records:
        if record.message and any(k in record.message.lower() for k in ERROR_MESSAGE_KEYWORDS):
            messages.append(record.message)
            if len(messages) >= limit:
                break
    return messages


def _compact(data: dict[str, Any]) -> str:
    return json.dumps(data, separators=(',', ':'))


def build_advice_prompt(records: list[LogRecord], report: AnalysisReport) -> str:
    """User prompt asking the model for a JSON remediation answer.

    Pair with ``SYSTEM_PROMPT`` as the system message.
    """
    basic = report.basic_stats
    error_messages = sample_error_messages(records)
    recommendations = report.recommendations[:3]

    lines = [
        'Analyze these log errors and provide specific, actionable fix recommendations:',
        '',
        'Log Summary:',
        f'- Total logs: {basic.total_logs}',
        f'- Error rate: {(basic.error_rate or 0):.1f}%',
        f'- Top HTTP errors: {_compact(report.error_analysis.error_status_codes or {})}',
        f'- Log levels: {_compact(basic.level_distribution or {})}',
        '',
        'Sample error messages:',
        *error_messages,
        '',
        'Current recommendations from pattern analysis:',
        *(f'{r.reason}: {r.advice}' for r in recommendations),
        '',
        'Please provide a JSON response with the following structure:',
        RESPONSE_SCHEMA,
        '',
        'Focus on:',
        '1. Root cause analysis',
        '2. Specific fix steps with commands/configs',
        '3. Prevention strategies',
        '4. Monitoring recommendations',
        '5. References to relevant documentation',
    ]
    return '\n'.join(lines) + '\n'


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def validate_advice(data: dict[str, Any]) -> AdviceResponse:
    """Coerce a decoded answer, defaulting missing or malformed keys."""
    return AdviceResponse(
        root_cause=str(data.get('root_cause') or 'Unable to determine root cause'),
        fix_steps=_string_list(data.get('fix_steps')),
        prevention=_string_list(data.get('prevention')),
        monitoring=_string_list(data.get('monitoring')),
        references=_string_list(data.get('references')),
        confidence=str(data.get('confidence') or 'Medium'),
    )


def parse_advice_response(text: str) -> AdviceResponse:
    """Parse a model answer that is JSON or contains one ``{...}`` block.

    Raises:
        AdviceParseError: No JSON object could be decoded from ``text``
    """
    try:
        data = json.loads(text)
    except ValueError:
        match = JSON_BLOCK_PATTERN.search(text)
        if not match:
            raise AdviceParseError('No valid JSON found in advice response')
        try:
            data = json.loads(match.group(0))
        except ValueError as e:
            raise AdviceParseError(f'Failed to parse advice response as JSON: {e}') from e

    if not isinstance(data, dict):
        raise AdviceParseError(f'Expected a JSON object, got {type(data).__name__}')
    return validate_advice(data)


def fallback_advice(report: AnalysisReport) -> AdviceResponse:
    """Deterministic answer built from the rule-based recommendations."""
    logger.debug('Using fallback advice')
    return AdviceResponse(
        root_cause=FALLBACK_ROOT_CAUSE,
        fix_steps=[r.advice for r in report.recommendations[:5]],
        prevention=list(FALLBACK_PREVENTION),
        monitoring=list(FALLBACK_MONITORING),
        references=list(FALLBACK_REFERENCES),
        confidence='Medium',
    )


def summarize_records(records: list[LogRecord]) -> str:
    if not records:
        return 'No logs to summarize'

    start = records[0].timestamp.isoformat()
    end = records[-1].timestamp.isoformat()
    errors = sum(1 for r in records if r.level == Level.ERROR)
    warnings = sum(1 for r in records if r.level == Level.WARNING)
    sources = len({r.source for r in records})
    ips = len({r.ip_address for r in records if r.ip_address})
    return (
        f'Analysis of {len(records)} logs from {start} to {end}. '
        f'Found {errors} errors and {warnings} warnings across {sources} sources '
        f'and {ips} unique IP addresses.'
    )
