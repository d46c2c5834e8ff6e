"""Rule-based remediation recommendations."""

from dataclasses import dataclass
from typing import Callable

from logsight.models import Recommendation
from logsight.records import LogRecord


MAX_RECOMMENDATIONS = 8
MAX_EXAMPLES = 3


@dataclass(frozen=True)
class Rule:
    """A recommendation emitted when at least one record matches."""

    reason: str
    advice: str
    matches: Callable[[LogRecord], bool]


def _status_in(*codes: int) -> Callable[[LogRecord], bool]:
    return lambda record: record.status_code in codes


def _message_contains(*phrases: str) -> Callable[[LogRecord], bool]:
    def matches(record: LogRecord) -> bool:
        if not record.message:
            return False
        message = record.message.lower()
        return any(phrase in message for phrase in phrases)

    return matches


# Evaluated in order; output order follows this list
RULES = [
    Rule(
        'Frequent 500 errors',
        'Check application error logs and stack traces. Review recent deploys, enable error monitoring, '
        'and add guards around failing code paths.',
        _status_in(500),
    ),
    Rule(
        'Many 502/503 upstream failures',
        'Upstream service likely unhealthy. Verify reverse proxy/upstream targets, health checks, '
        'and autoscaling. Inspect upstream service logs.',
        _status_in(502, 503),
    ),
    Rule(
        'Many 404 responses',
        'Requests hitting unknown routes or missing assets. Validate URLs, client routing, and asset paths. '
        'Add redirects or route fallbacks as needed.',
        _status_in(404),
    ),
    Rule(
        'Authentication/Authorization issues (401/403)',
        'Confirm auth headers/tokens, session validity, and RBAC permissions. Rotate invalid tokens '
        'and verify CORS for browser clients.',
        _status_in(401, 403),
    ),
    Rule(
        'Timeouts detected',
        'Increase timeouts or optimize slow calls. Add retries with backoff and circuit breakers. '
        'Profile slow queries/endpoints.',
        _message_contains('timeout', 'timed out', 'request timed'),
    ),
    Rule(
        'Connection refused/errors',
        'Target service likely down or port/firewall misconfigured. Verify host/port, DNS, security groups, '
        'and service health.',
        _message_contains('connection refused', 'connection failed', 'reset by peer'),
    ),
]


def recommendations(records: list[LogRecord], rules: list[Rule] = RULES) -> list[Recommendation]:
    if not records:
        return []

    result = []
    for rule in rules:
        matching = [r for r in records if rule.matches(r)]
        if matching:
            result.append(
                Recommendation(
                    reason=rule.reason,
                    advice=rule.advice,
                    count=len(matching),
                    examples=[r.message or '' for r in matching[:MAX_EXAMPLES]],
                )
            )
    return result[:MAX_RECOMMENDATIONS]
