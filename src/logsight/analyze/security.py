"""Attack signature scan over record messages."""

import re

from logsight.models import SecurityAnalysis, SuspiciousPattern
from logsight.records import LogRecord


MAX_EXAMPLES = 3

ATTACK_PATTERNS = [
    (re.compile(r'(sql injection|union select|drop table)', re.IGNORECASE), 'SQL Injection'),
    (re.compile(r'(xss|cross.site|script>)', re.IGNORECASE), 'XSS Attack'),
    (re.compile(r'(directory traversal|\.\./)', re.IGNORECASE), 'Directory Traversal'),
    (re.compile(r'(brute force|failed login)', re.IGNORECASE), 'Brute Force'),
    (re.compile(r'(unauthorized|forbidden|access denied)', re.IGNORECASE), 'Unauthorized Access'),
    (re.compile(r'(injection|payload|exploit)', re.IGNORECASE), 'Injection Attack'),
]


def security_analysis(records: list[LogRecord]) -> SecurityAnalysis:
    """Each signature adds its match count to the threat total.

    A message can match several signatures and is counted once per match.
    """
    analysis = SecurityAnalysis()
    messages = [r.message for r in records if r.message]

    for pattern, name in ATTACK_PATTERNS:
        matching = [m for m in messages if pattern.search(m)]
        if matching:
            analysis.suspicious_patterns.append(
                SuspiciousPattern(pattern=name, count=len(matching), examples=matching[:MAX_EXAMPLES])
            )
            analysis.potential_threats += len(matching)

    analysis.failed_attempts = sum(1 for r in records if r.status_code == 401)
    return analysis
