"""Client IP analysis and suspicious IP scoring."""

from dataclasses import dataclass
from datetime import datetime

from logsight.analyze.helpers import top_n
from logsight.models import IpAnalysis, IpDistribution, SuspiciousIp
from logsight.records import Level, LogRecord


HIGH_VOLUME_REQUESTS = 1000
HIGH_ERROR_RATE = 0.5
MANY_ERROR_LEVEL_LOGS = 10


@dataclass
class IpStats:
    """Per-IP accumulator."""

    request_count: int
    error_count: int
    error_level_count: int
    first_request: datetime
    last_request: datetime

    def add(self, record: LogRecord):
        self.request_count += 1
        if record.status_code and record.status_code >= 400:
            self.error_count += 1
        if record.level == Level.ERROR:
            self.error_level_count += 1
        self.first_request = min(self.first_request, record.timestamp)
        self.last_request = max(self.last_request, record.timestamp)


def collect_ip_stats(records: list[LogRecord]) -> dict[str, IpStats]:
    stats: dict[str, IpStats] = {}
    for record in records:
        if not record.ip_address:
            continue
        entry = stats.get(record.ip_address)
        if entry is None:
            entry = IpStats(0, 0, 0, record.timestamp, record.timestamp)
            stats[record.ip_address] = entry
        entry.add(record)
    return stats


def identify_suspicious_ips(records: list[LogRecord]) -> list[SuspiciousIp]:
    """Score every IP and return the ones with a positive score, highest first.

    +3 for more than 1000 requests, +2 when more than half of its requests
    carry status >= 400, +2 for more than 10 ERROR-level records.
    """
    suspicious = []
    for ip, stats in collect_ip_stats(records).items():
        score = 0
        reasons = []

        if stats.request_count > HIGH_VOLUME_REQUESTS:
            score += 3
            reasons.append(f'High request volume: {stats.request_count}')

        error_rate = stats.error_count / stats.request_count
        if error_rate > HIGH_ERROR_RATE:
            score += 2
            reasons.append(f'High error rate: {error_rate * 100:.1f}%')

        if stats.error_level_count > MANY_ERROR_LEVEL_LOGS:
            score += 2
            reasons.append(f'Many error level logs: {stats.error_level_count}')

        if score > 0:
            suspicious.append(
                SuspiciousIp(
                    ip=ip,
                    suspicious_score=score,
                    reasons=reasons,
                    stats={
                        'request_count': stats.request_count,
                        'error_count': stats.error_count,
                        'error_level_count': stats.error_level_count,
                        'first_request': stats.first_request.isoformat(),
                        'last_request': stats.last_request.isoformat(),
                    },
                )
            )

    return sorted(suspicious, key=lambda s: -s.suspicious_score)


def ip_analysis(records: list[LogRecord]) -> IpAnalysis:
    counts: dict[str, int] = {}
    for record in records:
        if record.ip_address:
            counts[record.ip_address] = counts.get(record.ip_address, 0) + 1
    if not counts:
        return IpAnalysis()

    volumes = list(counts.values())
    return IpAnalysis(
        total_unique_ips=len(counts),
        top_ips=top_n(counts, 10),
        ip_distribution=IpDistribution(
            single_request=sum(1 for c in volumes if c == 1),
            multiple_requests=sum(1 for c in volumes if c > 1),
            high_volume_ips=sum(1 for c in volumes if c > 100),
        ),
        suspicious_ips=identify_suspicious_ips(records),
    )
