"""Pydantic models for analysis reports and anomaly detection results"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from logsight.records import AnomalyType, LogRecord


class ReportModel(BaseModel):
    """Base for every document the core returns."""

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible document; undefined fields are omitted."""
        return self.model_dump(mode='json', exclude_none=True)


# ============================================================================
# Analysis report
# ============================================================================


class DateRange(ReportModel):
    start: str | None = Field(None, examples=['2023-10-10T13:55:36-07:00'])
    end: str | None = Field(None, examples=['2023-10-10T18:02:11-07:00'])


class BasicStats(ReportModel):
    """Counts and rates over the whole batch"""

    total_logs: int = Field(0, description='Number of records')
    unique_sources: int = Field(0, description='Distinct non-empty source tags')
    unique_ips: int = Field(0, description='Distinct non-empty client IPs')
    date_range: DateRange = Field(default_factory=DateRange)
    level_distribution: dict[str, int] | None = Field(None, examples=[{'INFO': 90, 'ERROR': 10}])
    error_rate: float | None = Field(None, description='ERROR records, percent of total')
    warning_rate: float | None = Field(None, description='WARNING records, percent of total')
    status_distribution: dict[str, int] | None = Field(None, examples=[{'200': 95, '500': 5}])
    error_status_rate: float | None = Field(None, description='Records with status >= 400, percent of total')
    server_error_rate: float | None = Field(None, description='Records with status >= 500, percent of total')


class TimeAnalysis(ReportModel):
    """Temporal distribution of records

    Day of week uses Sunday = 0 through Saturday = 6.
    """

    hourly_distribution: dict[int, int] | None = None
    daily_distribution: dict[int, int] | None = None
    date_distribution: dict[str, int] | None = None
    peak_hour: int | None = None
    peak_day: int | None = None
    logs_per_second: float | None = None
    logs_per_minute: float | None = None
    logs_per_hour: float | None = None


class ErrorPattern(ReportModel):
    pattern: str = Field(..., examples=['Timeout'])
    count: int
    percentage: float = Field(..., description='Share of error messages matching the pattern')


class ErrorAnalysis(ReportModel):
    total_errors: int = 0
    error_rate: float | None = None
    top_error_sources: dict[str, int] | None = None
    common_error_patterns: list[ErrorPattern] | None = None
    error_status_codes: dict[str, int] | None = None


class SuspiciousIp(ReportModel):
    ip: str
    suspicious_score: int
    reasons: list[str]
    stats: dict[str, Any] = Field(default_factory=dict)


class IpDistribution(ReportModel):
    single_request: int = 0
    multiple_requests: int = 0
    high_volume_ips: int = Field(0, description='IPs with more than 100 requests')


class IpAnalysis(ReportModel):
    total_unique_ips: int | None = None
    top_ips: dict[str, int] | None = None
    ip_distribution: IpDistribution | None = None
    suspicious_ips: list[SuspiciousIp] | None = None


class SourceDetail(ReportModel):
    log_count: int
    error_rate: float
    avg_response_size: float


class SourceAnalysis(ReportModel):
    total_sources: int | None = None
    source_distribution: dict[str, int] | None = None
    top_sources: dict[str, int] | None = None
    source_details: dict[str, SourceDetail] | None = None


class ResponseSizeStats(ReportModel):
    mean: float
    median: float
    std: float
    min: int
    max: int
    percentile_95: float
    percentile_99: float


class UrlLengthStats(ReportModel):
    mean: float
    max: int
    long_urls: int = Field(..., description='URLs longer than 200 characters')


class PerformanceMetrics(ReportModel):
    response_size: ResponseSizeStats | None = None
    request_methods: dict[str, int] | None = None
    url_length: UrlLengthStats | None = None


class SuspiciousPattern(ReportModel):
    pattern: str = Field(..., examples=['SQL Injection'])
    count: int
    examples: list[str] = Field(default_factory=list)


class SecurityAnalysis(ReportModel):
    potential_threats: int = 0
    suspicious_patterns: list[SuspiciousPattern] = Field(default_factory=list)
    failed_attempts: int = Field(0, description='Records with status 401')


class Recommendation(ReportModel):
    reason: str = Field(..., examples=['Frequent 500 errors'])
    advice: str
    count: int
    examples: list[str] = Field(default_factory=list)


class AnalysisReport(ReportModel):
    """Multi-section statistical report over a batch of records"""

    basic_stats: BasicStats = Field(default_factory=BasicStats)
    time_analysis: TimeAnalysis = Field(default_factory=TimeAnalysis)
    error_analysis: ErrorAnalysis = Field(default_factory=ErrorAnalysis)
    ip_analysis: IpAnalysis = Field(default_factory=IpAnalysis)
    source_analysis: SourceAnalysis = Field(default_factory=SourceAnalysis)
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    security_analysis: SecurityAnalysis = Field(default_factory=SecurityAnalysis)
    recommendations: list[Recommendation] = Field(default_factory=list)
    processed_at: str = Field(..., examples=['2026-10-19T09:30:00+00:00'])

    def to_cli(self) -> str:
        """Format report for CLI output"""
        basic = self.basic_stats
        lines = [f'Records: {basic.total_logs:,}']
        if basic.date_range.start:
            lines.append(f'Range: {basic.date_range.start} .. {basic.date_range.end}')
        lines.append(f'Sources: {basic.unique_sources}  IPs: {basic.unique_ips}')
        if basic.level_distribution:
            levels = ', '.join(f'{k}={v}' for k, v in sorted(basic.level_distribution.items()))
            lines.append(f'Levels: {levels}')
        if basic.error_rate is not None:
            lines.append(f'Error rate: {basic.error_rate:.1f}%  Warning rate: {basic.warning_rate:.1f}%')

        timing = self.time_analysis
        if timing.peak_hour is not None:
            lines.append(f'Peak hour: {timing.peak_hour:02d}:00  Peak day: {timing.peak_day}')
        if timing.logs_per_minute is not None:
            lines.append(f'Throughput: {timing.logs_per_minute:.2f} logs/min')

        errors = self.error_analysis
        lines.append(f'Errors: {errors.total_errors}')
        for pattern in errors.common_error_patterns or []:
            lines.append(f'  {pattern.pattern}: {pattern.count} ({pattern.percentage:.1f}%)')

        for ip in self.ip_analysis.suspicious_ips or []:
            lines.append(f'Suspicious IP {ip.ip} (score {ip.suspicious_score}): {"; ".join(ip.reasons)}')

        security = self.security_analysis
        if security.potential_threats or security.failed_attempts:
            lines.append(f'Potential threats: {security.potential_threats}  Failed attempts: {security.failed_attempts}')
            for pattern in security.suspicious_patterns:
                lines.append(f'  {pattern.pattern}: {pattern.count}')

        if self.recommendations:
            lines.append('Recommendations:')
            for rec in self.recommendations:
                lines.append(f'  - {rec.reason} ({rec.count}): {rec.advice}')

        return '\n'.join(lines)


# ============================================================================
# Anomaly detection
# ============================================================================


class AnomalyRecord(ReportModel):
    """A log record with its anomaly score attached"""

    timestamp: datetime
    raw_log: str
    level: str
    source: str
    message: str | None = None
    ip_address: str | None = None
    status_code: int | None = None
    response_size: int | None = None
    user_agent: str | None = None
    referrer: str | None = None
    method: str | None = None
    url: str | None = None
    protocol: str | None = None
    hostname: str | None = None
    service: str | None = None
    payload: dict[str, Any] | None = None
    anomaly_score: float = Field(..., description='Negated isolation score; lower is more anomalous')
    is_anomaly: bool
    anomaly_type: AnomalyType

    @classmethod
    def from_record(
        cls, record: LogRecord, anomaly_score: float, is_anomaly: bool, anomaly_type: AnomalyType
    ) -> 'AnomalyRecord':
        return cls(
            **record.to_dict(),
            anomaly_score=anomaly_score,
            is_anomaly=is_anomaly,
            anomaly_type=anomaly_type,
        )


class TimeDistribution(ReportModel):
    by_hour: dict[str, int] = Field(default_factory=dict)
    by_day: dict[str, int] = Field(default_factory=dict)


class AnomalySummary(ReportModel):
    """Histograms over every flagged record, not only the returned sample"""

    total_anomalies: int = 0
    anomaly_types: dict[str, int] = Field(default_factory=dict)
    top_sources: dict[str, int] = Field(default_factory=dict)
    severity_distribution: dict[str, int] = Field(default_factory=dict)
    time_distribution: TimeDistribution | None = None


class AnomalyDetectionResult(ReportModel):
    total: int = Field(0, description='Exact number of flagged records')
    anomalies: list[AnomalyRecord] = Field(default_factory=list, description='First 50 flagged records in input order')
    summary: AnomalySummary = Field(default_factory=AnomalySummary)

    def to_cli(self) -> str:
        """Format result for CLI output"""
        lines = [f'Anomalies: {self.total}']
        for anomaly_type, count in sorted(self.summary.anomaly_types.items(), key=lambda x: -x[1]):
            lines.append(f'  {anomaly_type}: {count}')
        if self.anomalies:
            lines.append('')
        for anomaly in self.anomalies:
            lines.append(f'{anomaly.anomaly_score:+.4f} [{anomaly.anomaly_type.value}] {anomaly.raw_log.strip()}')
        if self.total > len(self.anomalies):
            lines.append(f'... {self.total - len(self.anomalies)} more')
        return '\n'.join(lines)


# ============================================================================
# Advice (LLM collaborator contract)
# ============================================================================


class AdviceResponse(ReportModel):
    """Structured remediation advice"""

    root_cause: str = 'Unable to determine root cause'
    fix_steps: list[str] = Field(default_factory=list)
    prevention: list[str] = Field(default_factory=list)
    monitoring: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)
    confidence: str = Field('Medium', examples=['High', 'Medium', 'Low'])
