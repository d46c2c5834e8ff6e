"""Prometheus metrics for logsight"""

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

# ============================================================================
# Parsing Metrics
# ============================================================================

# Lines turned into records, by the format that produced them
lines_parsed_total = Counter(
    'logsight_lines_parsed_total',
    'Total number of non-blank lines parsed into records',
    ['format'],  # apache, nginx, syslog, json, custom
)

# Lines that failed their grammar and became default records
default_records_total = Counter(
    'logsight_default_records_total', 'Total number of lines that degraded to a default record'
)


# ============================================================================
# Analysis Metrics
# ============================================================================

analyze_requests_total = Counter(
    'logsight_analyze_requests_total',
    'Total number of statistical analysis requests',
    ['cache'],  # hit, miss, empty
)

analyze_duration_seconds = Histogram(
    'logsight_analyze_duration_seconds',
    'Time spent computing analysis reports',
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


# ============================================================================
# Anomaly Detection Metrics
# ============================================================================

model_fits_total = Counter('logsight_model_fits_total', 'Total number of isolation forest fits')

fit_duration_seconds = Histogram(
    'logsight_fit_duration_seconds',
    'Time spent fitting the isolation forest',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

detect_requests_total = Counter(
    'logsight_detect_requests_total',
    'Total number of anomaly detection requests',
    ['status'],  # success, unfitted, empty
)

anomalies_flagged_total = Counter('logsight_anomalies_flagged_total', 'Total number of records flagged as anomalous')

detect_duration_seconds = Histogram(
    'logsight_detect_duration_seconds',
    'Time spent scoring records',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)


# ============================================================================
# Helper Functions
# ============================================================================


def record_parse(format_name: str, num_records: int, num_defaulted: int):
    """
    Record metrics for one parsed batch.

    Args:
        format_name: Format variant used for the batch
        num_records: Number of records produced
        num_defaulted: Number of records that fell back to the default record
    """
    lines_parsed_total.labels(format=format_name).inc(num_records)
    if num_defaulted:
        default_records_total.inc(num_defaulted)


def record_analysis(cache: str, duration: float):
    """
    Record metrics for an analysis request.

    Args:
        cache: Cache outcome (hit, miss, empty)
        duration: Request duration in seconds
    """
    analyze_requests_total.labels(cache=cache).inc()
    analyze_duration_seconds.observe(duration)


def record_fit(duration: float):
    """Record a completed model fit."""
    model_fits_total.inc()
    fit_duration_seconds.observe(duration)


def record_detection(status: str, duration: float, num_flagged: int):
    """
    Record metrics for a detection request.

    Args:
        status: Request status (success, unfitted, empty)
        duration: Request duration in seconds
        num_flagged: Number of records flagged as anomalous
    """
    detect_requests_total.labels(status=status).inc()
    detect_duration_seconds.observe(duration)
    anomalies_flagged_total.inc(num_flagged)


def write_metrics(path: str):
    """Write the default registry to ``path`` in the Prometheus text format."""
    write_to_textfile(path, REGISTRY)
