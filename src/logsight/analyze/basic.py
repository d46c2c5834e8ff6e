"""Batch-wide counts and temporal patterns."""

from logsight.analyze.helpers import count_by, peak_key, rate
from logsight.models import BasicStats, DateRange, TimeAnalysis
from logsight.records import Level, LogRecord


def basic_stats(records: list[LogRecord]) -> BasicStats:
    if not records:
        return BasicStats()

    total = len(records)
    timestamps = [r.timestamp for r in records]
    levels = count_by(records, lambda r: r.level)

    return BasicStats(
        total_logs=total,
        unique_sources=len({r.source for r in records if r.source}),
        unique_ips=len({r.ip_address for r in records if r.ip_address}),
        date_range=DateRange(start=min(timestamps).isoformat(), end=max(timestamps).isoformat()),
        level_distribution=levels,
        error_rate=rate(levels.get(Level.ERROR.value, 0), total),
        warning_rate=rate(levels.get(Level.WARNING.value, 0), total),
        status_distribution=count_by(records, lambda r: r.status_code),
        error_status_rate=rate(sum(1 for r in records if r.status_code and r.status_code >= 400), total),
        server_error_rate=rate(sum(1 for r in records if r.status_code and r.status_code >= 500), total),
    )


def time_analysis(records: list[LogRecord]) -> TimeAnalysis:
    """Hour, weekday and date histograms plus throughput over the batch span.

    Hours come from each record's own UTC offset. Throughput is left undefined
    for fewer than two records or a non-positive span.
    """
    if not records:
        return TimeAnalysis()

    hourly: dict[int, int] = {}
    daily: dict[int, int] = {}
    dates: dict[str, int] = {}
    for record in records:
        hour = record.timestamp.hour
        day = record.day_of_week
        date = record.timestamp.date().isoformat()
        hourly[hour] = hourly.get(hour, 0) + 1
        daily[day] = daily.get(day, 0) + 1
        dates[date] = dates.get(date, 0) + 1

    analysis = TimeAnalysis(
        hourly_distribution=hourly,
        daily_distribution=daily,
        date_distribution=dates,
        peak_hour=peak_key(hourly),
        peak_day=peak_key(daily),
    )

    if len(records) > 1:
        timestamps = [r.timestamp for r in records]
        span = (max(timestamps) - min(timestamps)).total_seconds()
        if span > 0:
            per_second = len(records) / span
            analysis.logs_per_second = per_second
            analysis.logs_per_minute = per_second * 60
            analysis.logs_per_hour = per_second * 3600

    return analysis
