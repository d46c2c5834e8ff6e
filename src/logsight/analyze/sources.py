"""Per-source volume and performance metrics."""

from logsight.analyze.helpers import count_by, group_by, percentile, population_std, rate, top_n, upper_median
from logsight.models import PerformanceMetrics, ResponseSizeStats, SourceAnalysis, SourceDetail, UrlLengthStats
from logsight.records import Level, LogRecord


LONG_URL_LENGTH = 200


def source_analysis(records: list[LogRecord]) -> SourceAnalysis:
    if not records:
        return SourceAnalysis()

    groups = group_by(records, lambda r: r.source)
    distribution = {source: len(items) for source, items in groups.items()}

    details = {}
    for source, items in groups.items():
        errors = sum(1 for r in items if r.level == Level.ERROR)
        # Averaged over every record of the source, sizeless ones count as zero
        total_size = sum(r.response_size or 0 for r in items)
        details[source] = SourceDetail(
            log_count=len(items),
            error_rate=rate(errors, len(items)),
            avg_response_size=total_size / len(items),
        )

    return SourceAnalysis(
        total_sources=len(groups),
        source_distribution=distribution,
        top_sources=top_n(distribution, 10),
        source_details=details,
    )


def response_size_stats(sizes: list[int]) -> ResponseSizeStats | None:
    if not sizes:
        return None
    return ResponseSizeStats(
        mean=sum(sizes) / len(sizes),
        median=upper_median(sizes),
        std=population_std(sizes),
        min=min(sizes),
        max=max(sizes),
        percentile_95=percentile(sizes, 95),
        percentile_99=percentile(sizes, 99),
    )


def performance_metrics(records: list[LogRecord]) -> PerformanceMetrics:
    if not records:
        return PerformanceMetrics()

    metrics = PerformanceMetrics(
        response_size=response_size_stats([r.response_size for r in records if r.response_size]),
        request_methods=count_by(records, lambda r: r.method),
    )

    url_lengths = [len(r.url) for r in records if r.url]
    if url_lengths:
        metrics.url_length = UrlLengthStats(
            mean=sum(url_lengths) / len(url_lengths),
            max=max(url_lengths),
            long_urls=sum(1 for length in url_lengths if length > LONG_URL_LENGTH),
        )
    return metrics
