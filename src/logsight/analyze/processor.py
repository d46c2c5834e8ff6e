"""Statistical analyzer: records in, AnalysisReport out."""

import logging
from time import time

from logsight import prometheus as prom
from logsight.analyze.basic import basic_stats, time_analysis
from logsight.analyze.errors import error_analysis
from logsight.analyze.ips import ip_analysis
from logsight.analyze.recommendations import recommendations
from logsight.analyze.security import security_analysis
from logsight.analyze.sources import performance_metrics, source_analysis
from logsight.cache import NullCache, ResultCache, fingerprint
from logsight.models import AnalysisReport
from logsight.records import LogRecord, now
from logsight.utils import get_cache_ttl_seconds, is_cache_enabled


logger = logging.getLogger(__name__)


class StatisticalAnalyzer:
    """Computes analysis reports, memoized per batch fingerprint.

    The cache only affects latency. Callers always get their own copy of a
    report, so editing one never changes what the cache serves next. Pass ``NullCache()`` to disable it, or any
    object with ``get``/``set`` to substitute it.
    """

    def __init__(self, cache: ResultCache | NullCache | None = None, ttl_seconds: float | None = None):
        if cache is None:
            if is_cache_enabled():
                ttl = ttl_seconds if ttl_seconds is not None else get_cache_ttl_seconds()
                cache = ResultCache(ttl)
            else:
                cache = NullCache()
        self.cache = cache

    def process(self, records: list[LogRecord]) -> AnalysisReport:
        start_time = time()
        if not records:
            prom.record_analysis('empty', time() - start_time)
            return self.empty_report()

        key = fingerprint(records)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f'Cache hit for {key}')
            prom.record_analysis('hit', time() - start_time)
            return cached.model_copy(deep=True)

        logger.info(f'Processing {len(records)} records')
        report = AnalysisReport(
            basic_stats=basic_stats(records),
            time_analysis=time_analysis(records),
            error_analysis=error_analysis(records),
            ip_analysis=ip_analysis(records),
            source_analysis=source_analysis(records),
            performance_metrics=performance_metrics(records),
            security_analysis=security_analysis(records),
            recommendations=recommendations(records),
            processed_at=now().isoformat(),
        )
        self.cache.set(key, report)

        elapsed = time() - start_time
        logger.debug(f'Analysis of {len(records)} records took {elapsed:.3f}s')
        prom.record_analysis('miss', elapsed)
        return report.model_copy(deep=True)

    @staticmethod
    def empty_report() -> AnalysisReport:
        return AnalysisReport(processed_at=now().isoformat())


_default_analyzer: StatisticalAnalyzer | None = None


def process_records(records: list[LogRecord]) -> AnalysisReport:
    """Analyze ``records`` with a shared, lazily created analyzer."""
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = StatisticalAnalyzer()
    return _default_analyzer.process(records)
