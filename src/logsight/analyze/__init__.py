"""Statistical analysis of parsed log records.

This module provides:
- StatisticalAnalyzer, the cached report builder
- One public function per report section
- Suspicious IP scoring and rule-based recommendations
"""

from .basic import basic_stats, time_analysis
from .errors import ERROR_PATTERNS, common_error_patterns, error_analysis, is_error
from .helpers import count_by, peak_key, percentile, population_std, upper_median
from .ips import identify_suspicious_ips, ip_analysis
from .processor import StatisticalAnalyzer, process_records
from .recommendations import RULES, Rule, recommendations
from .security import ATTACK_PATTERNS, security_analysis
from .sources import performance_metrics, source_analysis


__all__ = [
    # Analyzer
    'StatisticalAnalyzer',
    'process_records',
    # Sections
    'basic_stats',
    'error_analysis',
    'ip_analysis',
    'performance_metrics',
    'recommendations',
    'security_analysis',
    'source_analysis',
    'time_analysis',
    # Building blocks
    'ATTACK_PATTERNS',
    'ERROR_PATTERNS',
    'RULES',
    'Rule',
    'common_error_patterns',
    'count_by',
    'identify_suspicious_ips',
    'is_error',
    'peak_key',
    'percentile',
    'population_std',
    'upper_median',
]
