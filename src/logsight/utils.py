"""Utility functions for logsight"""

import logging
import os


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_int_env(key: str, default: int) -> int:
    """Get integer value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_float_env(key: str, default: float) -> float:
    """Get float value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def get_bool_env(key: str, default: bool) -> bool:
    """
    Get boolean from environment variable, return default if not set.

    Recognizes: true/false, yes/no, 1/0 (case-insensitive)

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Boolean value or default
    """
    val = os.getenv(key)
    if val is None:
        return default
    val_lower = val.lower()
    if val_lower in ('true', 'yes', '1'):
        return True
    elif val_lower in ('false', 'no', '0'):
        return False
    return default


def get_cache_ttl_seconds() -> float:
    """TTL of analysis results, LOGSIGHT_CACHE_TTL_SECONDS (default 5 minutes)."""
    return get_float_env('LOGSIGHT_CACHE_TTL_SECONDS', 300.0)


def is_cache_enabled() -> bool:
    return get_bool_env('LOGSIGHT_CACHE_ENABLED', True)


def get_default_contamination() -> float:
    return get_float_env('LOGSIGHT_CONTAMINATION', 0.1)


def get_default_random_state() -> int:
    return get_int_env('LOGSIGHT_RANDOM_STATE', 42)


def get_default_n_estimators() -> int:
    return get_int_env('LOGSIGHT_N_ESTIMATORS', 100)


def get_default_max_depth() -> int:
    return get_int_env('LOGSIGHT_MAX_DEPTH', 10)


def setup_logging(level_name: str | None = None) -> int:
    """
    Configure root logging for command line use.

    Level priority: explicit argument, then LOGSIGHT_LOG_LEVEL, then WARNING.

    Returns:
        The numeric level that was applied
    """
    name = (level_name or get_str_env('LOGSIGHT_LOG_LEVEL', 'WARNING')).upper()
    level = getattr(logging, name, logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    return level
