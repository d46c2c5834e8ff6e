"""Isolation forest anomaly detection over parsed log records."""

from .detector import (
    MAX_REPORTED_ANOMALIES,
    AnomalyDetector,
    FittedModel,
    classify_anomaly_type,
    contamination_labels,
    summarize_anomalies,
)
from .features import FEATURE_NAMES, Scaler, extract_features, hash_source, record_features
from .forest import (
    EULER_GAMMA,
    Node,
    build_tree,
    expected_path_length,
    grow_forest,
    path_length,
    path_lengths,
    score_rows,
)


__all__ = [
    # Detector
    'AnomalyDetector',
    'FittedModel',
    'MAX_REPORTED_ANOMALIES',
    'classify_anomaly_type',
    'contamination_labels',
    'summarize_anomalies',
    # Features
    'FEATURE_NAMES',
    'Scaler',
    'extract_features',
    'hash_source',
    'record_features',
    # Forest
    'EULER_GAMMA',
    'Node',
    'build_tree',
    'expected_path_length',
    'grow_forest',
    'path_length',
    'path_lengths',
    'score_rows',
]
