"""Isolation forest anomaly detector for parsed log records."""

import logging
import math
import re
from dataclasses import dataclass
from time import time

import numpy as np

from logsight import prometheus as prom
from logsight.analyze.helpers import count_by
from logsight.anomaly.features import FEATURE_NAMES, SPECIAL_CHARS_PATTERN, Scaler, extract_features
from logsight.anomaly.forest import Node, grow_forest, score_rows
from logsight.models import AnomalyDetectionResult, AnomalyRecord, AnomalySummary, TimeDistribution
from logsight.records import AnomalyType, Level, LogRecord
from logsight.utils import (
    get_default_contamination,
    get_default_max_depth,
    get_default_n_estimators,
    get_default_random_state,
)


logger = logging.getLogger(__name__)

MAX_REPORTED_ANOMALIES = 50

LARGE_RESPONSE_BYTES = 1_000_000
SUSPICIOUS_SCORE = -0.5
SQL_KEYWORDS_PATTERN = re.compile(r'(select|insert|update|delete|sql)', re.IGNORECASE)


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Everything ``detect_anomalies`` needs from a fit.

    Holding this value instead of relying on the detector's stored model makes
    detection safe to run alongside a refit of the same detector.
    """

    scaler: Scaler
    trees: tuple[Node, ...]
    n_samples: int
    feature_names: tuple[str, ...] = FEATURE_NAMES


def classify_anomaly_type(record: LogRecord, score: float) -> AnomalyType:
    """First matching rule wins."""
    if record.level == Level.ERROR or (record.status_code and record.status_code >= 500):
        return AnomalyType.ERROR_SPIKE

    hour = record.timestamp.hour
    if hour < 6 or hour > 22:
        return AnomalyType.UNUSUAL_TIME

    if record.response_size and record.response_size > LARGE_RESPONSE_BYTES:
        return AnomalyType.LARGE_RESPONSE

    if score < SUSPICIOUS_SCORE:
        return AnomalyType.SUSPICIOUS_IP

    if record.message and record.url:
        if SQL_KEYWORDS_PATTERN.search(record.message) and SPECIAL_CHARS_PATTERN.search(record.url):
            return AnomalyType.POTENTIAL_SQL_INJECTION

    if record.method and record.method != 'GET' and record.url and '?' in record.url:
        return AnomalyType.UNUSUAL_REQUEST

    return AnomalyType.UNKNOWN


def contamination_labels(scores: list[float], contamination: float) -> list[bool]:
    """Flag scores strictly below the value at rank ``floor(N * contamination)``.

    Ties at the cutoff are not flagged, so fewer than the nominal fraction can
    be returned.
    """
    if not scores:
        return []
    cutoff = sorted(scores)[math.floor(len(scores) * contamination)]
    return [score < cutoff for score in scores]


def summarize_anomalies(anomalies: list[AnomalyRecord]) -> AnomalySummary:
    """Histograms over every flagged record."""
    if not anomalies:
        return AnomalySummary()

    by_hour: dict[str, int] = {}
    by_day: dict[str, int] = {}
    for anomaly in anomalies:
        hour = str(anomaly.timestamp.hour)
        day = anomaly.timestamp.date().isoformat()
        by_hour[hour] = by_hour.get(hour, 0) + 1
        by_day[day] = by_day.get(day, 0) + 1

    return AnomalySummary(
        total_anomalies=len(anomalies),
        anomaly_types=count_by(anomalies, lambda a: a.anomaly_type),
        top_sources=count_by(anomalies, lambda a: a.source),
        severity_distribution=count_by(anomalies, lambda a: a.level),
        time_distribution=TimeDistribution(by_hour=by_hour, by_day=by_day),
    )


class AnomalyDetector:
    """Unsupervised anomaly detector.

    Unfit until ``fit`` succeeds; ``detect_anomalies`` on an unfit detector
    returns the empty result. Each fit replaces the previous model.

    ``max_samples`` is kept for configuration parity but trees are always
    grown on the full fit batch.
    """

    def __init__(
        self,
        contamination: float | None = None,
        random_state: int | None = None,
        n_estimators: int | None = None,
        max_depth: int | None = None,
        max_samples: int = 256,
        rng: np.random.Generator | None = None,
    ):
        contamination = contamination if contamination is not None else get_default_contamination()
        if not 0 < contamination <= 0.5:
            raise ValueError(f'contamination must be in (0, 0.5], got {contamination}')

        self.contamination = contamination
        self.random_state = random_state if random_state is not None else get_default_random_state()
        self.n_estimators = n_estimators if n_estimators is not None else get_default_n_estimators()
        self.max_depth = max_depth if max_depth is not None else get_default_max_depth()
        self.max_samples = max_samples
        self.rng = rng
        self.model: FittedModel | None = None

    @property
    def is_fitted(self) -> bool:
        return self.model is not None

    def fit(self, records: list[LogRecord]) -> FittedModel | None:
        if not records:
            logger.warning('No records provided for fitting')
            self.model = None
            return None

        start_time = time()
        logger.info(f'Fitting anomaly detection model with {len(records)} records')

        features = extract_features(records)
        scaler = Scaler.fit(features)
        rng = self.rng if self.rng is not None else np.random.default_rng(self.random_state)
        trees = grow_forest(scaler.transform(features), self.n_estimators, self.max_depth, rng)
        self.model = FittedModel(scaler=scaler, trees=trees, n_samples=len(records))

        elapsed = time() - start_time
        logger.info(f'Fitted {len(trees)} trees in {elapsed:.3f}s')
        prom.record_fit(elapsed)
        return self.model

    def score(self, records: list[LogRecord], model: FittedModel) -> list[float]:
        """Scores for ``records`` using the fit-time scaler of ``model``."""
        X = model.scaler.transform(extract_features(records))
        return score_rows(X, model.trees, model.n_samples).tolist()

    def detect_anomalies(
        self,
        records: list[LogRecord],
        threshold: float | None = None,
        model: FittedModel | None = None,
    ) -> AnomalyDetectionResult:
        """Score, flag and classify ``records``.

        Args:
            records: Batch to score; may differ from the fit batch
            threshold: Flag scores below this value instead of using contamination
            model: Model to use instead of the one stored by the last ``fit``

        Returns:
            Exact flagged total, the first 50 flagged records in input order and
            summary histograms over all flagged records
        """
        start_time = time()
        model = model or self.model
        if model is None:
            logger.warning('Model not fitted, call fit() first')
            prom.record_detection('unfitted', time() - start_time, 0)
            return AnomalyDetectionResult()
        if not records:
            prom.record_detection('empty', time() - start_time, 0)
            return AnomalyDetectionResult()

        scores = self.score(records, model)
        if threshold is not None:
            labels = [score < threshold for score in scores]
        else:
            labels = contamination_labels(scores, self.contamination)

        anomalies = [
            AnomalyRecord.from_record(record, score, True, classify_anomaly_type(record, score))
            for record, score, flagged in zip(records, scores, labels)
            if flagged
        ]

        elapsed = time() - start_time
        logger.info(f'Flagged {len(anomalies)} of {len(records)} records in {elapsed:.3f}s')
        prom.record_detection('success', elapsed, len(anomalies))
        return AnomalyDetectionResult(
            total=len(anomalies),
            anomalies=anomalies[:MAX_REPORTED_ANOMALIES],
            summary=summarize_anomalies(anomalies),
        )
