"""Tests for the isolation forest anomaly detector."""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest
from conftest import make_record

from logsight.anomaly import (
    MAX_REPORTED_ANOMALIES,
    AnomalyDetector,
    FittedModel,
    classify_anomaly_type,
    contamination_labels,
)
from logsight.records import AnomalyType, Level


DAY = datetime(2023, 10, 10, tzinfo=timezone.utc)


def normal_records(count: int = 100) -> list:
    records = []
    for i in range(count):
        timestamp = DAY + timedelta(hours=9 + i % 9, minutes=(i * 7) % 60)
        records.append(
            make_record(
                timestamp=timestamp,
                level=Level.INFO,
                status_code=200,
                response_size=1000 + (i * 37) % 1000,
                ip_address=f'10.0.0.{i % 5}',
                method='GET',
                url=f'/page/{i % 10}',
                message=f'GET /page/{i % 10} 200',
            )
        )
    return records


def outlier_records(count: int = 10) -> list:
    return [
        make_record(
            timestamp=DAY + timedelta(hours=3, minutes=i),
            level=Level.ERROR,
            status_code=500,
            response_size=2_000_000 + i * 10_000,
            ip_address=f'203.0.113.{i}',
            method='POST',
            url='/checkout',
            message=f'Internal server error while processing order {i}',
        )
        for i in range(count)
    ]


class TestAnomalyDetector:
    """End-to-end fit and detect."""

    def setup_method(self):
        self.normal = normal_records()
        self.outliers = outlier_records()
        self.records = self.normal + self.outliers
        self.detector = AnomalyDetector(contamination=0.1, random_state=42)

    def test_outliers_rank_lowest(self):
        model = self.detector.fit(self.records)
        scores = self.detector.score(self.records, model)
        lowest = sorted(range(len(scores)), key=lambda i: scores[i])[:10]
        outlier_indexes = set(range(100, 110))
        assert len(outlier_indexes.intersection(lowest)) > 5

    def test_contamination_flags_at_most_fraction(self):
        self.detector.fit(self.records)
        result = self.detector.detect_anomalies(self.records)
        assert 0 < result.total <= 11
        assert result.summary.total_anomalies == result.total
        assert len(result.anomalies) == result.total
        assert all(a.is_anomaly for a in result.anomalies)
        assert sum(result.summary.anomaly_types.values()) == result.total

    def test_anomalies_keep_input_order(self):
        self.detector.fit(self.records)
        result = self.detector.detect_anomalies(self.records, threshold=0.0)
        raw = [a.timestamp for a in result.anomalies]
        expected = [r.timestamp for r in self.records[:MAX_REPORTED_ANOMALIES]]
        assert raw == expected

    def test_threshold_overrides_contamination(self):
        self.detector.fit(self.records)
        result = self.detector.detect_anomalies(self.records, threshold=0.0)
        # Every score is negative
        assert result.total == 110
        assert len(result.anomalies) == MAX_REPORTED_ANOMALIES
        assert result.summary.total_anomalies == 110
        assert result.summary.severity_distribution == {'INFO': 100, 'ERROR': 10}
        assert result.summary.anomaly_types[AnomalyType.ERROR_SPIKE.value] == 10

        none = self.detector.detect_anomalies(self.records, threshold=-1.0)
        assert none.total == 0

    def test_summary_time_distribution(self):
        self.detector.fit(self.records)
        result = self.detector.detect_anomalies(self.outliers, threshold=0.0)
        assert result.summary.time_distribution.by_hour == {'3': 10}
        assert result.summary.time_distribution.by_day == {'2023-10-10': 10}
        assert result.summary.top_sources == {'apache': 10}

    def test_same_seed_reproduces_scores(self):
        other = AnomalyDetector(contamination=0.1, random_state=42)
        first = self.detector.score(self.records, self.detector.fit(self.records))
        second = other.score(self.records, other.fit(self.records))
        assert first == second

    def test_refit_with_same_seed_is_identical(self):
        first = self.detector.fit(self.records)
        second = self.detector.fit(self.records)
        assert first.trees == second.trees
        np.testing.assert_array_equal(first.scaler.mean, second.scaler.mean)
        np.testing.assert_array_equal(first.scaler.std, second.scaler.std)

    def test_injected_generator(self):
        detector = AnomalyDetector(n_estimators=5, rng=np.random.default_rng(7))
        first = detector.fit(self.records)
        second = detector.fit(self.records)
        assert len(first.trees) == 5
        # The injected generator keeps advancing across fits
        assert first.trees != second.trees

    def test_detect_on_new_batch_uses_fit_scaler(self):
        model = self.detector.fit(self.normal)
        result = self.detector.detect_anomalies(self.outliers)
        assert model.scaler.mean[0] == pytest.approx(sum(r.timestamp.hour for r in self.normal) / 100)
        assert model.n_samples == 100
        # floor(10 * 0.1) = 1, so at most the single lowest score is below the cutoff
        assert result.total <= 1

    def test_model_threaded_explicitly(self):
        model = self.detector.fit(self.records)
        fresh = AnomalyDetector(contamination=0.1)
        assert not fresh.is_fitted
        result = fresh.detect_anomalies(self.records, model=model)
        assert result.total > 0

    def test_fitted_model_shape(self):
        model = self.detector.fit(self.records)
        assert isinstance(model, FittedModel)
        assert len(model.trees) == 100
        assert model.n_samples == 110
        assert len(model.scaler.mean) == len(model.feature_names) == 21
        assert self.detector.is_fitted

    def test_result_serializes(self):
        self.detector.fit(self.records)
        data = self.detector.detect_anomalies(self.records).to_dict()
        assert set(data) == {'total', 'anomalies', 'summary'}
        first = data['anomalies'][0]
        assert {'anomaly_score', 'is_anomaly', 'anomaly_type', 'raw_log', 'timestamp'} <= set(first)


class TestEmptyAndUnfitted:
    def test_detect_before_fit(self, caplog):
        detector = AnomalyDetector()
        result = detector.detect_anomalies([make_record()])
        assert result.total == 0
        assert result.anomalies == []
        assert 'Model not fitted' in caplog.text

    def test_detect_empty(self):
        detector = AnomalyDetector()
        detector.fit([make_record(), make_record(status_code=500)])
        result = detector.detect_anomalies([])
        assert result.to_dict() == {
            'total': 0,
            'anomalies': [],
            'summary': {
                'total_anomalies': 0,
                'anomaly_types': {},
                'top_sources': {},
                'severity_distribution': {},
            },
        }

    def test_fit_empty_clears_model(self):
        detector = AnomalyDetector()
        detector.fit([make_record()])
        assert detector.fit([]) is None
        assert not detector.is_fitted

    def test_single_record_fit(self):
        detector = AnomalyDetector()
        detector.fit([make_record()])
        result = detector.detect_anomalies([make_record()])
        # One record: the cutoff is its own score, nothing is strictly below it
        assert result.total == 0


class TestConfiguration:
    @pytest.mark.parametrize('contamination', [0, -0.1, 0.51, 1.0])
    def test_invalid_contamination(self, contamination):
        with pytest.raises(ValueError, match='contamination'):
            AnomalyDetector(contamination=contamination)

    def test_upper_bound_allowed(self):
        assert AnomalyDetector(contamination=0.5).contamination == 0.5

    def test_defaults(self):
        detector = AnomalyDetector()
        assert detector.contamination == 0.1
        assert detector.random_state == 42
        assert detector.n_estimators == 100
        assert detector.max_depth == 10
        assert detector.max_samples == 256

    def test_environment_defaults(self, monkeypatch):
        monkeypatch.setenv('LOGSIGHT_CONTAMINATION', '0.2')
        monkeypatch.setenv('LOGSIGHT_N_ESTIMATORS', '7')
        detector = AnomalyDetector(max_depth=4)
        assert detector.contamination == 0.2
        assert detector.n_estimators == 7
        assert detector.max_depth == 4


class TestContaminationLabels:
    def test_rank_cutoff(self):
        assert contamination_labels([0.4, 0.1, 0.3, 0.2], 0.5) == [False, True, False, True]

    def test_ties_at_cutoff_not_flagged(self):
        assert contamination_labels([1.0, 1.0, 1.0, 1.0], 0.25) == [False, False, False, False]

    def test_empty(self):
        assert contamination_labels([], 0.1) == []


class TestClassifyAnomalyType:
    def test_error_spike(self):
        assert classify_anomaly_type(make_record(level=Level.ERROR), 0) == AnomalyType.ERROR_SPIKE
        assert classify_anomaly_type(make_record(status_code=502), 0) == AnomalyType.ERROR_SPIKE

    def test_unusual_time(self):
        late = make_record(timestamp=DAY + timedelta(hours=23))
        early = make_record(timestamp=DAY + timedelta(hours=5, minutes=59))
        edge = make_record(timestamp=DAY + timedelta(hours=22, minutes=59))
        assert classify_anomaly_type(late, 0) == AnomalyType.UNUSUAL_TIME
        assert classify_anomaly_type(early, 0) == AnomalyType.UNUSUAL_TIME
        assert classify_anomaly_type(edge, 0) == AnomalyType.UNKNOWN

    def test_large_response(self):
        assert classify_anomaly_type(make_record(response_size=1_000_001), 0) == AnomalyType.LARGE_RESPONSE

    def test_suspicious_ip(self):
        assert classify_anomaly_type(make_record(), -0.51) == AnomalyType.SUSPICIOUS_IP
        assert classify_anomaly_type(make_record(), -0.5) == AnomalyType.UNKNOWN

    def test_potential_sql_injection(self):
        record = make_record(message="select * from users", url="/q?id='1'")
        assert classify_anomaly_type(record, 0) == AnomalyType.POTENTIAL_SQL_INJECTION

    def test_unusual_request(self):
        record = make_record(method='POST', url='/api?debug=1', message='POST /api 200')
        assert classify_anomaly_type(record, 0) == AnomalyType.UNUSUAL_REQUEST
        get = make_record(method='GET', url='/api?debug=1')
        assert classify_anomaly_type(get, 0) == AnomalyType.UNKNOWN

    def test_priority_order(self):
        record = make_record(level=Level.ERROR, timestamp=DAY + timedelta(hours=3), response_size=5_000_000)
        assert classify_anomaly_type(record, -0.9) == AnomalyType.ERROR_SPIKE
