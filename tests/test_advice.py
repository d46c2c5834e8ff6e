"""Tests for the remediation advice contract."""

from datetime import timedelta

import pytest
from conftest import make_record

from logsight.advice import (
    FALLBACK_MONITORING,
    FALLBACK_ROOT_CAUSE,
    SYSTEM_PROMPT,
    AdviceParseError,
    build_advice_prompt,
    fallback_advice,
    parse_advice_response,
    sample_error_messages,
    summarize_records,
)
from logsight.analyze import StatisticalAnalyzer
from logsight.cache import NullCache
from logsight.records import Level


class TestBuildAdvicePrompt:
    def setup_method(self):
        self.records = [
            make_record(level=Level.ERROR, status_code=500, message='Database timeout while saving order'),
            make_record(status_code=404, message='GET /missing 404'),
            make_record(message='request ok'),
            make_record(level=Level.WARNING, message='slow but fine', ip_address='10.0.0.9'),
        ]
        self.report = StatisticalAnalyzer(cache=NullCache()).process(self.records)

    def test_summary_section(self):
        prompt = build_advice_prompt(self.records, self.report)
        assert 'Total logs: 4' in prompt
        assert 'Error rate: 25.0%' in prompt
        assert '"500":1' in prompt
        assert '"404":1' in prompt

    def test_includes_error_messages_and_recommendations(self):
        prompt = build_advice_prompt(self.records, self.report)
        assert 'Database timeout while saving order' in prompt
        assert 'request ok' not in prompt
        assert 'Frequent 500 errors: Check application error logs' in prompt
        assert '"root_cause"' in prompt
        assert prompt.endswith('documentation\n')

    def test_empty_report(self):
        report = StatisticalAnalyzer.empty_report()
        prompt = build_advice_prompt([], report)
        assert 'Total logs: 0' in prompt
        assert 'Error rate: 0.0%' in prompt
        assert 'Top HTTP errors: {}' in prompt

    def test_system_prompt(self):
        assert 'DevOps' in SYSTEM_PROMPT


class TestSampleErrorMessages:
    def test_keyword_match_case_insensitive(self):
        records = [
            make_record(message='Connection FAILED'),
            make_record(message='all good'),
            make_record(message=None),
            make_record(message='NullPointerException thrown'),
        ]
        assert sample_error_messages(records) == ['Connection FAILED', 'NullPointerException thrown']

    def test_limit(self):
        records = [make_record(message=f'error {i}') for i in range(12)]
        messages = sample_error_messages(records)
        assert len(messages) == 10
        assert messages[0] == 'error 0'


class TestParseAdviceResponse:
    def test_plain_json(self):
        advice = parse_advice_response(
            '{"root_cause": "Disk full", "fix_steps": ["Free space"], "confidence": "High"}'
        )
        assert advice.root_cause == 'Disk full'
        assert advice.fix_steps == ['Free space']
        assert advice.confidence == 'High'
        assert advice.prevention == []

    def test_json_embedded_in_text(self):
        text = 'Here is my analysis:\n```json\n{"root_cause": "Bad deploy", "monitoring": ["Alert on 5xx"]}\n```\n'
        advice = parse_advice_response(text)
        assert advice.root_cause == 'Bad deploy'
        assert advice.monitoring == ['Alert on 5xx']

    def test_defaults_for_missing_keys(self):
        advice = parse_advice_response('{}')
        assert advice.root_cause == 'Unable to determine root cause'
        assert advice.confidence == 'Medium'
        assert advice.fix_steps == []

    def test_malformed_lists_are_dropped(self):
        advice = parse_advice_response('{"fix_steps": "restart it", "references": [1, 2]}')
        assert advice.fix_steps == []
        assert advice.references == ['1', '2']

    def test_no_json(self):
        with pytest.raises(AdviceParseError, match='No valid JSON'):
            parse_advice_response('I cannot help with that')

    def test_broken_json_block(self):
        with pytest.raises(AdviceParseError, match='Failed to parse'):
            parse_advice_response('answer: {"root_cause": }')

    def test_not_an_object(self):
        with pytest.raises(AdviceParseError, match='JSON object'):
            parse_advice_response('["a", "b"]')

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_advice_response('')


class TestFallbackAdvice:
    def test_uses_rule_recommendations(self):
        records = [
            make_record(status_code=500, message='boom'),
            make_record(status_code=404, message='missing'),
        ]
        report = StatisticalAnalyzer(cache=NullCache()).process(records)
        advice = fallback_advice(report)
        assert advice.root_cause == FALLBACK_ROOT_CAUSE
        assert advice.fix_steps == [r.advice for r in report.recommendations]
        assert len(advice.fix_steps) == 2
        assert advice.monitoring == FALLBACK_MONITORING
        assert advice.confidence == 'Medium'

    def test_lists_are_copies(self):
        advice = fallback_advice(StatisticalAnalyzer.empty_report())
        advice.monitoring.append('extra')
        assert 'extra' not in FALLBACK_MONITORING
        assert advice.fix_steps == []


class TestSummarizeRecords:
    def test_empty(self):
        assert summarize_records([]) == 'No logs to summarize'

    def test_summary_text(self):
        first = make_record(level=Level.ERROR)
        records = [
            first,
            make_record(level=Level.WARNING, ip_address=None, source='nginx'),
            make_record(timestamp=first.timestamp + timedelta(minutes=5), ip_address='10.0.0.2'),
        ]
        end = records[-1].timestamp.isoformat()
        assert summarize_records(records) == (
            f'Analysis of 3 logs from {first.timestamp.isoformat()} to {end}. '
            'Found 1 errors and 1 warnings across 2 sources and 2 unique IP addresses.'
        )
