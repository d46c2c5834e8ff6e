"""Tests for log format detection."""

from logsight.parsing import detect_format
from logsight.parsing.detect import sample_lines
from logsight.records import FormatVariant


ACCESS_LINE = '127.0.0.1 - - [10/Oct/2023:13:55:36 -0700] "GET /x HTTP/1.1" 200 1024'
SYSLOG_LINE = 'Oct 11 22:14:15 web01 sshd[1234]: Accepted publickey for deploy'


class TestDetectFormat:
    def test_single_json_line(self):
        assert detect_format(['{"level":"INFO","message":"x"}']) == FormatVariant.JSON

    def test_access_line_credited_to_apache(self):
        assert detect_format([ACCESS_LINE]) == FormatVariant.APACHE

    def test_syslog(self):
        assert detect_format([SYSLOG_LINE] * 3) == FormatVariant.SYSLOG

    def test_json_needs_more_than_half(self):
        # Exactly half is not enough
        lines = ['{"a": 1}', '{"b": 2}', ACCESS_LINE, ACCESS_LINE]
        assert detect_format(lines) == FormatVariant.APACHE

    def test_json_arrays_do_not_count(self):
        assert detect_format(['[1, 2]', '[3]']) == FormatVariant.CUSTOM

    def test_tie_falls_back_to_custom(self):
        assert detect_format([ACCESS_LINE, SYSLOG_LINE]) == FormatVariant.CUSTOM

    def test_no_matches_is_custom(self):
        assert detect_format(['free text', 'more free text']) == FormatVariant.CUSTOM

    def test_empty_input_is_custom(self):
        assert detect_format([]) == FormatVariant.CUSTOM
        assert detect_format(['', '   ']) == FormatVariant.CUSTOM

    def test_only_first_ten_non_empty_lines_sampled(self):
        lines = [''] * 5 + ['free text'] * 10 + [SYSLOG_LINE] * 50
        assert detect_format(lines) == FormatVariant.CUSTOM

    def test_majority_wins(self):
        lines = [SYSLOG_LINE, SYSLOG_LINE, ACCESS_LINE, 'noise']
        assert detect_format(lines) == FormatVariant.SYSLOG


class TestSampleLines:
    def test_skips_blank_lines(self):
        assert sample_lines(['', 'a', ' ', 'b'], size=10) == ['a', 'b']

    def test_respects_size(self):
        assert sample_lines([str(i) for i in range(20)], size=3) == ['0', '1', '2']
