"""
CryptoPulse — Tests for JSON extraction from model output
"""
import json

from cryptopulse.analysis.extractor import extract_json


class TestExtractJson:
    def test_fenced_block(self):
        text = 'Sure!\n```json\n{"items": [], "overallSentiment": "calm"}\n```\nBye'
        assert extract_json(text) == {"items": [], "overallSentiment": "calm"}

    def test_fenced_block_preferred_over_outer_braces(self):
        text = 'noise {"wrong": true} ```json\n{"right": 1}\n``` trailing }'
        assert extract_json(text) == {"right": 1}

    def test_bare_brace_span(self):
        payload = {"overallSentiment": "x", "items": [{"id": "1"}]}
        text = f"The report follows: {json.dumps(payload)} -- end of report"
        assert extract_json(text) == payload

    def test_pure_json(self):
        assert extract_json('{"a": {"b": [1, 2]}}') == {"a": {"b": [1, 2]}}

    def test_no_json_returns_none(self):
        assert extract_json("The market is quiet today.") is None

    def test_malformed_span_fails_closed(self):
        assert extract_json("prefix {\"items\": [1, 2,} suffix") is None

    def test_malformed_fenced_block_fails_closed(self):
        assert extract_json("```json\n{not json}\n```") is None

    def test_reversed_braces(self):
        assert extract_json("} nothing here {") is None

    def test_empty_and_none(self):
        assert extract_json("") is None
        assert extract_json(None) is None
