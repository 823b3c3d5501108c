"""
Unit Tests for Response Parsing
===============================
"""

import pytest

from nl_to_es.parsing import find_balanced_object, parse_json_object, strip_code_fence


class TestStripCodeFence:
    """Tests for markdown fence removal."""

    def test_json_fence(self) -> None:
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self) -> None:
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self) -> None:
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


class TestFindBalancedObject:
    """Tests for the brace scanner."""

    def test_embedded_object(self) -> None:
        text = 'Here is the query: {"query": {"match_all": {}}} hope it helps'
        assert find_balanced_object(text) == '{"query": {"match_all": {}}}'

    def test_braces_inside_strings_ignored(self) -> None:
        text = 'x {"q": "a } b", "n": {"c": "{"}} y'
        assert find_balanced_object(text) == '{"q": "a } b", "n": {"c": "{"}}'

    def test_no_object(self) -> None:
        assert find_balanced_object("no json here") is None


class TestParseJsonObject:
    """Tests for strict and recovering JSON parsing."""

    def test_plain_object(self) -> None:
        assert parse_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_object(self) -> None:
        assert parse_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_strict_rejects_prose(self) -> None:
        with pytest.raises(ValueError):
            parse_json_object('Sure! {"a": 1}')

    def test_recover_from_prose(self) -> None:
        assert parse_json_object('Sure! {"a": 1} Done.', recover=True) == {"a": 1}

    def test_recover_fails_without_object(self) -> None:
        with pytest.raises(ValueError):
            parse_json_object("I cannot help with that", recover=True)

    def test_non_object_rejected(self) -> None:
        with pytest.raises(ValueError, match="Expected a JSON object"):
            parse_json_object("[1, 2, 3]")
