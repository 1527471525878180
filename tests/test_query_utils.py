"""
Tests for query cleaning, body parsing and the script tag check.
"""
import json

import pytest

from content_api.utils.query_utils import (
    MalformedQueryError,
    RegexCondition,
    clean_query,
    error_response,
    is_script_injection,
    try_parse_json,
)


class TestCleanQuery:
    """Test clean_query function."""

    def test_quoted_regex_value(self):
        """The canonical form: regex written inside a JSON string."""
        assert clean_query('{"@subject":"/abc/"}') == {
            "@subject": RegexCondition(pattern="abc", case_insensitive=True)
        }

    def test_bare_regex_literal(self):
        """A regex literal is not JSON, but still yields a condition."""
        assert clean_query('{"title":/intro/}') == {"title": RegexCondition("intro")}

    def test_bare_regex_literal_with_spaces(self):
        assert clean_query('{ "title": /intro/ }') == {"title": RegexCondition("intro")}

    def test_regex_is_always_case_insensitive(self):
        condition = clean_query('{"title":"/Intro/"}')["title"]
        assert condition.pattern == "Intro"
        assert condition.case_insensitive is True

    def test_character_before_slash_is_dropped(self):
        """Without a quote or colon before the slash, the field name loses its last character."""
        assert clean_query("{ab/x/}") == {"a": RegexCondition("x")}

    def test_braces_inside_pattern_are_kept(self):
        """Only the closing brace of the object is dropped from the pattern."""
        assert clean_query('{"code":"/^a{2}$/"}') == {"code": RegexCondition("^a{2}$")}
        assert clean_query('{"code":/a{2}/}') == {"code": RegexCondition("a{2}")}

    def test_only_first_slash_is_used_and_all_slashes_are_stripped(self):
        assert clean_query('{"path":"/a/b/"}') == {"path": RegexCondition("ab")}

    def test_trailing_fields_leak_into_pattern(self):
        """Everything right of the slash becomes the pattern, minus punctuation."""
        cleaned = clean_query('{"@subject":"/abc/","order":1}')
        assert cleaned["@subject"] == RegexCondition("abc,order:1")
        assert cleaned["order"] == 1

    def test_url_value_takes_regex_path(self):
        """Any slash counts, so the text before it is glued into the field name."""
        cleaned = clean_query('{"link":"http://example.com"}')
        assert cleaned == {
            "link": "http://example.com",
            "linkhttp": RegexCondition("example.com"),
        }

    def test_plain_json_returned_unchanged(self):
        raw = '{"@subject":"home","order":2,"meta":{"tags":["a","b"]},"draft":false}'
        assert clean_query(raw) == json.loads(raw)

    def test_empty_object(self):
        assert clean_query("{}") == {}

    def test_non_object_json_returned_unchanged(self):
        assert clean_query("[1, 2]") == [1, 2]

    def test_cleaning_is_idempotent_for_plain_json(self):
        first = clean_query('{"@subject": "home", "order": 2}')
        assert clean_query(json.dumps(first)) == first

    def test_invalid_json_without_regex(self):
        with pytest.raises(MalformedQueryError) as exc_info:
            clean_query("{bad json")

        message = str(exc_info.value)
        assert "{bad json" in message
        assert message.startswith("Invalid JSON object passed in query: {bad json. ")
        assert exc_info.value.raw == "{bad json"
        assert exc_info.value.reason

    def test_malformed_query_is_value_error(self):
        with pytest.raises(ValueError):
            clean_query("")


class TestTryParseJson:
    """Test try_parse_json function."""

    def test_bytes_body(self):
        assert try_parse_json(b'{"title": "Hello"}') == {"title": "Hello"}

    def test_str_body(self):
        assert try_parse_json('["a"]') == ["a"]

    def test_invalid_body(self):
        with pytest.raises(MalformedQueryError) as exc_info:
            try_parse_json(b"{oops")
        assert "{oops" in str(exc_info.value)

    def test_undecodable_body(self):
        with pytest.raises(MalformedQueryError):
            try_parse_json(b"\xff\xfe")


class TestIsScriptInjection:
    """Test is_script_injection function."""

    def test_script_tag_detected_regardless_of_case(self):
        assert is_script_injection({"title": "<SCRIPT>alert(1)</script>"}) is True

    def test_nested_script_tag_detected(self):
        assert is_script_injection({"blocks": [{"body": "x <Script src='a.js'>"}]}) is True

    def test_opt_out_accepts_payload(self):
        assert is_script_injection({"title": "<SCRIPT>alert(1)</script>"}, allow_scripts=True) is False

    def test_clean_payload(self):
        assert is_script_injection({"title": "<b>Welcome</b>", "note": "scripts are fine"}) is False


def test_error_response_shape():
    response = error_response("boom")
    assert response.status_code == 500
    assert json.loads(response.body) == {"error": "boom"}


def test_error_response_custom_status():
    assert error_response("No records found.", 404).status_code == 404
