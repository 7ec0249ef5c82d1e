"""Tests for lenient JSON decoding, coercion and code derivation."""

import pytest

from litdesk.utils.text import (
    author_prefix,
    coerce_citation_count,
    coerce_text,
    key_points,
    next_code,
    normalize_keywords,
    parse_json_array,
    parse_json_object,
    parse_year,
)


class TestParseJsonObject:

    def test_plain_json(self):
        assert parse_json_object('{"author": "Doe"}') == {"author": "Doe"}

    def test_object_inside_prose(self):
        text = 'Sure! Here it is:\n{"title": "X", "url": ""}\nHope that helps.'
        assert parse_json_object(text) == {"title": "X", "url": ""}

    def test_nested_braces_kept_in_span(self):
        text = 'prefix {"a": {"b": 1}} suffix'
        assert parse_json_object(text) == {"a": {"b": 1}}

    def test_unparseable_span_degrades_to_empty(self):
        assert parse_json_object("not json {author: 'x'}") == {}

    def test_no_span(self):
        assert parse_json_object("nothing here") == {}

    def test_non_object_json_is_empty(self):
        assert parse_json_object("[1, 2]") == {}
        assert parse_json_object("42") == {}

    def test_empty_string(self):
        assert parse_json_object("") == {}


class TestParseJsonArray:

    def test_plain_array(self):
        assert parse_json_array('["a", "b"]') == ["a", "b"]

    def test_array_inside_prose(self):
        assert parse_json_array('Keywords: ["x", "y"].') == ["x", "y"]

    def test_object_is_not_array(self):
        assert parse_json_array('{"keywords": ["x"]}') == []

    def test_garbage(self):
        assert parse_json_array("[oops") == []


class TestCoercion:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("42", 42),
            ("", None),
            ("abc", None),
            (17.0, 17),
            (17, 17),
            (None, None),
            (" 7 ", 7),
            (True, None),
            (float("nan"), None),
            ([3], None),
            (1e30, None),
            ("99999999999999999999", None),
            (2 ** 63, None),
            (2 ** 63 - 1, 2 ** 63 - 1),
            (-(2 ** 63), -(2 ** 63)),
        ],
    )
    def test_citation_count(self, value, expected):
        assert coerce_citation_count(value) == expected

    def test_text_trims_strings(self):
        assert coerce_text("  Doe \n") == "Doe"

    def test_text_rejects_non_strings(self):
        assert coerce_text(12) == ""
        assert coerce_text(None) == ""
        assert coerce_text(["Doe"]) == ""


class TestCodes:

    @pytest.mark.parametrize(
        "author, prefix",
        [
            ("Doe", "D"),
            ("Jane Doe", "JD"),
            ("jane q. doe", "JQ"),
            ("Doe, J.", "DJ"),
            ("", "X"),
            (None, "X"),
            ("123 456", "X"),
            ("  42 Smith", "S"),
        ],
    )
    def test_author_prefix(self, author, prefix):
        assert author_prefix(author) == prefix

    def test_first_code_for_prefix(self):
        assert next_code("Doe", set()) == "D1"

    def test_skips_taken_numbers(self):
        assert next_code("Doe", {"D1", "D2"}) == "D3"

    def test_fills_smallest_gap(self):
        assert next_code("Doe", {"D1", "D3"}) == "D2"

    def test_other_prefixes_do_not_count(self):
        assert next_code("Jane Doe", {"D1", "D2"}) == "JD1"


class TestKeywords:

    def test_normalize(self):
        raw = [" ml ", "ML", "ml", "", 3, "graphs", None]
        assert normalize_keywords(raw) == ["ml", "ML", "graphs"]

    def test_capped_at_eight(self):
        raw = [f"k{i}" for i in range(12)]
        assert normalize_keywords(raw) == [f"k{i}" for i in range(8)]


class TestTimelineText:

    def test_parse_year(self):
        assert parse_year("March 2021") == 2021
        assert parse_year("2020-05-01T00:00:00") == 2020
        assert parse_year("n.d.") is None
        assert parse_year(None) is None

    def test_key_points_prefers_bullets(self):
        note = "Intro line.\n- first point\n* second point\n• third"
        assert key_points(note) == ["first point", "second point"]

    def test_key_points_falls_back_to_sentences(self):
        note = "One thing. Another thing! A third?"
        assert key_points(note) == ["One thing.", "Another thing!"]

    def test_key_points_empty(self):
        assert key_points("") == []
