"""Tests for response parsing."""

import pytest

from core.errors import ResponseDecodeError
from suggest.parser import (
    build_suggestion_set,
    clean_response,
    parse,
    trim_line_numbers,
    trim_matching_prefix,
    validate_item,
)


class TestCleanResponse:
    """Test wrapper stripping."""

    def test_fenced_with_commentary(self):
        text = 'Here you go:\n```json\n[[{"start_row":1}]]\n```'
        assert clean_response(text) == '[[{"start_row":1}]]'

    def test_suggestions_tag_and_thinking(self):
        text = "<think>[not this]</think>\n<suggestions>\n[[]]\n</suggestions>\ntrailing [text"
        assert clean_response(text) == "[[]]"

    def test_no_array(self):
        assert clean_response("  null ") == "null"


class TestParse:
    """Test the full parse contract."""

    def test_fenced_response(self):
        """Test a fenced array surrounded by commentary."""
        text = 'Here you go:\n```json\n[[{"start_row":1,"end_row":1,"content":"x=1"}]]\n```'
        sets = parse(text, ["y"])
        assert len(sets) == 1
        assert len(sets[0]) == 1
        item = sets[0][0]
        assert (item.id, item.start_row, item.end_row, item.content) == (1, 1, 1, "x=1")

    def test_single_set_is_wrapped(self):
        """Test that a flat array of items becomes one set."""
        sets = parse('[{"start_row":2,"end_row":2,"content":"b"}]', ["a", "x"])
        assert len(sets) == 1
        assert sets[0][0].content == "b"

    def test_multiple_sets(self):
        text = '[[{"start_row":1,"end_row":1,"content":"a"}],[{"start_row":1,"end_row":1,"content":"b"}]]'
        sets = parse(text, ["x"])
        assert [s[0].content for s in sets] == ["a", "b"]

    def test_empty_results(self):
        """Test that empty or null payloads mean no suggestions."""
        assert parse("", ["x"]) == []
        assert parse("[]", ["x"]) == []
        assert parse("null", ["x"]) == []
        assert parse("<suggestions></suggestions>", ["x"]) == []

    def test_trailing_commas(self):
        """Test that trailing commas like in the prompt example are tolerated."""
        text = '[[{"start_row":1,"end_row":1,"content":"a",},],]'
        sets = parse(text, ["x"])
        assert sets[0][0].content == "a"

    def test_decode_error(self):
        with pytest.raises(ResponseDecodeError) as exc_info:
            parse("[[{oops", ["x"])
        assert exc_info.value.text

    def test_non_array_payload(self):
        with pytest.raises(ResponseDecodeError):
            parse('{"start_row": 1}', ["x"])

    def test_sets_emptied_by_trimming_are_excluded(self):
        """Test that a set whose items all duplicate the buffer disappears."""
        text = '[[{"start_row":1,"end_row":1,"content":"same"}],[{"start_row":1,"end_row":1,"content":"new"}]]'
        sets = parse(text, ["same"])
        assert len(sets) == 1
        assert sets[0][0].content == "new"

    def test_prefix_trim_idempotence(self):
        """Test that an item duplicating the buffer at its start row vanishes."""
        lines = ["import os", "", "def fib(n):", "    pass"]
        assert parse('[[{"start_row":3,"end_row":3,"content":"def fib(n):"}]]', lines) == []


class TestBuildSuggestionSet:
    """Test item validation and minimisation."""

    def test_malformed_items_dropped(self):
        """Test that invalid items are skipped and ids stay dense."""
        raw = [
            {"start_row": 1, "end_row": 1, "content": "a"},
            {"start_row": "2", "end_row": 2, "content": "b"},
            {"start_row": 3, "end_row": 2, "content": "c"},
            {"start_row": 0, "end_row": 0, "content": "d"},
            {"start_row": 4, "end_row": 4},
            "junk",
            {"start_row": 5, "end_row": 5, "content": "e"},
        ]
        items = build_suggestion_set(raw, ["x"] * 5)
        assert [(i.id, i.content) for i in items] == [(1, "a"), (2, "e")]

    def test_camel_case_rows(self):
        items = build_suggestion_set([{"startRow": 2, "endRow": 3, "content": "z"}], ["x"] * 3)
        assert (items[0].start_row, items[0].end_row) == (2, 3)

    def test_line_numbers_stripped_before_trimming(self):
        """Test that leaked L-prefixes are removed and then matched against the buffer."""
        raw = [{"start_row": 1, "end_row": 2, "content": "L1: a = 1\nL2: b = 3"}]
        items = build_suggestion_set(raw, ["a = 1", "b = 2"])
        assert len(items) == 1
        item = items[0]
        assert (item.start_row, item.end_row, item.original_start_row) == (2, 2, 1)
        assert item.content == "b = 3"

    def test_trimmed_past_end_becomes_insertion(self):
        """Test that trimming every replaced row leaves an insertion."""
        raw = [{"start_row": 1, "end_row": 1, "content": "a = 1\nb = 2"}]
        items = build_suggestion_set(raw, ["a = 1", "c = 3"])
        item = items[0]
        assert (item.start_row, item.end_row) == (2, 1)
        assert item.replaced_count == 0
        assert item.content == "b = 2"

    def test_sorted_and_overlaps_dropped(self):
        """Test ordering by start row and removal of overlapping items."""
        raw = [
            {"start_row": 5, "end_row": 6, "content": "late"},
            {"start_row": 1, "end_row": 3, "content": "early"},
            {"start_row": 2, "end_row": 2, "content": "overlap"},
        ]
        items = build_suggestion_set(raw, ["x"] * 6)
        assert [(i.id, i.content) for i in items] == [(1, "early"), (2, "late")]

    def test_rows_past_end_of_buffer(self):
        """Test that items past the end are dropped and end rows are clamped."""
        raw = [
            {"start_row": 2, "end_row": 9, "content": "b = 2"},
            {"start_row": 4, "end_row": 4, "content": "d = 4"},
            {"start_row": 50, "end_row": 50, "content": "x = 1"},
        ]
        items = build_suggestion_set(raw, ["a = 1", "c = 3"])
        assert [(i.start_row, i.end_row, i.content) for i in items] == [(2, 2, "b = 2")]

    def test_append_after_last_line(self):
        items = build_suggestion_set([{"start_row": 3, "end_row": 3, "content": "c = 3"}], ["a", "b"])
        item = items[0]
        assert (item.start_row, item.end_row) == (3, 2)
        assert item.replaced_count == 0

    def test_empty_content_dropped(self):
        items = build_suggestion_set([{"start_row": 1, "end_row": 1, "content": ""}], ["a = 1"])
        assert items == []

    def test_not_a_list(self):
        assert build_suggestion_set({"start_row": 1}, ["x"]) == []


def test_validate_item():
    assert validate_item({"start_row": 1, "end_row": 1, "content": ""})
    assert validate_item({"start_row": 1.0, "end_row": 2, "content": "x"})
    assert not validate_item({"start_row": True, "end_row": 1, "content": "x"})
    assert not validate_item({"start_row": 1, "end_row": 1, "content": 3})


def test_trim_line_numbers():
    assert trim_line_numbers(["L12: x", "L3:y", "  L4: z"]) == ["x", "L3:y", "  L4: z"]


def test_trim_matching_prefix():
    assert trim_matching_prefix(["a", "b", "c"], 1, ["a", "b", "x"]) == 2
    assert trim_matching_prefix(["a", "b"], 3, ["q", "r", "a"]) == 1
    assert trim_matching_prefix(["a"], 5, ["a"]) == 0
