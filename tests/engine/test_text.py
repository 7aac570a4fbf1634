"""Text normalization and fuzzy substring lookup tests."""

from __future__ import annotations

import pytest

from anchoring.engine.text import find_text_match, first_token, normalize_quotes, normalize_text
from anchoring.engine.types import TextMatch


def test_normalize_text_collapses_whitespace():
    assert normalize_text("  Budget \n\t review  ") == "Budget review"
    assert normalize_text("") == ""
    assert normalize_text(None) == ""


@pytest.mark.parametrize(
    "value",
    ["  a  b ", "line one\nline two", "He said “hello”", "tab\tseparated\r\nrows"],
)
def test_normalizers_are_idempotent(value):
    once = normalize_text(value)
    assert normalize_text(once) == once
    folded = normalize_quotes(value)
    assert normalize_quotes(folded) == folded


def test_normalize_quotes_folds_typographic_characters():
    assert normalize_quotes("“Don’t” ‘stop’ «now»") == "\"Don't\" 'stop' \"now\""
    assert normalize_quotes("2019–2020 — final") == "2019-2020 - final"
    assert normalize_quotes("no\u00a0break") == "no break"
    assert normalize_quotes(None) == ""


def test_normalize_quotes_keeps_length():
    value = "“quoted” — ‘text’\u00a0here"
    assert len(normalize_quotes(value)) == len(value)


def test_exact_match_wins_first():
    assert find_text_match("abc abc", "abc") == TextMatch(start=0, length=3)
    assert find_text_match("say abc", "abc") == TextMatch(start=4, length=3)


def test_quote_normalized_match_keeps_offset_range():
    haystack = "He said “hello”"
    needle = 'He said "hello"'

    assert haystack.find(needle) == -1
    match = find_text_match(haystack, needle)

    assert match == TextMatch(start=0, length=len(needle))
    assert match.end == len(haystack)


def test_case_insensitive_fallbacks():
    assert find_text_match("The Budget Review", "budget review") == TextMatch(start=4, length=13)
    assert find_text_match("Don’t Panic", "don't panic") == TextMatch(start=0, length=11)


def test_find_text_match_misses():
    assert find_text_match("Budget review", "hiring plan") is None
    assert find_text_match("", "anything") is None
    assert find_text_match("anything", "") is None
    assert find_text_match(None, "x") is None


def test_first_token():
    assert first_token("card wide") == "card"
    assert first_token("  spaced  ") == "spaced"
    assert first_token("") == ""
