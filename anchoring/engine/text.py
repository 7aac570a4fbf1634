"""Shared text utilities for the anchoring engine."""

from __future__ import annotations

import re

from .types import TextMatch

_WHITESPACE_RE = re.compile(r"\s+")

_SINGLE_QUOTES_RE = re.compile("[\u2018\u2019\u201A\u201B`\u00B4]")
_DOUBLE_QUOTES_RE = re.compile("[\u201C\u201D\u201E\u201F\u00AB\u00BB]")
_DASHES_RE = re.compile("[\u2013\u2014]")
_NBSP = "\u00a0"


def normalize_text(text: str | None) -> str:
    """Collapse whitespace runs to one space and trim the ends."""

    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_quotes(text: str | None) -> str:
    """Fold typographic quotes, dashes and non-breaking spaces to ASCII.

    Every replacement is one character for one character, so offsets found
    in the folded string are valid in the original string too.
    """

    if not text:
        return ""
    text = _SINGLE_QUOTES_RE.sub("'", text)
    text = _DOUBLE_QUOTES_RE.sub('"', text)
    text = _DASHES_RE.sub("-", text)
    return text.replace(_NBSP, " ")


def find_text_match(haystack: str | None, needle: str | None) -> TextMatch | None:
    """Locate ``needle`` inside ``haystack`` with progressively looser rules.

    The fallbacks are tried in order and the first hit wins:

    1. exact substring,
    2. substring after :func:`normalize_quotes` on both sides,
    3. case-insensitive substring of the raw strings,
    4. case-insensitive substring after quote normalization.

    Returns ``None`` when nothing matches or either side is empty.
    """

    if not haystack or not needle:
        return None

    index = haystack.find(needle)
    if index != -1:
        return TextMatch(start=index, length=len(needle))

    folded_haystack = normalize_quotes(haystack)
    folded_needle = normalize_quotes(needle)
    index = folded_haystack.find(folded_needle)
    if index != -1:
        return TextMatch(start=index, length=len(folded_needle))

    index = haystack.lower().find(needle.lower())
    if index != -1:
        return TextMatch(start=index, length=len(needle))

    index = folded_haystack.lower().find(folded_needle.lower())
    if index != -1:
        return TextMatch(start=index, length=len(folded_needle))

    return None


def first_token(value: str) -> str:
    """Return the first whitespace-delimited token of ``value``."""

    parts = value.split()
    return parts[0] if parts else ""
