"""Deterministic text hashing used as a cheap equality pre-filter."""

from __future__ import annotations

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - 0x100000000 if value & _INT32_SIGN else value


def _code_units(text: str):
    # Hash over UTF-16 code units so fingerprints saved by browser clients
    # hash identically for characters outside the BMP.
    for char in text:
        point = ord(char)
        if point > 0xFFFF:
            point -= 0x10000
            yield 0xD800 + (point >> 10)
            yield 0xDC00 + (point & 0x3FF)
        else:
            yield point


def hash_text(text: str | None) -> str:
    """Return the 31-polynomial rolling hash of ``text`` as lower-case hex.

    Arithmetic wraps like a signed 32-bit integer and the absolute value of
    the final state is rendered, so ``"0"`` is returned for empty input.
    """

    if not text:
        return "0"
    state = 0
    for unit in _code_units(text):
        state = _to_int32(state * 31 + unit)
    return format(abs(state), "x")
