"""Rolling hash tests."""

from __future__ import annotations

from anchoring.engine.hashing import hash_text


def test_empty_input_hashes_to_zero():
    assert hash_text("") == "0"
    assert hash_text(None) == "0"


def test_known_values():
    assert hash_text("a") == "61"
    assert hash_text("hello") == "5e918d2"


def test_wraps_like_signed_32_bit_and_renders_absolute_value():
    # Accumulates to exactly -2**31.
    assert hash_text("polygenelubricants") == "80000000"


def test_astral_characters_hash_as_surrogate_pairs():
    # 0xD83D * 31 + 0xDE00
    assert hash_text("😀") == "1b0d63"


def test_hash_is_deterministic():
    text = "Quarterly budget review covering marketing, travel and hiring plans"
    assert hash_text(text) == hash_text(text)
    assert hash_text(text) != hash_text(text + ".")
