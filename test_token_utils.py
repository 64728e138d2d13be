"""
Test the base58 random string primitive
"""
import re

import pytest

from secure_token.utils.token import BASE58_ALPHABET, generate_secure_token


def test_alphabet_has_no_ambiguous_characters():
    assert len(BASE58_ALPHABET) == 58
    assert len(set(BASE58_ALPHABET)) == 58
    for char in "0OIl":
        assert char not in BASE58_ALPHABET


def test_default_length_is_24():
    assert re.fullmatch(r"[1-9A-HJ-NP-Za-km-z]{24}", generate_secure_token())


@pytest.mark.parametrize("length", [1, 2, 16, 80, 200])
def test_length_is_counted_in_characters(length):
    token = generate_secure_token(length)
    assert len(token) == length
    assert set(token) <= set(BASE58_ALPHABET)


def test_consecutive_tokens_differ():
    assert generate_secure_token() != generate_secure_token()


@pytest.mark.parametrize("length", [0, -1, 2.5, "24", True])
def test_invalid_length_is_rejected(length):
    with pytest.raises(ValueError):
        generate_secure_token(length)
