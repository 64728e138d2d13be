"""
Test token generation with and without the uniqueness loop
"""
from unittest.mock import Mock

import pytest

from secure_token import TokenGenerationError, generate_unique_secure_token


def test_without_uniq_no_existence_query(token_sequence):
    calls = token_sequence()
    exists_check = Mock(return_value=True)

    token = generate_unique_secure_token(exists_check, 24, False)

    assert len(token) == 24
    assert calls == [token]
    exists_check.assert_not_called()


@pytest.mark.parametrize("collisions", [0, 1, 5])
def test_uniq_retries_until_free(token_sequence, collisions):
    calls = token_sequence()
    exists_check = Mock(side_effect=[True] * collisions + [False])

    token = generate_unique_secure_token(exists_check, 24, True)

    assert len(calls) == collisions + 1
    assert exists_check.call_count == collisions + 1
    assert token == calls[-1]
    assert [c.args[0] for c in exists_check.call_args_list] == calls


def test_uniq_gives_up_after_max_attempts():
    exists_check = Mock(return_value=True)

    with pytest.raises(TokenGenerationError) as excinfo:
        generate_unique_secure_token(exists_check, 2, True, max_attempts=3, attribute="auth_token")

    assert exists_check.call_count == 3
    assert excinfo.value.attempts == 3
    assert excinfo.value.attribute == "auth_token"


def test_default_bound_comes_from_settings(monkeypatch):
    from secure_token.config import settings

    monkeypatch.setattr(settings, "MAX_UNIQUE_ATTEMPTS", 4)
    exists_check = Mock(return_value=True)

    with pytest.raises(TokenGenerationError):
        generate_unique_secure_token(exists_check, 24, True)

    assert exists_check.call_count == 4


def test_existence_query_errors_propagate():
    exists_check = Mock(side_effect=ConnectionError("database is down"))

    with pytest.raises(ConnectionError):
        generate_unique_secure_token(exists_check, 24, True)

    assert exists_check.call_count == 1
