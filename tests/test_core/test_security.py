"""Tests for session tokens and credential handling."""

import logging
from datetime import timedelta

from tableedit.core.logging_config import SensitiveDataFilter, redact
from tableedit.core.security import (
    basic_auth_header,
    create_session_token,
    decode_session_token,
)


class TestSessionTokens:
    """Test token round trips."""

    def test_round_trip(self):
        token = create_session_token("abc123")

        assert decode_session_token(token) == "abc123"

    def test_expired_token(self):
        token = create_session_token("abc123", expires_delta=timedelta(seconds=-1))

        assert decode_session_token(token) is None

    def test_garbage_token(self):
        assert decode_session_token("not.a.token") is None


def test_basic_auth_header():
    assert basic_auth_header("_SYSTEM", "SYS") == "Basic X1NZU1RFTTpTWVM="


class TestRedaction:
    """Test that credentials never reach the log."""

    def test_key_value_pairs(self):
        assert redact("login password=SYS user=_SYSTEM") == (
            "login password=[REDACTED] user=_SYSTEM"
        )

    def test_dict_repr(self):
        assert redact("{'password': 'SYS'}") == "{'password': '[REDACTED]'}"

    def test_authorization_header(self):
        message = "Authorization: Basic X1NZU1RFTTpTWVM="

        assert redact(message) == "Authorization: [REDACTED]"

    def test_filter_rewrites_record(self):
        record = logging.LogRecord(
            "tableedit", logging.INFO, __file__, 1, "token=%s", ("abc",), None
        )

        assert SensitiveDataFilter().filter(record) is True
        assert record.getMessage() == "token=[REDACTED]"
