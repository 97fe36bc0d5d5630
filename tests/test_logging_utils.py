"""Tests for logging utilities and sensitive data redaction."""

from __future__ import annotations

import json
import logging

import pytest

from mealsync.logging_utils import configure_logging


def _record(msg, args=(), **extra):
    record = logging.LogRecord(
        name="mealsync.test.redaction",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def _emit(record):
    handler = logging.getLogger().handlers[0]
    for filter_ in handler.filters:
        filter_.filter(record)
    return handler.format(record)


@pytest.mark.parametrize("fmt", ["plain", "json"])
def test_sensitive_data_filter_redacts_tokens(fmt):
    secret = "top-secret-token"
    configure_logging("INFO", fmt, [secret])

    formatted = _emit(_record("Authorization header Bearer %s", (secret,)))

    assert secret not in formatted
    assert "[redacted]" in formatted


def test_invite_codes_are_masked():
    configure_logging("INFO", "plain", [])

    formatted = _emit(_record("join attempt invite_code=%s", ("A1B2C3D4E5F6",)))

    assert "A1B2C3D4E5F6" not in formatted
    assert "invite_code=[redacted]" in formatted


def test_json_format_includes_household_context():
    configure_logging("INFO", "json", [])

    formatted = _emit(
        _record("Generated grocery list", household_id=3, grocery_list_id=11, request_id="abc")
    )

    payload = json.loads(formatted)
    assert payload["message"] == "Generated grocery list"
    assert payload["household_id"] == 3
    assert payload["grocery_list_id"] == 11
    assert payload["request_id"] == "abc"
    assert "member_id" not in payload
