"""Tests for callback URI parsing."""

from __future__ import annotations

import pytest

from vv_auth import CALLBACK_URI, AuthExchangeFailedError, parse_callback_uri


def test_full_uri() -> None:
    assert parse_callback_uri(f"{CALLBACK_URI}?code=abc&state=S1") == ("abc", "S1")


def test_query_string_only() -> None:
    assert parse_callback_uri("?state=S1&code=abc\n") == ("abc", "S1")


def test_error_reported_by_login_page() -> None:
    with pytest.raises(AuthExchangeFailedError, match="access_denied: user cancelled"):
        parse_callback_uri(f"{CALLBACK_URI}?error=access_denied&error_description=user+cancelled")


@pytest.mark.parametrize("uri", [f"{CALLBACK_URI}?code=abc", f"{CALLBACK_URI}?state=S1", CALLBACK_URI])
def test_missing_parameters(uri: str) -> None:
    with pytest.raises(AuthExchangeFailedError, match="missing code or state"):
        parse_callback_uri(uri)
