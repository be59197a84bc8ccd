from __future__ import annotations

import pytest
import requests

from conftest import DummyResponse, DummySession
from omnivox.result import RateLimitError, ServiceError, UnknownError
from omnivox.transport import HttpTransport, extract_error_message


@pytest.mark.parametrize(
    "response, expected",
    [
        (DummyResponse(400, json={"error": {"message": "bad input", "type": "invalid"}}), "bad input"),
        (DummyResponse(401, json={"error": "Invalid token"}), "Invalid token"),
        (DummyResponse(422, json={"detail": {"status": "x", "message": "voice not found"}}), "voice not found"),
        (DummyResponse(422, json={"detail": "missing field"}), "missing field"),
        (DummyResponse(500, json={"message": "internal"}), "internal"),
        (DummyResponse(502, text="<html>bad gateway</html>"), "HTTP 502: <html>bad gateway</html>"),
        (DummyResponse(500, json=["unexpected"]), 'HTTP 500: ["unexpected"]'),
        (DummyResponse(504, text=""), "HTTP 504"),
    ],
)
def test_extract_error_message(response, expected):
    assert extract_error_message(response) == expected


def test_default_and_call_headers_are_merged():
    session = DummySession(DummyResponse(json={}))
    transport = HttpTransport(session=session, timeout=4.0, headers={"Authorization": "Bearer t"})

    assert transport.post("https://example.test/a", headers={"Accept": "image/png"}).is_ok()

    method, url, kwargs = session.last_call
    assert kwargs["headers"] == {"Authorization": "Bearer t", "Accept": "image/png"}
    assert kwargs["timeout"] == 4.0


def test_rate_limit_carries_retry_after():
    session = DummySession(DummyResponse(429, json={"error": "slow"}, headers={"retry-after": "12"}))
    result = HttpTransport(session=session).get("https://example.test")
    assert result.error == RateLimitError("slow", retry_after=12.0)

    session = DummySession(DummyResponse(429, json={"error": "slow"}, headers={"retry-after": "soon"}))
    assert HttpTransport(session=session).get("https://example.test").error.retry_after is None


def test_server_error_keeps_status_code():
    session = DummySession(DummyResponse(503, json={"error": "loading"}))
    assert HttpTransport(session=session).get("https://example.test").error == ServiceError("loading", code=503)


def test_request_exception_is_wrapped():
    session = DummySession(requests.ConnectTimeout("connect timeout"))
    result = HttpTransport(session=session).get("https://example.test")
    assert isinstance(result.error, UnknownError)
    assert isinstance(result.error.cause, requests.ConnectTimeout)


def test_close_leaves_borrowed_session_open():
    session = DummySession(DummyResponse())
    transport = HttpTransport(session=session)
    transport.close()
    assert session.closed is False
