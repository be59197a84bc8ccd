"""
Shared HTTP transport for provider adapters.

Every provider speaks JSON or multipart over HTTPS, so the adapters share one
helper that issues the request through ``requests`` and turns connection
problems and non-2xx statuses into operation error values.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from .result import Err, Ok, Result, UnknownError, error_from_status

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def extract_error_message(response: requests.Response) -> str:
    """Pull a readable message out of a provider error body."""
    text = response.text or ""
    fallback = f"HTTP {response.status_code}: {text[:256]}".rstrip(": ")
    try:
        body = response.json()
    except ValueError:
        return fallback

    if not isinstance(body, dict):
        return fallback

    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    detail = body.get("detail")
    if detail:
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        return str(detail)
    if body.get("message"):
        return str(body["message"])
    return fallback


def _retry_after(response: requests.Response) -> float | None:
    raw = response.headers.get("retry-after") if response.headers else None
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


class HttpTransport:
    """Lazily opened ``requests`` session with error mapping."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.timeout = timeout
        self._session = session
        self._session_owner = False
        self._default_headers = dict(headers or {})

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session_owner = True
        return self._session

    def post(self, url: str, **kwargs: Any) -> Result[requests.Response]:
        return self.request("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> Result[requests.Response]:
        return self.request("GET", url, **kwargs)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> Result[requests.Response]:
        merged_headers = {**self._default_headers, **(headers or {})}
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                headers=merged_headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return Err(UnknownError(exc))

        if 200 <= response.status_code < 300:
            return Ok(response)

        message = extract_error_message(response)
        logger.warning("%s %s returned %s: %s", method, url, response.status_code, message)
        return Err(
            error_from_status(
                response.status_code, message, retry_after=_retry_after(response)
            )
        )

    def close(self) -> None:
        if self._session is not None and self._session_owner:
            self._session.close()
        self._session = None
        self._session_owner = False
