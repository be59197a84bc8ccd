from __future__ import annotations

import json as jsonlib
from typing import Any, Iterable, Optional

import numpy as np
import pytest


class DummyResponse:
    def __init__(
        self,
        status_code: int = 200,
        *,
        json: Any = None,
        content: bytes | None = None,
        text: str | None = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self._json = json
        if content is None:
            content = jsonlib.dumps(json).encode("utf-8") if json is not None else (text or "").encode("utf-8")
        self.content = content
        self.text = text if text is not None else content.decode("utf-8", errors="replace")
        self.headers = headers or {}

    def json(self) -> Any:
        if self._json is None:
            return jsonlib.loads(self.text)
        return self._json


class DummySession:
    """Stands in for ``requests.Session``; replays queued responses in order."""

    def __init__(self, *responses: DummyResponse | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True

    @property
    def last_call(self) -> tuple[str, str, dict]:
        return self.calls[-1]


def pcm16(samples: Iterable[int] | Iterable[Iterable[int]]) -> bytes:
    """Little-endian PCM16 bytes from mono samples or per-frame channel tuples."""
    return np.asarray(list(samples), dtype="<i2").tobytes()


def samples_of(data: bytes) -> list[int]:
    return np.frombuffer(data, dtype="<i2").tolist()


@pytest.fixture
def dummy_session():
    def factory(*responses):
        return DummySession(*responses)

    return factory
