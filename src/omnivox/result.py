"""
Result values returned by every capability and preprocessing call.

A call returns either ``Ok(value)`` or ``Err(error)`` where ``error`` is one of
the operation error variants below. The variants are plain frozen dataclasses
rather than exceptions so callers can chain steps with ``bind`` and match on
the failure kind where a message or exit status has to be produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar, Union

from .errors import ResultUnwrapError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class AuthenticationError:
    message: str


@dataclass(frozen=True)
class RateLimitError:
    message: str
    retry_after: float | None = None


@dataclass(frozen=True)
class ValidationError:
    message: str


@dataclass(frozen=True)
class ServiceError:
    message: str
    code: int


@dataclass(frozen=True)
class UnknownError:
    cause: BaseException

    @property
    def message(self) -> str:
        detail = str(self.cause) or type(self.cause).__name__
        return f"Unknown error: {detail}"


@dataclass(frozen=True)
class OperationFailed:
    """Audio preprocessing or validation failed."""

    message: str
    context: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SaveFailed:
    """Writing audio to disk failed."""

    message: str
    context: dict[str, str] = field(default_factory=dict)


OperationError = Union[
    AuthenticationError,
    RateLimitError,
    ValidationError,
    ServiceError,
    UnknownError,
    OperationFailed,
    SaveFailed,
]


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def bind(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        return fn(self.value)

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        return Ok(fn(self.value))

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: Any

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def bind(self, fn: Callable[[Any], "Result[U]"]) -> "Err":
        return self

    def map(self, fn: Callable[[Any], U]) -> "Err":
        return self

    def unwrap(self) -> Any:
        raise ResultUnwrapError(self.error)

    def unwrap_or(self, default: T) -> T:
        return default


Result = Union[Ok[T], Err]


def error_from_status(
    status: int, message: str, *, retry_after: float | None = None
) -> OperationError:
    """Map an HTTP-style status code onto an operation error variant."""
    if status in (401, 403):
        return AuthenticationError(message)
    if status == 429:
        return RateLimitError(message, retry_after=retry_after)
    if status in (400, 422):
        return ValidationError(message)
    return ServiceError(message, code=status)


def describe(error: OperationError) -> str:
    """Render an operation error as a single human-readable line."""
    if isinstance(error, AuthenticationError):
        return f"authentication failed: {error.message}"
    if isinstance(error, RateLimitError):
        if error.retry_after is not None:
            return f"rate limited (retry after {error.retry_after:g}s): {error.message}"
        return f"rate limited: {error.message}"
    if isinstance(error, ValidationError):
        return f"invalid request: {error.message}"
    if isinstance(error, ServiceError):
        return f"service error {error.code}: {error.message}"
    if isinstance(error, UnknownError):
        return error.message
    if isinstance(error, OperationFailed):
        return f"audio processing failed: {error.message}"
    if isinstance(error, SaveFailed):
        return f"save failed: {error.message}"
    raise TypeError(f"Not an operation error: {error!r}")
