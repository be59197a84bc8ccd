"""
Environment access for provider resolution.

All reads of deployment variables go through an ``EnvSource`` so tests can hand
in a plain dict instead of touching ``os.environ``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Mapping, TypeVar

from dotenv import dotenv_values

from .errors import ConfigurationError, MissingVariableError
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIMEOUT_VARIABLE = "OMNIVOX_TIMEOUT_MS"
DEFAULT_TIMEOUT_SECONDS = 30.0


class EnvSource(Mapping[str, str]):
    """Read-only view over configuration variables. Empty values count as unset."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = {
            key: value for key, value in (values or {}).items() if value is not None and value != ""
        }

    @classmethod
    def from_process(cls, dotenv_path: str | Path | None = None) -> "EnvSource":
        """
        Build a source from the process environment, falling back to a ``.env`` file.

        Variables set in the process always win over the file.
        """
        path = Path(dotenv_path) if dotenv_path is not None else Path.cwd() / ".env"
        merged: dict[str, str] = {}
        if path.is_file():
            file_values = {k: v for k, v in dotenv_values(path).items() if v is not None}
            logger.debug("Loaded %d variables from %s", len(file_values), path)
            merged.update(file_values)
        merged.update(os.environ)
        return cls(merged)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_or(self, key: str, default: str) -> str:
        return self._values.get(key, default)

    def require(self, key: str, hint: str = "") -> Result[str]:
        if key in self._values:
            return Ok(self._values[key])
        return Err(MissingVariableError(key, hint))

    def with_overrides(self, **values: str) -> "EnvSource":
        return EnvSource({**self._values, **values})

    def timeout_seconds(self) -> float:
        raw = self._values.get(TIMEOUT_VARIABLE)
        if raw is None:
            return DEFAULT_TIMEOUT_SECONDS
        try:
            timeout_ms = int(raw)
        except ValueError as exc:
            raise ConfigurationError(f"{TIMEOUT_VARIABLE} must be an integer, got {raw!r}") from exc
        if timeout_ms <= 0:
            raise ConfigurationError(f"{TIMEOUT_VARIABLE} must be positive")
        return timeout_ms / 1000.0


def coerce_env(env: Mapping[str, str] | None) -> EnvSource:
    if env is None:
        return EnvSource.from_process()
    if isinstance(env, EnvSource):
        return env
    return EnvSource(env)


def expect_config(result: Result[T]) -> T:
    """Unwrap a configuration result, raising the configuration error on failure."""
    if result.is_ok():
        return result.unwrap()
    error = result.error
    if isinstance(error, ConfigurationError):
        raise error
    raise ConfigurationError(str(error))


def read_model_variable(env: EnvSource, variable: str, description: str) -> str:
    value = env.get(variable)
    if not value:
        raise MissingVariableError(
            variable, f"please set it to specify the default {description} model"
        )
    return value


def parse_model_string(value: str) -> tuple[str, str]:
    """Split ``provider/model-name`` on the first slash."""
    prefix, sep, model_name = value.partition("/")
    if not sep or not prefix:
        raise ConfigurationError(
            f"Model '{value}' is not in the form 'provider/model-name'."
        )
    return prefix, model_name
