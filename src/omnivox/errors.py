"""
Exception hierarchy for omnivox.

Only failures that should stop the process are raised: misconfiguration found
while resolving a provider, and audio device problems. Runtime failures of
capability calls are returned as values, see ``omnivox.result``.
"""

from __future__ import annotations

from dataclasses import dataclass


class OmnivoxError(Exception):
    """Base class for omnivox exceptions."""


class ConfigurationError(OmnivoxError):
    """Raised when a provider cannot be resolved from configuration."""


@dataclass(eq=False)
class MissingVariableError(ConfigurationError):
    variable: str
    hint: str = ""

    def __str__(self) -> str:
        message = f"{self.variable} not set"
        if self.hint:
            message = f"{message}, {self.hint}"
        return message


class UnknownProviderError(ConfigurationError):
    """Raised when a model string names a provider prefix we do not know."""


class UnsupportedProviderError(ConfigurationError):
    """Raised when a provider does not offer the requested capability."""


class AudioDeviceError(OmnivoxError):
    """Raised when audio playback fails."""


class ResultUnwrapError(OmnivoxError):
    """Raised when ``Err.unwrap()`` is called."""

    def __init__(self, error: object) -> None:
        super().__init__(getattr(error, "message", str(error)))
        self.error = error
