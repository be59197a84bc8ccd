"""
omnivox: one interface over LLM completion, speech synthesis and recognition,
and image generation, with the provider picked by a ``provider/model`` string.
"""

__version__ = "0.1.0"

from .env import EnvSource
from .errors import (
    AudioDeviceError,
    ConfigurationError,
    MissingVariableError,
    OmnivoxError,
    UnknownProviderError,
    UnsupportedProviderError,
)
from .result import (
    AuthenticationError,
    Err,
    Ok,
    OperationFailed,
    RateLimitError,
    Result,
    SaveFailed,
    ServiceError,
    UnknownError,
    ValidationError,
    describe,
)

__all__ = [
    "AudioDeviceError",
    "AuthenticationError",
    "ConfigurationError",
    "EnvSource",
    "Err",
    "MissingVariableError",
    "Ok",
    "OmnivoxError",
    "OperationFailed",
    "RateLimitError",
    "Result",
    "SaveFailed",
    "ServiceError",
    "UnknownError",
    "UnknownProviderError",
    "UnsupportedProviderError",
    "ValidationError",
    "__version__",
    "describe",
]
