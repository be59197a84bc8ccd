"""
Per-provider LLM configuration read from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..env import DEFAULT_TIMEOUT_SECONDS, EnvSource
from ..result import Ok, Result

OPENAI_BASE_URL = "https://api.openai.com/v1"
AZURE_API_VERSION = "2024-02-01"
ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


def _hint(prefix: str) -> str:
    return f"required when using {prefix}/ model."


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    model: str
    base_url: str = OPENAI_BASE_URL
    organization: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["OpenAIConfig"]:
        return env.require("OPENAI_API_KEY", _hint("openai")).bind(
            lambda api_key: Ok(
                cls(
                    api_key=api_key,
                    model=model_name,
                    base_url=env.get_or("OPENAI_BASE_URL", OPENAI_BASE_URL),
                    organization=env.get("OPENAI_ORGANIZATION"),
                    timeout=env.timeout_seconds(),
                )
            )
        )


@dataclass(frozen=True)
class AzureConfig:
    """Azure OpenAI; ``model`` is the deployment name."""

    api_key: str
    endpoint: str
    model: str
    api_version: str = AZURE_API_VERSION
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["AzureConfig"]:
        return env.require("AZURE_API_KEY", _hint("azure")).bind(
            lambda api_key: env.require("AZURE_API_BASE", _hint("azure")).bind(
                lambda endpoint: Ok(
                    cls(
                        api_key=api_key,
                        endpoint=endpoint.rstrip("/"),
                        model=model_name,
                        api_version=env.get_or("AZURE_API_VERSION", AZURE_API_VERSION),
                        timeout=env.timeout_seconds(),
                    )
                )
            )
        )


@dataclass(frozen=True)
class AnthropicConfig:
    api_key: str
    model: str
    base_url: str = ANTHROPIC_BASE_URL
    version: str = ANTHROPIC_VERSION
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["AnthropicConfig"]:
        return env.require("ANTHROPIC_API_KEY", _hint("anthropic")).bind(
            lambda api_key: Ok(
                cls(
                    api_key=api_key,
                    model=model_name,
                    base_url=env.get_or("ANTHROPIC_BASE_URL", ANTHROPIC_BASE_URL),
                    version=env.get_or("ANTHROPIC_VERSION", ANTHROPIC_VERSION),
                    timeout=env.timeout_seconds(),
                )
            )
        )


LLMProviderConfig = OpenAIConfig | AzureConfig | AnthropicConfig
