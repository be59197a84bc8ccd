"""
LLM client factories driven by ``LLM_MODEL`` (for example ``openai/gpt-4o``).
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping

from ..dispatch import Capability, ProviderSpec, build_client, build_client_for_config, resolve_from_env
from ..result import Result
from .base import LLMClient
from .config import AnthropicConfig, AzureConfig, LLMProviderConfig, OpenAIConfig
from .models import Completion, CompletionOptions, Conversation, Message
from .providers import AnthropicClient, AzureOpenAIClient, OpenAIClient

LLM_MODEL_VARIABLE = "LLM_MODEL"


class LLMProvider(str, Enum):
    OPENAI = "openai"
    AZURE = "azure"
    ANTHROPIC = "anthropic"


LLM = Capability[LLMClient](
    name="LLM",
    model_variable=LLM_MODEL_VARIABLE,
    specs=(
        ProviderSpec(LLMProvider.OPENAI, "openai", OpenAIConfig, OpenAIClient),
        ProviderSpec(LLMProvider.AZURE, "azure", AzureConfig, AzureOpenAIClient),
        ProviderSpec(LLMProvider.ANTHROPIC, "anthropic", AnthropicConfig, AnthropicClient),
    ),
)


def get_client(env: Mapping[str, str] | None = None) -> LLMClient:
    """Build the client named by ``LLM_MODEL``."""
    return resolve_from_env(LLM, env)


def client(provider: LLMProvider, config: LLMProviderConfig) -> LLMClient:
    return build_client(LLM, provider, config)


def client_for(config: LLMProviderConfig) -> LLMClient:
    return build_client_for_config(LLM, config)


def complete(
    messages: Iterable[Message],
    options: CompletionOptions | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[Completion]:
    """One-shot completion with the environment's default model."""
    return get_client(env).complete(Conversation(tuple(messages)), options)
