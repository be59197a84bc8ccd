from .base import LLMClient
from .config import AnthropicConfig, AzureConfig, LLMProviderConfig, OpenAIConfig
from .connect import LLMProvider, client, client_for, complete, get_client
from .models import Completion, CompletionOptions, Conversation, Message, Role, TokenUsage

__all__ = [
    "AnthropicConfig",
    "AzureConfig",
    "Completion",
    "CompletionOptions",
    "Conversation",
    "LLMClient",
    "LLMProvider",
    "LLMProviderConfig",
    "Message",
    "OpenAIConfig",
    "Role",
    "TokenUsage",
    "client",
    "client_for",
    "complete",
    "get_client",
]
