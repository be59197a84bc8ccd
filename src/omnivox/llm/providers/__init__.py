from .anthropic import AnthropicClient
from .azure import AzureOpenAIClient
from .openai import OpenAIClient

__all__ = ["AnthropicClient", "AzureOpenAIClient", "OpenAIClient"]
