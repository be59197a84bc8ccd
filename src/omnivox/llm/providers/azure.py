from __future__ import annotations

import requests

from ...result import Result
from ...transport import HttpTransport
from ..base import LLMClient, reject_empty_conversation
from ..config import AzureConfig
from ..models import Completion, CompletionOptions, Conversation
from .openai import chat_payload, parse_chat_completion


class AzureOpenAIClient(LLMClient):
    """Chat completions against an Azure OpenAI deployment."""

    def __init__(self, config: AzureConfig, *, session: requests.Session | None = None) -> None:
        self.config = config
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={"api-key": config.api_key},
        )

    @property
    def url(self) -> str:
        return f"{self.config.endpoint}/openai/deployments/{self.config.model}/chat/completions"

    def complete(
        self, conversation: Conversation, options: CompletionOptions | None = None
    ) -> Result[Completion]:
        rejected = reject_empty_conversation(conversation)
        if rejected is not None:
            return rejected

        return self._transport.post(
            self.url,
            params={"api-version": self.config.api_version},
            json=chat_payload(conversation, options or CompletionOptions()),
        ).bind(lambda response: parse_chat_completion(response, self.config.model))

    def close(self) -> None:
        self._transport.close()
