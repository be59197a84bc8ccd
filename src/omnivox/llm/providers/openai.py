"""
OpenAI chat completions. The Azure adapter reuses the payload and response
handling since Azure OpenAI speaks the same schema.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from ...result import Err, Ok, Result, UnknownError
from ...transport import HttpTransport
from ..base import LLMClient, reject_empty_conversation
from ..config import OpenAIConfig
from ..models import Completion, CompletionOptions, Conversation, Message, Role, TokenUsage

logger = logging.getLogger(__name__)


def chat_payload(conversation: Conversation, options: CompletionOptions) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "messages": [message.to_dict() for message in conversation.messages],
        "temperature": options.temperature,
        "top_p": options.top_p,
    }
    if options.max_tokens is not None:
        payload["max_tokens"] = options.max_tokens
    if options.stop:
        payload["stop"] = list(options.stop)
    return payload


def parse_chat_completion(response: requests.Response, model: str) -> Result[Completion]:
    try:
        body = response.json()
        choice = body["choices"][0]["message"]
        usage = body.get("usage")
        return Ok(
            Completion(
                id=str(body.get("id", "")),
                created=int(body.get("created", 0)),
                message=Message(Role.ASSISTANT, choice.get("content") or ""),
                usage=(
                    TokenUsage(
                        prompt_tokens=int(usage.get("prompt_tokens", 0)),
                        completion_tokens=int(usage.get("completion_tokens", 0)),
                    )
                    if usage
                    else None
                ),
                model=str(body.get("model") or model),
            )
        )
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
        logger.warning("Unexpected chat completion payload: %s", exc)
        return Err(UnknownError(exc))


class OpenAIClient(LLMClient):
    def __init__(self, config: OpenAIConfig, *, session: requests.Session | None = None) -> None:
        self.config = config
        headers = {"Authorization": f"Bearer {config.api_key}"}
        if config.organization:
            headers["OpenAI-Organization"] = config.organization
        self._transport = HttpTransport(session=session, timeout=config.timeout, headers=headers)

    def complete(
        self, conversation: Conversation, options: CompletionOptions | None = None
    ) -> Result[Completion]:
        rejected = reject_empty_conversation(conversation)
        if rejected is not None:
            return rejected

        payload = chat_payload(conversation, options or CompletionOptions())
        payload["model"] = self.config.model
        return self._transport.post(
            f"{self.config.base_url}/chat/completions", json=payload
        ).bind(lambda response: parse_chat_completion(response, self.config.model))

    def close(self) -> None:
        self._transport.close()
