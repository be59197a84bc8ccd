"""
Anthropic Messages API adapter.

System messages are not part of the ``messages`` array in this API; they are
joined and sent as the top-level ``system`` field.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from ...result import Err, Ok, Result, UnknownError
from ...transport import HttpTransport
from ..base import LLMClient, reject_empty_conversation
from ..config import AnthropicConfig
from ..models import Completion, CompletionOptions, Conversation, Message, Role, TokenUsage

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2048


class AnthropicClient(LLMClient):
    def __init__(self, config: AnthropicConfig, *, session: requests.Session | None = None) -> None:
        self.config = config
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={
                "x-api-key": config.api_key,
                "anthropic-version": config.version,
            },
        )

    def complete(
        self, conversation: Conversation, options: CompletionOptions | None = None
    ) -> Result[Completion]:
        rejected = reject_empty_conversation(conversation)
        if rejected is not None:
            return rejected

        payload = self.build_payload(conversation, options or CompletionOptions())
        return self._transport.post(
            f"{self.config.base_url}/v1/messages", json=payload
        ).bind(self._parse)

    def build_payload(
        self, conversation: Conversation, options: CompletionOptions
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [message.to_dict() for message in conversation.without_system()],
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": options.temperature,
            "top_p": options.top_p,
        }
        system = conversation.system_prompt
        if system:
            payload["system"] = system
        if options.stop:
            payload["stop_sequences"] = list(options.stop)
        return payload

    def _parse(self, response: requests.Response) -> Result[Completion]:
        try:
            body = response.json()
            text = "".join(
                block.get("text", "")
                for block in body.get("content", [])
                if block.get("type") == "text"
            )
            usage = body.get("usage")
            return Ok(
                Completion(
                    id=str(body["id"]),
                    created=int(time.time()),
                    message=Message(Role.ASSISTANT, text),
                    usage=(
                        TokenUsage(
                            prompt_tokens=int(usage.get("input_tokens", 0)),
                            completion_tokens=int(usage.get("output_tokens", 0)),
                        )
                        if usage
                        else None
                    ),
                    model=str(body.get("model") or self.config.model),
                )
            )
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Unexpected Anthropic payload: %s", exc)
            return Err(UnknownError(exc))

    def close(self) -> None:
        self._transport.close()
