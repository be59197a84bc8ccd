from __future__ import annotations

import abc

from ..result import Err, Result, ValidationError
from .models import Completion, CompletionOptions, Conversation


class LLMClient(abc.ABC):
    """Chat completion against one provider."""

    @abc.abstractmethod
    def complete(
        self, conversation: Conversation, options: CompletionOptions | None = None
    ) -> Result[Completion]:
        """Return the assistant's reply to ``conversation``."""


def reject_empty_conversation(conversation: Conversation) -> Err | None:
    if not conversation.messages:
        return Err(ValidationError("Conversation must contain at least one message"))
    return None
