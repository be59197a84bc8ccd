"""
Conversation and completion types shared by the LLM adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class Conversation:
    messages: tuple[Message, ...] = field(default_factory=tuple)

    def add(self, message: Message) -> "Conversation":
        return Conversation(self.messages + (message,))

    @property
    def system_prompt(self) -> str | None:
        parts = [m.content for m in self.messages if m.role is Role.SYSTEM]
        return "\n\n".join(parts) if parts else None

    def without_system(self) -> tuple[Message, ...]:
        return tuple(m for m in self.messages if m.role is not Role.SYSTEM)


@dataclass(frozen=True)
class CompletionOptions:
    temperature: float = 0.7
    max_tokens: int | None = None
    top_p: float = 1.0
    stop: tuple[str, ...] = ()


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class Completion:
    id: str
    created: int
    message: Message
    usage: TokenUsage | None = None
    model: str = ""

    @property
    def content(self) -> str:
        return self.message.content
