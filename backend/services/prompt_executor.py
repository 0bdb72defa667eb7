"""The "submit prompt, receive text" capability the pipeline depends on.

Implementations wrap a specific vendor and must raise AIProviderError for
transport, auth and rate-limit failures.
"""

import asyncio
from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class PromptOptions:
    temperature: float = 0.1
    max_tokens: int = 4096
    timeout_seconds: float | None = 30.0
    cancel_event: asyncio.Event | None = None


@dataclass(frozen=True)
class TokenUsage:
    input: int = 0
    output: int = 0


@dataclass(frozen=True)
class PromptResponse:
    text: str
    usage: TokenUsage | None = None


class PromptExecutor(Protocol):
    async def execute(
        self, messages: Sequence[ChatMessage], options: PromptOptions
    ) -> PromptResponse: ...
