"""Port: streaming LLM chat client."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Protocol

from chat_service.l1_entities.chat_message import ChatMessage


@dataclass(frozen=True)
class CompletionRequest:
    """Everything a provider needs for one streamed completion."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int = 0
    temperature: float = 1.0
    top_p: float = 1.0
    n: int = 1
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    stop: list[str] = field(default_factory=list)
    stream: bool = True


@dataclass(frozen=True)
class CompletionChunk:
    """One incremental delta of the first candidate."""

    content: str
    finish_reason: str | None = None


class LLMClient(Protocol):
    """Abstract LLM client. Zero framework types leak through."""

    async def create_chat_completion_stream(self, request: CompletionRequest) -> AsyncIterator[CompletionChunk]:
        """Start a streamed completion.

        Awaiting the call covers request/transport/auth failures; iterating the
        returned stream yields deltas until end-of-stream and raises on
        mid-stream failures. The stream is not restartable.
        """
        ...

    def check_connectivity(self) -> tuple[bool, str]:
        """Pre-flight connectivity check. Returns (ok, error_message)."""
        ...

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names from the list that the provider does not serve."""
        ...
