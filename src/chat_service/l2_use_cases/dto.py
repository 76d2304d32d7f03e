"""Boundary DTOs for the chat completion use cases."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class ChatCompletionConfigInput(BaseModel):
    """Generation settings used when a run has to create its chat."""

    model_config = ConfigDict(protected_namespaces=())

    model: str
    model_max_tokens: int
    temperature: float = 1.0
    top_p: float = 1.0
    n: int = 1
    stop: list[str] = Field(default_factory=list)
    max_tokens: int = 0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    initial_system_message: str


class ChatCompletionInput(BaseModel):
    chat_id: str | None = None
    user_id: str
    user_message: str
    config: ChatCompletionConfigInput


@dataclass(frozen=True)
class ChatCompletionOutput:
    """A partial (on the channel) or final (returned) completion result."""

    chat_id: str
    user_id: str
    content: str
