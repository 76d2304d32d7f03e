"""Chat message entities — role enum, persisted Message, and provider projection."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from chat_service.l1_entities.errors import InvalidMessageError
from chat_service.l1_entities.model import Model


class Role(str, enum.Enum):
    SYSTEM = 'system'
    USER = 'user'
    ASSISTANT = 'assistant'


class ChatMessage(BaseModel):
    """A single {role, content} pair as sent to an LLM provider."""

    role: Role
    content: str


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """One persisted turn of a conversation. Build with ``Message.create``."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Role
    content: str
    tokens: int
    model: Model
    created_at: datetime = Field(default_factory=_now)

    @classmethod
    def create(cls, role: Role | str, content: str, model: Model) -> Message:
        """Validate *content* for *model* and derive its token count.

        Raises InvalidMessageError for an unknown role, blank content, or content
        that alone exceeds the model's token budget.
        """
        try:
            role = Role(role)
        except ValueError as e:
            raise InvalidMessageError(f'invalid role: {role!r}') from e
        if not content.strip():
            raise InvalidMessageError('content is empty')
        tokens = model.count_tokens(content)
        if tokens > model.max_tokens:
            raise InvalidMessageError(
                f'message has {tokens} tokens, model {model.name} allows {model.max_tokens}'
            )
        return cls(role=role, content=content, tokens=tokens, model=model)

    def to_chat_message(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content)
