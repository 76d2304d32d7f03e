"""Chat aggregate root — config, ordered messages, token accounting."""

from __future__ import annotations

import enum
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chat_service.l1_entities.chat_message import ChatMessage, Message, Role
from chat_service.l1_entities.errors import ChatEndedError, InvalidMessageError, TokenBudgetExceededError
from chat_service.l1_entities.model import Model


class ChatStatus(str, enum.Enum):
    ACTIVE = 'active'
    ENDED = 'ended'


class ChatConfig(BaseModel):
    """Generation parameters bound to a chat at creation time."""

    model_config = ConfigDict(frozen=True)

    model: Model
    temperature: float = 1.0
    top_p: float = 1.0
    n: int = 1
    stop: list[str] = Field(default_factory=list)
    max_tokens: int = 0  # 0 → provider default
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0


class Chat(BaseModel):
    """A persisted conversation. Messages are append-only; the first is system-authored."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    messages: list[Message] = Field(default_factory=list)
    status: ChatStatus = ChatStatus.ACTIVE
    token_usage: int = 0
    config: ChatConfig

    @model_validator(mode='after')
    def _check_invariants(self) -> Chat:
        if not self.messages or self.messages[0].role is not Role.SYSTEM:
            raise ValueError('first message must be system-authored')
        if self.token_usage != sum(m.tokens for m in self.messages):
            raise ValueError(f'token_usage {self.token_usage} does not match message tokens')
        if self.token_usage > self.config.model.max_tokens:
            raise ValueError(f'token_usage {self.token_usage} exceeds budget {self.config.model.max_tokens}')
        return self

    @classmethod
    def create(
        cls,
        user_id: str,
        initial_system_message: Message,
        config: ChatConfig,
        chat_id: str | None = None,
    ) -> Chat:
        """Start a new chat whose sole message is *initial_system_message*."""
        if initial_system_message.role is not Role.SYSTEM:
            raise InvalidMessageError('initial message must be system-authored')
        budget = config.model.max_tokens
        if initial_system_message.tokens > budget:
            raise TokenBudgetExceededError(
                f'initial message uses {initial_system_message.tokens} tokens, budget is {budget}'
            )
        extra = {'id': chat_id} if chat_id else {}
        return cls(
            user_id=user_id,
            messages=[initial_system_message],
            token_usage=initial_system_message.tokens,
            config=config,
            **extra,
        )

    @property
    def model(self) -> Model:
        return self.config.model

    @property
    def initial_system_message(self) -> Message:
        return self.messages[0]

    def add_message(self, message: Message) -> None:
        """Append *message*. Raises without mutating if the chat is ended or over budget."""
        if self.status is ChatStatus.ENDED:
            raise ChatEndedError(f'chat {self.id} is ended')
        budget = self.config.model.max_tokens
        if self.token_usage + message.tokens > budget:
            raise TokenBudgetExceededError(
                f'chat {self.id} would use {self.token_usage + message.tokens} tokens, budget is {budget}'
            )
        self.messages.append(message)
        self.token_usage += message.tokens

    def history(self) -> list[ChatMessage]:
        """Full conversation in order, projected for a provider request."""
        return [m.to_chat_message() for m in self.messages]

    def count_messages(self) -> int:
        return len(self.messages)

    def end(self) -> None:
        self.status = ChatStatus.ENDED
