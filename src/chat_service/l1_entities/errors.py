"""Domain error types."""

from __future__ import annotations

import enum


class ChatNotFoundError(Exception):
    """Raised by a chat store when no chat exists for the requested id."""


class ChatStoreError(Exception):
    """Raised when a chat store cannot read or write a chat."""


class InvalidMessageError(ValueError):
    """Raised when a message cannot be built for its model."""


class TokenBudgetExceededError(InvalidMessageError):
    """Raised when appending a message would overflow the model's token budget."""


class ChatEndedError(Exception):
    """Raised when appending to a chat that has been ended."""


class CompletionPhase(enum.Enum):
    FETCH = 'fetching existing chat'
    CREATE = 'creating new chat'
    PERSIST_NEW = 'persisting new chat'
    MESSAGE = 'creating new message'
    APPEND = 'adding new message'
    PROVIDER = 'calling provider'
    STREAM = 'streaming response'
    EMIT = 'sending partial response'
    PERSIST = 'saving chat'


class ChatCompletionError(Exception):
    """Raised when a completion run aborts. Names the phase that failed."""

    def __init__(self, phase: CompletionPhase, cause: BaseException) -> None:
        super().__init__(f'error {phase.value}: {cause}')
        self.phase = phase
