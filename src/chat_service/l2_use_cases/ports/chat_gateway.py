"""Port: chat store gateway."""

from __future__ import annotations

from typing import Protocol

from chat_service.l1_entities.chat import Chat


class ChatGateway(Protocol):
    """Abstract chat persistence. Implementations return snapshots, not shared objects."""

    async def find_chat_by_id(self, chat_id: str) -> Chat:
        """Return the stored chat. Raises ChatNotFoundError when absent."""
        ...

    async def create_chat(self, chat: Chat) -> None:
        """Store a brand-new chat."""
        ...

    async def save_chat(self, chat: Chat) -> None:
        """Replace the stored snapshot of *chat*."""
        ...
