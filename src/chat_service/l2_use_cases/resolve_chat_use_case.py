"""Use case: find an existing chat or bootstrap a new one from config."""

from __future__ import annotations

import logging

from chat_service.l1_entities.chat import Chat, ChatConfig
from chat_service.l1_entities.chat_message import Message, Role
from chat_service.l1_entities.errors import ChatCompletionError, ChatNotFoundError, CompletionPhase
from chat_service.l1_entities.model import Model
from chat_service.l2_use_cases.dto import ChatCompletionConfigInput
from chat_service.l2_use_cases.ports.chat_gateway import ChatGateway

log = logging.getLogger('chat.usecase')


def build_chat(user_id: str, config: ChatCompletionConfigInput, chat_id: str | None = None) -> Chat:
    """Build a new Chat seeded with the configured system message. Raises on invalid config."""
    model = Model(name=config.model, max_tokens=config.model_max_tokens)
    chat_config = ChatConfig(
        model=model,
        temperature=config.temperature,
        top_p=config.top_p,
        n=config.n,
        stop=list(config.stop),
        max_tokens=config.max_tokens,
        presence_penalty=config.presence_penalty,
        frequency_penalty=config.frequency_penalty,
    )
    initial = Message.create(Role.SYSTEM, config.initial_system_message, model)
    return Chat.create(user_id, initial, chat_config, chat_id=chat_id)


class ResolveChatUseCase:
    """Returns the stored chat for an id, creating and persisting it on first use."""

    def __init__(self, chat_gateway: ChatGateway) -> None:
        self._chats = chat_gateway

    async def execute(self, chat_id: str | None, user_id: str, config: ChatCompletionConfigInput) -> Chat:
        """Resolve *chat_id*. Raises ChatCompletionError tagged FETCH, CREATE or PERSIST_NEW."""
        if chat_id:
            try:
                return await self._chats.find_chat_by_id(chat_id)
            except ChatNotFoundError:
                log.info('Chat %s not found, creating it', chat_id)
            except Exception as e:
                log.error('Cannot fetch chat %s', chat_id, exc_info=True)
                raise ChatCompletionError(CompletionPhase.FETCH, e) from e

        try:
            chat = build_chat(user_id, config, chat_id=chat_id)
        except Exception as e:
            log.error('Cannot build chat for user %s', user_id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.CREATE, e) from e

        try:
            await self._chats.create_chat(chat)
        except Exception as e:
            log.error('Cannot persist new chat %s', chat.id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.PERSIST_NEW, e) from e

        log.info('Created chat %s for user %s (model=%s)', chat.id, user_id, chat.model.name)
        return chat
