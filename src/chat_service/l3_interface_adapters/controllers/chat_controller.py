"""ChatController — runs chat turns for one user and relays streamed text."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from chat_service.l1_entities.config import AppConfig
from chat_service.l2_use_cases.chat_completion_stream_use_case import ChatCompletionStreamUseCase
from chat_service.l2_use_cases.dto import ChatCompletionConfigInput, ChatCompletionInput, ChatCompletionOutput
from chat_service.l2_use_cases.ports.chat_gateway import ChatGateway
from chat_service.l2_use_cases.ports.llm_client import LLMClient
from chat_service.l2_use_cases.utils.output_channel import QueueOutputChannel

log = logging.getLogger('chat.controller')


class ChatController:
    """Bridges a transport (the CLI) to ChatCompletionStreamUseCase.

    Remembers the chat id of the last successful turn so follow-up messages
    continue the same conversation.
    """

    def __init__(
        self,
        config: AppConfig,
        chat_gateway: ChatGateway,
        llm_client: LLMClient,
        user_id: str,
        chat_id: str | None = None,
    ) -> None:
        self._completion_config = ChatCompletionConfigInput.model_validate(config.chat.model_dump())
        self._completion_uc = ChatCompletionStreamUseCase(chat_gateway, llm_client)
        self.user_id = user_id
        self.chat_id = chat_id

    async def send(
        self,
        message: str,
        on_delta: Callable[[str], None] | None = None,
    ) -> ChatCompletionOutput:
        """Run one turn. *on_delta* receives each newly streamed piece of text, in order."""
        data = ChatCompletionInput(
            chat_id=self.chat_id,
            user_id=self.user_id,
            user_message=message,
            config=self._completion_config,
        )
        channel = QueueOutputChannel()
        producer = asyncio.create_task(self._completion_uc.execute(data, channel))

        seen = 0
        try:
            async for partial in channel:
                if on_delta is not None:
                    on_delta(partial.content[seen:])
                seen = len(partial.content)
        except BaseException:
            producer.cancel()
            raise
        result = await producer

        self.chat_id = result.chat_id
        log.info('Turn complete: chat=%s, %d chars', result.chat_id, len(result.content))
        return result
