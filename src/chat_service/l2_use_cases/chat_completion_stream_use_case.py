"""Use case: one streamed chat turn, from resolved chat to persisted reply."""

from __future__ import annotations

import logging

from chat_service.l1_entities.chat import Chat
from chat_service.l1_entities.chat_message import Message, Role
from chat_service.l1_entities.errors import ChatCompletionError, CompletionPhase
from chat_service.l2_use_cases.dto import ChatCompletionInput, ChatCompletionOutput
from chat_service.l2_use_cases.ports.chat_gateway import ChatGateway
from chat_service.l2_use_cases.ports.llm_client import CompletionRequest, LLMClient
from chat_service.l2_use_cases.ports.output_channel import OutputChannel
from chat_service.l2_use_cases.resolve_chat_use_case import ResolveChatUseCase

log = logging.getLogger('chat.usecase')


def build_completion_request(chat: Chat) -> CompletionRequest:
    """Project the whole chat history and its bound config into a streaming request."""
    cfg = chat.config
    return CompletionRequest(
        model=cfg.model.name,
        messages=chat.history(),
        max_tokens=cfg.max_tokens,
        temperature=cfg.temperature,
        top_p=cfg.top_p,
        n=cfg.n,
        presence_penalty=cfg.presence_penalty,
        frequency_penalty=cfg.frequency_penalty,
        stop=list(cfg.stop),
        stream=True,
    )


class ChatCompletionStreamUseCase:
    """Runs one user turn: resolve, append, stream the reply, persist.

    Partial results go to the per-run channel passed to ``execute``; the
    channel is closed when the run ends, whether it succeeded or not. Any
    failure raises ChatCompletionError and leaves the stored chat untouched
    (apart from a chat created during resolution).
    """

    def __init__(self, chat_gateway: ChatGateway, llm_client: LLMClient) -> None:
        self._chats = chat_gateway
        self._llm = llm_client
        self._resolve_uc = ResolveChatUseCase(chat_gateway)

    async def execute(self, data: ChatCompletionInput, channel: OutputChannel) -> ChatCompletionOutput:
        try:
            return await self._run(data, channel)
        finally:
            channel.close()

    async def _run(self, data: ChatCompletionInput, channel: OutputChannel) -> ChatCompletionOutput:
        chat = await self._resolve_uc.execute(data.chat_id, data.user_id, data.config)

        try:
            user_message = Message.create(Role.USER, data.user_message, chat.model)
        except Exception as e:
            log.error('Invalid user message for chat %s', chat.id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.MESSAGE, e) from e
        try:
            chat.add_message(user_message)
        except Exception as e:
            log.error('Cannot append user message to chat %s', chat.id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.APPEND, e) from e

        request = build_completion_request(chat)
        log.info(
            'Completion request: chat=%s, model=%s, msgs=%d, token_usage=%d',
            chat.id,
            request.model,
            len(request.messages),
            chat.token_usage,
        )

        try:
            stream = await self._llm.create_chat_completion_stream(request)
        except Exception as e:
            log.error('Provider call failed for chat %s', chat.id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.PROVIDER, e) from e

        parts: list[str] = []
        while True:
            try:
                chunk = await anext(stream)
            except StopAsyncIteration:
                break
            except Exception as e:
                log.error('Stream failed for chat %s after %d chunks', chat.id, len(parts), exc_info=True)
                raise ChatCompletionError(CompletionPhase.STREAM, e) from e
            parts.append(chunk.content)
            try:
                await channel.send(ChatCompletionOutput(chat_id=chat.id, user_id=data.user_id, content=''.join(parts)))
            except Exception as e:
                log.error('Cannot deliver partial response for chat %s', chat.id, exc_info=True)
                raise ChatCompletionError(CompletionPhase.EMIT, e) from e

        full_response = ''.join(parts)
        log.debug('Stream finished for chat %s (%d chunks, %d chars)', chat.id, len(parts), len(full_response))

        try:
            assistant = Message.create(Role.ASSISTANT, full_response, chat.model)
            chat.add_message(assistant)
        except Exception as e:
            log.error('Cannot append reply to chat %s', chat.id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.APPEND, e) from e

        try:
            await self._chats.save_chat(chat)
        except Exception as e:
            log.error('Saving chat %s failed', chat.id, exc_info=True)
            raise ChatCompletionError(CompletionPhase.PERSIST, e) from e

        log.info('Completion finished: chat=%s, msgs=%d, token_usage=%d', chat.id, chat.count_messages(), chat.token_usage)
        return ChatCompletionOutput(chat_id=chat.id, user_id=data.user_id, content=full_response)
