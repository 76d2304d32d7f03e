"""Tests for OpenAI-compatible LLM client gateway — mocks openai here (L3 boundary)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chat_service.l1_entities.chat_message import ChatMessage, Role
from chat_service.l2_use_cases.ports.llm_client import CompletionRequest
from chat_service.l3_interface_adapters.gateways.openai_llm_client import OpenAICompatLLMClient

_ASYNC_OPENAI = 'chat_service.l3_interface_adapters.gateways.openai_llm_client.openai.AsyncOpenAI'
_OPENAI = 'chat_service.l3_interface_adapters.gateways.openai_llm_client.openai.OpenAI'


class _FakeStream:
    """Async-iterable stand-in for openai.AsyncStream."""

    def __init__(self, chunks, error: Exception | None = None):
        self._chunks = chunks
        self._error = error

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


def _chunk(content, finish_reason=None):
    choice = MagicMock()
    choice.delta.content = content
    choice.finish_reason = finish_reason
    chunk = MagicMock()
    chunk.choices = [choice]
    return chunk


def _request(**kwargs) -> CompletionRequest:
    values = dict(
        model='gpt-4o-mini',
        messages=[
            ChatMessage(role=Role.SYSTEM, content='Be brief.'),
            ChatMessage(role=Role.USER, content='hi'),
        ],
    )
    values.update(kwargs)
    return CompletionRequest(**values)


def _client_returning(mock_cls, stream) -> AsyncMock:
    mock_client = AsyncMock()
    mock_cls.return_value = mock_client
    mock_client.chat.completions.create = AsyncMock(return_value=stream)
    return mock_client


class TestCreateChatCompletionStream:
    @pytest.mark.asyncio
    @patch(_ASYNC_OPENAI)
    async def test_yields_deltas(self, mock_cls):
        _client_returning(mock_cls, _FakeStream([_chunk('Hel'), _chunk('lo'), _chunk(None, 'stop')]))

        client = OpenAICompatLLMClient()
        stream = await client.create_chat_completion_stream(_request())

        assert [c.content async for c in stream] == ['Hel', 'lo']

    @pytest.mark.asyncio
    @patch(_ASYNC_OPENAI)
    async def test_sends_full_request(self, mock_cls):
        mock_client = _client_returning(mock_cls, _FakeStream([]))

        client = OpenAICompatLLMClient(api_key='sk-test', base_url='http://localhost:8000/v1')
        await client.create_chat_completion_stream(
            _request(max_tokens=128, temperature=0.3, top_p=0.8, presence_penalty=0.5, stop=['END'])
        )

        mock_cls.assert_called_once_with(api_key='sk-test', base_url='http://localhost:8000/v1')
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs['model'] == 'gpt-4o-mini'
        assert kwargs['messages'] == [
            {'role': 'system', 'content': 'Be brief.'},
            {'role': 'user', 'content': 'hi'},
        ]
        assert kwargs['stream'] is True
        assert kwargs['max_tokens'] == 128
        assert kwargs['temperature'] == 0.3
        assert kwargs['top_p'] == 0.8
        assert kwargs['presence_penalty'] == 0.5
        assert kwargs['stop'] == ['END']

    @pytest.mark.asyncio
    @patch(_ASYNC_OPENAI)
    async def test_omits_unset_max_tokens_and_stop(self, mock_cls):
        mock_client = _client_returning(mock_cls, _FakeStream([]))

        await OpenAICompatLLMClient().create_chat_completion_stream(_request())

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert 'max_tokens' not in kwargs
        assert 'stop' not in kwargs

    @pytest.mark.asyncio
    @patch(_ASYNC_OPENAI)
    async def test_skips_chunks_without_choices(self, mock_cls):
        empty = MagicMock()
        empty.choices = []
        _client_returning(mock_cls, _FakeStream([empty, _chunk('ok')]))

        stream = await OpenAICompatLLMClient().create_chat_completion_stream(_request())

        assert [c.content async for c in stream] == ['ok']

    @pytest.mark.asyncio
    @patch(_ASYNC_OPENAI)
    async def test_call_error_raises_on_await(self, mock_cls):
        mock_client = AsyncMock()
        mock_cls.return_value = mock_client
        mock_client.chat.completions.create = AsyncMock(side_effect=ConnectionError('refused'))

        with pytest.raises(ConnectionError):
            await OpenAICompatLLMClient().create_chat_completion_stream(_request())

    @pytest.mark.asyncio
    @patch(_ASYNC_OPENAI)
    async def test_mid_stream_error_raises_during_iteration(self, mock_cls):
        _client_returning(mock_cls, _FakeStream([_chunk('partial')], error=ConnectionError('reset')))

        stream = await OpenAICompatLLMClient().create_chat_completion_stream(_request())
        received = []
        with pytest.raises(ConnectionError):
            async for chunk in stream:
                received.append(chunk.content)

        assert received == ['partial']


class TestPreflight:
    @patch(_OPENAI)
    def test_check_connectivity_success(self, mock_cls):
        mock_client = MagicMock()
        mock_cls.return_value = mock_client

        ok, err = OpenAICompatLLMClient().check_connectivity()
        assert ok is True
        assert not err

    @patch(_OPENAI)
    def test_check_connectivity_auth_failure(self, mock_cls):
        import openai as openai_lib

        mock_client = MagicMock()
        mock_cls.return_value = mock_client
        mock_client.models.list.side_effect = openai_lib.AuthenticationError(
            message='Invalid API key',
            response=MagicMock(status_code=401),
            body=None,
        )

        ok, err = OpenAICompatLLMClient().check_connectivity()
        assert ok is False
        assert 'Authentication failed' in err

    @patch(_OPENAI)
    def test_check_connectivity_network_failure(self, mock_cls):
        mock_client = MagicMock()
        mock_cls.return_value = mock_client
        mock_client.models.list.side_effect = ConnectionError('Connection refused')

        ok, err = OpenAICompatLLMClient().check_connectivity()
        assert ok is False
        assert 'Cannot connect' in err

    @patch(_OPENAI)
    def test_check_models_some_missing(self, mock_cls):
        import openai as openai_lib

        mock_client = MagicMock()
        mock_cls.return_value = mock_client

        def _retrieve(model):
            if model == 'missing-model':
                raise openai_lib.NotFoundError(message='not found', response=MagicMock(status_code=404), body=None)
            return MagicMock()

        mock_client.models.retrieve.side_effect = _retrieve

        assert OpenAICompatLLMClient().check_models(['gpt-4o', 'missing-model']) == ['missing-model']

    @patch(_OPENAI)
    def test_check_models_unsupported_endpoint_returns_empty(self, mock_cls):
        mock_cls.side_effect = RuntimeError('no models endpoint')

        assert OpenAICompatLLMClient().check_models(['gpt-4o']) == []
