"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from chat_service.l1_entities.chat import Chat, ChatConfig
from chat_service.l1_entities.chat_message import Message, Role
from chat_service.l1_entities.config import AppConfig
from chat_service.l1_entities.errors import ChatNotFoundError
from chat_service.l1_entities.model import Model
from chat_service.l2_use_cases.dto import ChatCompletionConfigInput, ChatCompletionInput
from chat_service.l2_use_cases.ports.llm_client import CompletionChunk, CompletionRequest
from chat_service.l4_frameworks_and_drivers.infra_config import build_app_config

# --- Protocol-conforming Fakes ---


class FakeChatGateway:
    """In-memory chat store. Stores and returns deep copies, like a real store."""

    def __init__(self, chats: list[Chat] | None = None):
        self._chats: dict[str, Chat] = {c.id: c.model_copy(deep=True) for c in chats or []}
        self.find_calls: list[str] = []
        self.create_calls: list[Chat] = []
        self.save_calls: list[Chat] = []
        self._find_error: Exception | None = None
        self._create_error: Exception | None = None
        self._save_error: Exception | None = None

    async def find_chat_by_id(self, chat_id: str) -> Chat:
        self.find_calls.append(chat_id)
        if self._find_error is not None:
            raise self._find_error
        if chat_id not in self._chats:
            raise ChatNotFoundError(f'chat not found: {chat_id}')
        return self._chats[chat_id].model_copy(deep=True)

    async def create_chat(self, chat: Chat) -> None:
        self.create_calls.append(chat.model_copy(deep=True))
        if self._create_error is not None:
            raise self._create_error
        self._chats[chat.id] = chat.model_copy(deep=True)

    async def save_chat(self, chat: Chat) -> None:
        self.save_calls.append(chat.model_copy(deep=True))
        if self._save_error is not None:
            raise self._save_error
        self._chats[chat.id] = chat.model_copy(deep=True)

    def stored(self, chat_id: str) -> Chat:
        return self._chats[chat_id]

    def set_find_error(self, error: Exception) -> None:
        self._find_error = error

    def set_create_error(self, error: Exception) -> None:
        self._create_error = error

    def set_save_error(self, error: Exception) -> None:
        self._save_error = error


class FakeLLMClient:
    """Fake streaming LLM client for L2 use case tests."""

    def __init__(self, deltas: list[str] | None = None):
        self._deltas = list(deltas if deltas is not None else ['Fake ', 'LLM ', 'response'])
        self.requests: list[CompletionRequest] = []
        self._call_error: Exception | None = None
        self._stream_error: Exception | None = None
        self._fail_after = 0
        self._connectivity = (True, '')
        self._missing_models: list[str] = []

    async def create_chat_completion_stream(self, request: CompletionRequest) -> AsyncIterator[CompletionChunk]:
        self.requests.append(request)
        if self._call_error is not None:
            raise self._call_error
        return self._stream()

    async def _stream(self) -> AsyncIterator[CompletionChunk]:
        for i, delta in enumerate(self._deltas):
            if self._stream_error is not None and i == self._fail_after:
                raise self._stream_error
            yield CompletionChunk(content=delta)
        if self._stream_error is not None and self._fail_after >= len(self._deltas):
            raise self._stream_error

    def set_deltas(self, deltas: list[str]) -> None:
        self._deltas = list(deltas)

    def set_call_error(self, error: Exception) -> None:
        self._call_error = error

    def set_stream_error(self, error: Exception, after: int) -> None:
        """Raise *error* after *after* deltas have been yielded."""
        self._stream_error = error
        self._fail_after = after

    def check_connectivity(self) -> tuple[bool, str]:
        return self._connectivity

    def check_models(self, models: list[str]) -> list[str]:
        return [m for m in models if m in self._missing_models]

    def set_connectivity(self, ok: bool, msg: str = '') -> None:
        self._connectivity = (ok, msg)

    def set_missing_models(self, models: list[str]) -> None:
        self._missing_models = list(models)


class RecordingChannel:
    """OutputChannel that records what it receives."""

    def __init__(self):
        self.outputs: list = []
        self.close_calls = 0

    async def send(self, output) -> None:
        self.outputs.append(output)

    def close(self) -> None:
        self.close_calls += 1

    @property
    def contents(self) -> list[str]:
        return [o.content for o in self.outputs]


def make_chat(
    system_prompt: str = 'You are helpful.',
    max_tokens: int = 1_000,
    chat_id: str | None = None,
    user_id: str = 'user-1',
) -> Chat:
    model = Model(name='test-model', max_tokens=max_tokens)
    initial = Message.create(Role.SYSTEM, system_prompt, model)
    return Chat.create(user_id, initial, ChatConfig(model=model), chat_id=chat_id)


# --- Standard Fixtures ---


@pytest.fixture
def completion_config() -> ChatCompletionConfigInput:
    return ChatCompletionConfigInput(
        model='test-model',
        model_max_tokens=1_000,
        temperature=0.2,
        top_p=0.9,
        n=1,
        stop=['###'],
        max_tokens=256,
        presence_penalty=0.1,
        frequency_penalty=0.3,
        initial_system_message='You are helpful.',
    )


@pytest.fixture
def make_input(completion_config: ChatCompletionConfigInput):
    def _make(message: str = 'Hi there', chat_id: str | None = None, user_id: str = 'user-1') -> ChatCompletionInput:
        return ChatCompletionInput(chat_id=chat_id, user_id=user_id, user_message=message, config=completion_config)

    return _make


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
llm_provider: "openai"
openai:
  base_url: "http://localhost:8000/v1"
chat:
  model: "llama3:8b"
  model_max_tokens: 8192
  temperature: 0.5
  top_p: 1.0
  n: 1
  stop: []
  max_tokens: 512
  presence_penalty: 0.0
  frequency_penalty: 0.0
  initial_system_message: "You are terse."
storage:
  directory: "./test_chats"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_gateway() -> FakeChatGateway:
    return FakeChatGateway()


@pytest.fixture
def tmp_chats_dir(tmp_path: Path) -> Path:
    d = tmp_path / 'chats'
    d.mkdir()
    return d
