"""Gateway: OpenAI-compatible streaming LLM client — implements LLMClient port.

Works with any OpenAI-compatible API: OpenAI, Gemini, Groq, Together, vLLM, etc.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import openai

from chat_service.l2_use_cases.ports.llm_client import CompletionChunk, CompletionRequest


class OpenAICompatLLMClient:
    """Wraps openai.AsyncOpenAI to implement the LLMClient protocol."""

    def __init__(self, api_key: str | None = None, base_url: str = 'https://api.openai.com/v1') -> None:
        self._api_key = api_key
        self._base_url = base_url

    async def create_chat_completion_stream(self, request: CompletionRequest) -> AsyncIterator[CompletionChunk]:
        client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        kwargs: dict = {}
        if request.max_tokens:
            kwargs['max_tokens'] = request.max_tokens
        if request.stop:
            kwargs['stop'] = request.stop
        stream = await client.chat.completions.create(
            model=request.model,
            messages=[{'role': m.role.value, 'content': m.content} for m in request.messages],  # ty: ignore[invalid-argument-type] -- dict satisfies ChatCompletionMessageParam at runtime
            temperature=request.temperature,
            top_p=request.top_p,
            n=request.n,
            presence_penalty=request.presence_penalty,
            frequency_penalty=request.frequency_penalty,
            stream=True,
            **kwargs,
        )
        return _iter_deltas(stream)

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url)
            client.models.list()
            return True, ''
        except openai.AuthenticationError as e:
            return False, f'Authentication failed: {e}'
        except Exception as e:
            return False, f'Cannot connect to OpenAI-compatible API: {e}'

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names that don't exist on the remote API.

        Falls back to empty list if the models endpoint is unsupported
        (common with non-OpenAI compatible providers).
        """
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url)
            missing = []
            for model in models:
                try:
                    client.models.retrieve(model)
                except openai.NotFoundError:
                    missing.append(model)
            return missing
        except Exception:
            return []


async def _iter_deltas(stream) -> AsyncIterator[CompletionChunk]:
    """Yield the first candidate's text deltas; chunks without text are skipped."""
    async for chunk in stream:
        if not chunk.choices:
            continue
        choice = chunk.choices[0]
        content = choice.delta.content if choice.delta else None
        if content:
            yield CompletionChunk(content=content, finish_reason=choice.finish_reason)
