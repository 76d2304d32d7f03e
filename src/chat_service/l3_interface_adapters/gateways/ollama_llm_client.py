"""Gateway: Ollama streaming LLM client — implements LLMClient port."""

from __future__ import annotations

from collections.abc import AsyncIterator

import ollama as ollama_sync

from chat_service.l2_use_cases.ports.llm_client import CompletionChunk, CompletionRequest


def _options(request: CompletionRequest) -> dict:
    """Map OpenAI-style generation parameters onto Ollama runtime options."""
    options: dict = {
        'temperature': request.temperature,
        'top_p': request.top_p,
        'presence_penalty': request.presence_penalty,
        'frequency_penalty': request.frequency_penalty,
    }
    if request.max_tokens:
        options['num_predict'] = request.max_tokens
    if request.stop:
        options['stop'] = request.stop
    return options


class OllamaLLMClient:
    """Wraps ollama.AsyncClient to implement the LLMClient protocol."""

    def __init__(self, host: str = 'http://localhost:11434') -> None:
        self._host = host

    async def create_chat_completion_stream(self, request: CompletionRequest) -> AsyncIterator[CompletionChunk]:
        client = ollama_sync.AsyncClient(host=self._host)
        stream = await client.chat(
            model=request.model,
            messages=[{'role': m.role.value, 'content': m.content} for m in request.messages],
            options=_options(request),
            stream=True,
        )
        # ollama sends the request on the first step; call failures raise from this await.
        parts = aiter(stream)
        first = await anext(parts, None)
        return _iter_deltas(first, parts)

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = ollama_sync.Client(host=self._host)
            client.list()
            return True, ''
        except Exception as e:
            return False, f'Cannot connect to Ollama: {e}'

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names that aren't pulled locally.

        Falls back to empty list if the server can't be queried.
        """
        client = ollama_sync.Client(host=self._host)
        missing = []
        for model in models:
            try:
                client.show(model)
            except ollama_sync.ResponseError:
                missing.append(model)
            except Exception:
                return []
        return missing


def _to_chunk(part) -> CompletionChunk | None:
    content = part.message.content if part.message else None
    if not content:
        return None
    return CompletionChunk(content=content, finish_reason=part.done_reason if part.done else None)


async def _iter_deltas(first, parts) -> AsyncIterator[CompletionChunk]:
    if first is None:
        return
    chunk = _to_chunk(first)
    if chunk:
        yield chunk
    async for part in parts:
        chunk = _to_chunk(part)
        if chunk:
            yield chunk
