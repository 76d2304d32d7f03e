"""asyncio.Queue-backed OutputChannel that consumers iterate with ``async for``."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from chat_service.l2_use_cases.dto import ChatCompletionOutput

_CLOSED = object()


class QueueOutputChannel:
    """Implements the OutputChannel port. Iteration stops once the producer closes it."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, output: ChatCompletionOutput) -> None:
        if self._closed:
            raise RuntimeError('send on closed channel')
        await self._queue.put(output)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[ChatCompletionOutput]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item
