"""Port: per-run output channel for partial completion results."""

from __future__ import annotations

from typing import Protocol

from chat_service.l2_use_cases.dto import ChatCompletionOutput


class OutputChannel(Protocol):
    """Single-producer channel. The producing run closes it when the run ends."""

    async def send(self, output: ChatCompletionOutput) -> None:
        """Deliver one partial result, in provider delta order."""
        ...

    def close(self) -> None:
        """Signal that no further results will be sent. Idempotent."""
        ...
