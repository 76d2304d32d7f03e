"""LLM model entity — name plus context-window token budget."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

_CHARS_PER_TOKEN = 4


class Model(BaseModel):
    """Identifies an LLM variant and the ceiling of its context window."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    max_tokens: int = Field(gt=0)

    def count_tokens(self, text: str) -> int:
        """Estimate how many tokens *text* occupies for this model (~4 chars/token)."""
        if not text:
            return 0
        return math.ceil(len(text) / _CHARS_PER_TOKEN)
