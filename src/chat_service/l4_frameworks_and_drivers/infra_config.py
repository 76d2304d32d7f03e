"""Infrastructure provider configs — lives in L4, not domain."""

from __future__ import annotations

import copy
from typing import Literal

from pydantic import BaseModel, Field

from chat_service.l1_entities.config import AppConfig
from chat_service.l3_interface_adapters.gateways.paths import DEFAULT_CHATS_DIR
from chat_service.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'chat': {
        'model': 'gpt-oss:20b-cloud',
        'model_max_tokens': 128_000,
        'temperature': 0.1,
        'top_p': 1.0,
        'n': 1,
        'stop': [],
        'max_tokens': 1_000,
        'presence_penalty': 0.0,
        'frequency_penalty': 0.0,
        'initial_system_message': 'You are a helpful assistant.',
    },
    'storage': {
        'directory': str(DEFAULT_CHATS_DIR),
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)


class OllamaProviderConfig(BaseModel):
    host: str = 'http://localhost:11434'


class OpenAIProviderConfig(BaseModel):
    api_key: str | None = None  # None → SDK reads OPENAI_API_KEY env
    base_url: str = 'https://api.openai.com/v1'


class InfraConfig(BaseModel):
    """Groups all provider-specific settings outside the domain layer."""

    llm_provider: Literal['ollama', 'openai'] = 'ollama'
    ollama: OllamaProviderConfig = Field(default_factory=OllamaProviderConfig)
    openai: OpenAIProviderConfig = Field(default_factory=OpenAIProviderConfig)
