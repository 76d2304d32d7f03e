"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChatDefaultsConfig(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model: str
    model_max_tokens: int
    temperature: float
    top_p: float
    n: int
    stop: list[str] = Field(default_factory=list)
    max_tokens: int
    presence_penalty: float
    frequency_penalty: float
    initial_system_message: str


class StorageConfig(BaseModel):
    directory: str


class AppConfig(BaseModel):
    chat: ChatDefaultsConfig
    storage: StorageConfig
