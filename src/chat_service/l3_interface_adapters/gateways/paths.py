"""Shared path constants for configuration and chat storage."""

from __future__ import annotations

from platformdirs import user_config_path, user_data_path

CONFIG_DIR = user_config_path('chat-service')
DATA_DIR = user_data_path('chat-service')
DEFAULT_CHATS_DIR = DATA_DIR / 'chats'

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]
