"""Gateway: YAML configuration loader."""

from __future__ import annotations

from pathlib import Path

import yaml

from chat_service.l1_entities.config import AppConfig
from chat_service.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS


class YamlConfigLoader:
    """Reads chat-service YAML config, applying CLI overrides on top."""

    def load(self, config_path: str | None = None, overrides: dict | None = None) -> AppConfig:
        return AppConfig.model_validate(self.load_raw(config_path, overrides))

    def load_raw(self, config_path: str | None = None, overrides: dict | None = None) -> dict:
        """Return merged YAML data before validation. Infra keys (llm_provider, ollama, ...) are kept."""
        if config_path is not None:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f'Config file not found: {path}')
            data = _read_mapping(path)
        else:
            existing = [p for p in DEFAULT_CONFIG_PATHS if p.exists()]
            data = _read_mapping(existing[0]) if existing else {}
        if overrides:
            deep_merge(data, overrides)
        return data


def _read_mapping(path: Path) -> dict:
    data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
    if not isinstance(data, dict):
        raise ValueError(f'Config file {path} must contain a mapping, got {type(data).__name__}')
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
