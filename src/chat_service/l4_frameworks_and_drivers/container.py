"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from pathlib import Path

from chat_service.l1_entities.config import AppConfig
from chat_service.l2_use_cases.ports.chat_gateway import ChatGateway
from chat_service.l2_use_cases.ports.llm_client import LLMClient
from chat_service.l3_interface_adapters.controllers.chat_controller import ChatController
from chat_service.l3_interface_adapters.gateways.file_chat_gateway import FileChatGateway
from chat_service.l3_interface_adapters.gateways.ollama_llm_client import OllamaLLMClient
from chat_service.l3_interface_adapters.gateways.openai_llm_client import OpenAICompatLLMClient
from chat_service.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader
from chat_service.l4_frameworks_and_drivers.infra_config import InfraConfig


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(
        self,
        config: AppConfig,
        user_id: str,
        chat_id: str | None = None,
        infra: InfraConfig | None = None,
    ) -> None:
        self.config = config
        self.infra = infra or InfraConfig()

        self.chat_gateway: ChatGateway = FileChatGateway(Path(config.storage.directory))
        self.llm_client: LLMClient = self.build_llm_client(self.infra)

        self.controller = ChatController(
            config=config,
            chat_gateway=self.chat_gateway,
            llm_client=self.llm_client,
            user_id=user_id,
            chat_id=chat_id,
        )

    @staticmethod
    def build_llm_client(infra: InfraConfig) -> LLMClient:
        if infra.llm_provider == 'openai':
            return OpenAICompatLLMClient(api_key=infra.openai.api_key, base_url=infra.openai.base_url)
        return OllamaLLMClient(host=infra.ollama.host)

    @staticmethod
    def config_loader() -> YamlConfigLoader:
        return YamlConfigLoader()
