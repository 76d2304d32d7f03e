"""chat-service: streaming multi-turn LLM chat with persistent history."""

__version__ = '0.1.0'
