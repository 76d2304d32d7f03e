"""Gateway: file-based chat store — implements ChatGateway port.

One JSON document per chat under the output directory, named ``<chat_id>.json``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from chat_service.l1_entities.chat import Chat
from chat_service.l1_entities.errors import ChatNotFoundError, ChatStoreError

log = logging.getLogger('chat.store')

_SAFE_ID = re.compile(r'[\w\-]+')


class FileChatGateway:
    """Persists chat snapshots to the filesystem. Every read returns a fresh object."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, chat_id: str) -> Path:
        if not _SAFE_ID.fullmatch(chat_id):
            raise ChatStoreError(f'Invalid chat id: {chat_id!r}')
        return self._directory / f'{chat_id}.json'

    async def find_chat_by_id(self, chat_id: str) -> Chat:
        return await asyncio.to_thread(self._read, chat_id)

    async def create_chat(self, chat: Chat) -> None:
        await asyncio.to_thread(self._write, chat, exclusive=True)

    async def save_chat(self, chat: Chat) -> None:
        await asyncio.to_thread(self._write, chat, exclusive=False)

    def _read(self, chat_id: str) -> Chat:
        path = self.path_for(chat_id)
        try:
            raw = path.read_text(encoding='utf-8')
        except FileNotFoundError as e:
            raise ChatNotFoundError(f'chat not found: {chat_id}') from e
        except OSError as e:
            raise ChatStoreError(f'Cannot read {path}: {e}') from e
        try:
            return Chat.model_validate_json(raw)
        except ValidationError as e:
            raise ChatStoreError(f'Malformed chat document {path.name}: {e}') from e

    def _write(self, chat: Chat, *, exclusive: bool) -> None:
        path = self.path_for(chat.id)
        # Readers never observe a half-written snapshot.
        tmp = path.with_name(path.name + '.tmp')
        try:
            if exclusive and path.exists():
                raise FileExistsError(path)
            with tmp.open('w', encoding='utf-8') as f:
                f.write(chat.model_dump_json(indent=2))
            tmp.replace(path)
        except FileExistsError as e:
            raise ChatStoreError(f'Chat {chat.id} already exists') from e
        except OSError as e:
            raise ChatStoreError(f'Cannot write {path}: {e}') from e
        log.debug('Wrote chat %s to %s (%d messages, op=%s)', chat.id, path.name, chat.count_messages(), 'create' if exclusive else 'save')
