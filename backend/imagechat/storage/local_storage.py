"""
Local Filesystem Message Store.
Keeps one JSON document per session under the configured base directory.
"""

import asyncio
import json
import aiofiles
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .interface import MessageStore
from ..core.errors import DuplicateMessageError, MessageNotFoundError, PersistenceError
from ..models.message import DEFAULT_SESSION_ID, Message, MessageUpdate


def to_record(message: Message) -> Dict[str, Any]:
    """Stored shape: the wire shape keyed by messageId."""
    record = message.to_wire()
    record["messageId"] = record.pop("id")
    return record


def from_record(record: Dict[str, Any]) -> Message:
    """
    Decode a stored record.

    Raises:
        PersistenceError: If the record has no messageId or is not a valid message
    """
    try:
        data = dict(record)
        data["id"] = data.pop("messageId")
        data.setdefault("sessionId", DEFAULT_SESSION_ID)
        return Message.model_validate(data)
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"Malformed message record: {e}") from e


class LocalMessageStore(MessageStore):
    """
    Local filesystem message store.
    Message ids are unique across all sessions. Read-modify-write cycles are
    serialized with an asyncio.Lock.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize the store under a base directory.

        Args:
            base_dir: Base directory; session documents go to <base_dir>/messages/
        """
        self.base_dir = Path(base_dir).resolve()
        self.messages_dir = self.base_dir / "messages"
        self.messages_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        self._index: Optional[Dict[str, str]] = None  # messageId -> sessionId

    def _get_session_path(self, session_id: str) -> Path:
        """Document path for a session, with the id escaped into a single file name."""
        try:
            full_path = (self.messages_dir / f"{quote(session_id, safe='')}.json").resolve()
        except OSError as e:
            raise PersistenceError(f"Invalid session id: {session_id[:100]} ({e})") from e

        # Security check: ensure path stays inside messages_dir
        if full_path.parent != self.messages_dir:
            raise PersistenceError(f"Invalid session id: {session_id} - path traversal detected")

        return full_path

    async def _load_records(self, path: Path) -> List[Dict[str, Any]]:
        """Read a session document. Every record is a dict carrying a messageId."""
        try:
            if not path.exists():
                return []
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                content = await f.read()
            records = json.loads(content) if content.strip() else []
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Error loading {path.name}: {e}") from e

        if not isinstance(records, list) or not all(
            isinstance(record, dict) and "messageId" in record for record in records
        ):
            raise PersistenceError(f"Malformed session document {path.name}")
        return records

    async def _save_records(self, path: Path, records: List[Dict[str, Any]]) -> None:
        try:
            async with aiofiles.open(path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(records, indent=2, ensure_ascii=False))
        except OSError as e:
            raise PersistenceError(f"Error saving {path.name}: {e}") from e

    async def _ensure_index(self) -> Dict[str, str]:
        """Build the messageId index from every session document, once."""
        if self._index is None:
            try:
                paths = sorted(self.messages_dir.glob("*.json"))
            except OSError as e:
                raise PersistenceError(f"Error scanning {self.messages_dir}: {e}") from e

            index: Dict[str, str] = {}
            for path in paths:
                for record in await self._load_records(path):
                    index[record["messageId"]] = record.get("sessionId", DEFAULT_SESSION_ID)
            self._index = index
        return self._index

    async def list_messages(self, session_id: str) -> List[Message]:
        """List a session's messages, oldest first."""
        async with self._lock:
            records = await self._load_records(self._get_session_path(session_id))

        messages = [from_record(record) for record in records]
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(messages, key=lambda m: m.timestamp)

    async def save_message(self, message: Message) -> Message:
        """Append a new message to its session document."""
        async with self._lock:
            index = await self._ensure_index()
            if message.id in index:
                raise DuplicateMessageError(message.id)

            path = self._get_session_path(message.session_id)
            records = await self._load_records(path)
            records.append(to_record(message))
            await self._save_records(path, records)
            index[message.id] = message.session_id

        return message

    async def update_message(self, message_id: str, update: MessageUpdate) -> Message:
        """Apply the fields set on `update` to a stored message."""
        async with self._lock:
            index = await self._ensure_index()
            session_id = index.get(message_id)
            if session_id is None:
                raise MessageNotFoundError(message_id)

            path = self._get_session_path(session_id)
            records = await self._load_records(path)
            for position, record in enumerate(records):
                if record["messageId"] == message_id:
                    updated = from_record(record).apply(update)
                    records[position] = to_record(updated)
                    await self._save_records(path, records)
                    return updated

        raise MessageNotFoundError(message_id)

    async def clear_messages(self, session_id: str) -> int:
        """Remove a session's document."""
        async with self._lock:
            index = await self._ensure_index()
            path = self._get_session_path(session_id)
            records = await self._load_records(path)
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise PersistenceError(f"Error deleting {path.name}: {e}") from e

            for record in records:
                index.pop(record["messageId"], None)

        return len(records)

    async def health(self) -> bool:
        return self.messages_dir.is_dir()
