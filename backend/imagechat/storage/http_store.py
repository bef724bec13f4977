"""
Remote Message Store - Client for a message store reached over REST.
Speaks the {success, data, error} envelope of /api/messages.
"""

import httpx
import logging
from typing import Any, List, Optional
from urllib.parse import quote

from .interface import MessageStore
from ..core.errors import DuplicateMessageError, MessageNotFoundError, PersistenceError
from ..models.message import Message, MessageUpdate

logger = logging.getLogger(__name__)


class HttpMessageStore(MessageStore):
    """
    REST client for a remote message store.
    Transport failures and `success: false` answers become PersistenceError.
    """

    def __init__(self, base_url: str = "http://localhost:5000", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        message_id: Optional[str] = None,
        **kwargs
    ) -> Any:
        """Send one request and unwrap the response envelope's `data`."""
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise PersistenceError(
                f"Message store unreachable at {self.base_url}: {str(e) or type(e).__name__}"
            ) from e

        if message_id is not None and resp.status_code == 409:
            raise DuplicateMessageError(message_id)
        if message_id is not None and resp.status_code == 404:
            raise MessageNotFoundError(message_id)

        try:
            result = resp.json()
        except ValueError as e:
            raise PersistenceError(f"Invalid response from message store ({resp.status_code})") from e

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            raise PersistenceError(error or f"Message store request failed ({resp.status_code})")

        return result.get("data")

    @staticmethod
    def _decode(item: Any, session_id: Optional[str] = None) -> Message:
        """Validate one message from a response, defaulting its sessionId."""
        try:
            data = dict(item)
            if session_id is not None:
                data.setdefault("sessionId", session_id)
            return Message.model_validate(data)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed message from store: {e}") from e

    async def list_messages(self, session_id: str) -> List[Message]:
        data = await self._request("GET", "/api/messages", params={"sessionId": session_id})
        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError("Malformed message list from store")
        return [self._decode(item, session_id) for item in data]

    async def save_message(self, message: Message) -> Message:
        data = await self._request(
            "POST", "/api/messages", message_id=message.id, json=message.to_wire()
        )
        return self._decode(data or message.to_wire(), message.session_id)

    async def update_message(self, message_id: str, update: MessageUpdate) -> Message:
        data = await self._request(
            "PUT", f"/api/messages/{quote(message_id, safe='')}",
            message_id=message_id, json=update.to_wire()
        )
        if not data:
            raise MessageNotFoundError(message_id)
        return self._decode(data)

    async def clear_messages(self, session_id: str) -> int:
        data = await self._request("DELETE", "/api/messages", params={"sessionId": session_id})
        try:
            return int((data or {}).get("deletedCount", 0))
        except (AttributeError, TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed clear result from store: {e}") from e

    async def health(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(f"{self.base_url}/health")
            return bool(resp.json().get("success"))
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Message store health check failed: {e}")
            return False
