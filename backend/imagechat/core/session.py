"""
Chat Session - Message lifecycle for one session.

A session owns its message list, model catalog and model override. Each
submitted prompt creates a user message and an assistant message; the
assistant message starts out generating and ends either completed (images,
no error) or failed (error, no images). Every change is mirrored to the
message store on a best-effort basis: the in-memory list is the source of
truth for a live session.
"""

import itertools
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .errors import GenerationError, PersistenceError
from .generation_pipeline import GenerationPipeline
from .logging_config import SessionLoggerAdapter
from .model_catalog import ModelCatalog
from .model_selector import ModelSelector
from .status_monitor import StatusMonitor
from ..config.settings import OllamaConfig
from ..models.message import DEFAULT_SESSION_ID, Message, MessageType, MessageUpdate
from ..models.ollama import OllamaModel, SelectedModel
from ..ollama.base import ModelServingGateway
from ..storage.interface import MessageStore

logger = logging.getLogger(__name__)

GENERATING_TEMPLATE = 'Generating images for: "{prompt}"'
COMPLETED_TEMPLATE = 'Here are the images I generated for "{prompt}":'
FAILED_TEMPLATE = 'I encountered an error while generating images for "{prompt}".'
INTERRUPTED_ERROR = "Generation was interrupted before it completed"

# Process-wide so ids stay unique across sessions within one millisecond
_id_sequence = itertools.count(1)


@dataclass
class SessionEvent:
    """Change notification emitted by a ChatSession."""
    kind: str  # message_added, message_updated, messages_cleared, model_selected
    session_id: str
    message: Optional[Message] = None
    selected_model: Optional[SelectedModel] = None


SessionListener = Callable[[SessionEvent], None]


class ChatSession:
    """
    Session context: commands are submit, select_model and clear; readers
    use `messages` or subscribe to change notifications.
    """

    def __init__(
        self,
        session_id: str,
        gateway: ModelServingGateway,
        config: OllamaConfig,
        store: Optional[MessageStore] = None,
    ):
        """
        Initialize a session.

        Args:
            session_id: Session key
            gateway: Model-serving API gateway
            config: Serving-API configuration
            store: Optional message store to mirror changes to
        """
        self.session_id = session_id
        self.store = store
        self.status_monitor = StatusMonitor(gateway)
        self.catalog = ModelCatalog(gateway)
        self.selector = ModelSelector(self.catalog)
        self.pipeline = GenerationPipeline(gateway, self.catalog, self.selector, config)
        self._messages: List[Message] = []
        self._listeners: List[SessionListener] = []
        self._restored = False
        self.log = SessionLoggerAdapter(logger, {"session_id": session_id})

    @property
    def messages(self) -> List[Message]:
        """Snapshot of the session's messages in display order."""
        return list(self._messages)

    @property
    def selected_model(self) -> Optional[SelectedModel]:
        return self.selector.selected

    def get_message(self, message_id: str) -> Optional[Message]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self.log.error(f"Session listener failed on {event.kind}", exc_info=True)

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}-{int(time.time() * 1000)}-{next(_id_sequence)}"

    async def probe(self) -> bool:
        """Liveness of the serving API."""
        return await self.status_monitor.probe()

    async def refresh_models(self) -> List[OllamaModel]:
        """Re-discover the catalog; empty when the serving API is unavailable."""
        return await self.catalog.discover()

    def select_model(self, model: SelectedModel) -> None:
        """Set the session's model override."""
        self.selector.select(model)
        self._emit(SessionEvent("model_selected", self.session_id, selected_model=model))

    async def restore(self) -> List[Message]:
        """
        Load stored history into an empty session, once.
        A store failure leaves the session empty. Assistant messages stored
        while still generating have no pipeline left to finish them, so they
        are restored as failed.
        """
        if self._restored or self.store is None:
            return self.messages

        try:
            stored = await self.store.list_messages(self.session_id)
        except PersistenceError as e:
            self.log.warning(f"Could not restore history: {e}")
            return self.messages

        self._restored = True
        if not self._messages:
            self._messages = list(stored)
            self.log.info(f"Restored {len(stored)} messages")
            await self._fail_interrupted()
        return self.messages

    async def _fail_interrupted(self) -> None:
        previous: Optional[Message] = None
        for message in list(self._messages):
            if message.type == MessageType.ASSISTANT and message.is_generating:
                changes = {"error": INTERRUPTED_ERROR, "is_generating": False}
                if previous is not None and previous.type == MessageType.USER:
                    changes["content"] = FAILED_TEMPLATE.format(prompt=previous.content)
                self.log.warning(f"Message {message.id} was interrupted while generating")
                await self._transition(message, MessageUpdate(**changes))
            previous = message

    async def submit(self, prompt: str) -> Message:
        """
        Run one prompt through the lifecycle.

        Args:
            prompt: User prompt

        Returns:
            The assistant message in its terminal state

        Raises:
            ValueError: If the prompt is blank
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be empty")

        now = datetime.now(timezone.utc)
        user_message = Message(
            id=self._new_id("user"),
            type=MessageType.USER,
            content=prompt,
            timestamp=now,
            session_id=self.session_id,
        )
        assistant_message = Message(
            id=self._new_id("assistant"),
            type=MessageType.ASSISTANT,
            content=GENERATING_TEMPLATE.format(prompt=prompt),
            timestamp=now,
            is_generating=True,
            session_id=self.session_id,
        )

        self._messages.extend([user_message, assistant_message])
        self._emit(SessionEvent("message_added", self.session_id, message=user_message))
        self._emit(SessionEvent("message_added", self.session_id, message=assistant_message))
        self.log.info(f"Prompt submitted: {prompt[:100]}")

        await self._mirror_save(user_message)
        await self._mirror_save(assistant_message)

        try:
            images = await self.pipeline.generate(prompt)
        except GenerationError as e:
            self.log.warning(f"Generation failed: {e}")
            update = MessageUpdate(
                content=FAILED_TEMPLATE.format(prompt=prompt),
                error=str(e),
                is_generating=False,
            )
        except Exception as e:
            self.log.error(f"Unexpected generation failure: {e}", exc_info=True)
            update = MessageUpdate(
                content=FAILED_TEMPLATE.format(prompt=prompt),
                error=str(e) or "Unknown error occurred",
                is_generating=False,
            )
        else:
            update = MessageUpdate(
                content=COMPLETED_TEMPLATE.format(prompt=prompt),
                images=images,
                is_generating=False,
            )

        return await self._transition(assistant_message, update)

    async def regenerate(self, prompt: str) -> Message:
        """Submit the same prompt again as a new message pair."""
        return await self.submit(prompt)

    async def _transition(self, message: Message, update: MessageUpdate) -> Message:
        """Move the assistant message to its terminal state and mirror it."""
        updated = message.apply(update)

        for position, current in enumerate(self._messages):
            if current.id == message.id:
                self._messages[position] = updated
                break
        else:
            # Cleared while generating: nothing left to update
            self.log.info(f"Message {message.id} was cleared before completion")
            return updated

        self._emit(SessionEvent("message_updated", self.session_id, message=updated))
        await self._mirror_update(message.id, update)
        return updated

    async def clear(self) -> int:
        """
        Remove every message of the session, locally first, then in the store.

        Returns:
            Number of messages removed from the session
        """
        removed = len(self._messages)
        self._messages.clear()
        self._emit(SessionEvent("messages_cleared", self.session_id))

        if self.store is not None:
            try:
                deleted = await self.store.clear_messages(self.session_id)
                self.log.info(f"Cleared {removed} messages ({deleted} stored)")
            except PersistenceError as e:
                self.log.warning(f"Failed to clear stored messages: {e}")

        return removed

    async def _mirror_save(self, message: Message) -> None:
        if self.store is None:
            return
        try:
            await self.store.save_message(message)
        except PersistenceError as e:
            self.log.warning(f"Failed to persist message {message.id}: {e}")

    async def _mirror_update(self, message_id: str, update: MessageUpdate) -> None:
        if self.store is None:
            return
        try:
            await self.store.update_message(message_id, update)
        except PersistenceError as e:
            self.log.warning(f"Failed to persist update of {message_id}: {e}")


class SessionManager:
    """Creates sessions on first use and keeps them for the process lifetime."""

    def __init__(
        self,
        gateway: ModelServingGateway,
        config: OllamaConfig,
        store: Optional[MessageStore] = None,
    ):
        self.gateway = gateway
        self.config = config
        self.store = store
        self._sessions: Dict[str, ChatSession] = {}

    @property
    def session_ids(self) -> List[str]:
        return list(self._sessions)

    async def get_session(self, session_id: str = DEFAULT_SESSION_ID) -> ChatSession:
        """Return the session for `session_id`, creating and restoring it if new."""
        session = self._sessions.get(session_id)
        if session is None:
            session = ChatSession(session_id, self.gateway, self.config, self.store)
            self._sessions[session_id] = session
            await session.restore()
        return session


# Global session manager instance
_session_manager: Optional[SessionManager] = None


def init_session_manager(manager: SessionManager) -> SessionManager:
    """Install the global session manager."""
    global _session_manager
    _session_manager = manager
    return _session_manager


def get_session_manager() -> SessionManager:
    """
    Get the global session manager.

    Raises:
        RuntimeError: If the session manager has not been initialized
    """
    if _session_manager is None:
        raise RuntimeError("Session manager not initialized. Call init_session_manager() first.")
    return _session_manager
