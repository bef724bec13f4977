"""
Message Store Interface - Abstract base class for message persistence.
This interface enables switching between the local document store and a
remote REST store without touching the chat sessions.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models.message import Message, MessageUpdate


class MessageStore(ABC):
    """
    Contract shared by all message stores.
    Every failure is raised as a PersistenceError (or a subclass).
    """

    @abstractmethod
    async def list_messages(self, session_id: str) -> List[Message]:
        """
        List a session's messages.

        Args:
            session_id: Session key

        Returns:
            List[Message]: Messages sorted by timestamp, oldest first
        """
        pass

    @abstractmethod
    async def save_message(self, message: Message) -> Message:
        """
        Store a new message.

        Args:
            message: Message to store; its id must be unused

        Returns:
            Message: The stored message

        Raises:
            DuplicateMessageError: A message with this id already exists
        """
        pass

    @abstractmethod
    async def update_message(self, message_id: str, update: MessageUpdate) -> Message:
        """
        Apply a partial update to a stored message.

        Args:
            message_id: Id of the message to update
            update: Fields to replace; unset fields are left alone

        Returns:
            Message: The updated message

        Raises:
            MessageNotFoundError: No message has this id
        """
        pass

    @abstractmethod
    async def clear_messages(self, session_id: str) -> int:
        """
        Delete every message of a session.

        Args:
            session_id: Session key

        Returns:
            int: Number of messages deleted (0 if the session was already empty)
        """
        pass

    @abstractmethod
    async def health(self) -> bool:
        """
        Check whether the store is usable.

        Returns:
            bool: True if healthy; never raises
        """
        pass
