"""
Message Models - Chat messages and the placeholder images attached to them.

Field names are snake_case in Python and camelCase on the wire
(isGenerating, sessionId), matching the message store's JSON shape.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_SESSION_ID = "default"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageType(str, Enum):
    """Who authored a message."""
    USER = "user"
    ASSISTANT = "assistant"


class GeneratedImage(BaseModel):
    """A fabricated image reference. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    prompt: str  # caption derived from the serving API's response
    timestamp: datetime = Field(default_factory=_utcnow)


class Message(BaseModel):
    """A chat message owned by a session."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    type: MessageType
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
    images: Optional[List[GeneratedImage]] = None
    is_generating: bool = False
    error: Optional[str] = None
    session_id: str = DEFAULT_SESSION_ID

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from clients are taken as UTC so ordering never mixes kinds
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_terminal(self) -> bool:
        return not self.is_generating

    def apply(self, update: "MessageUpdate") -> "Message":
        """Return a copy with the fields set on `update` replaced."""
        changes = {name: getattr(update, name) for name in update.model_fields_set}
        return self.model_copy(update=changes)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict in the store's camelCase shape, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class MessageUpdate(BaseModel):
    """Partial update of a stored message. Only fields explicitly set are applied."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: Optional[str] = None
    images: Optional[List[GeneratedImage]] = None
    is_generating: Optional[bool] = None
    error: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
