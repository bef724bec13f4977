"""
Error taxonomy for the orchestration engine.

GenerationError subclasses abort a single generation attempt and end up as the
assistant message's error text. PersistenceError subclasses are raised by
message stores and never reach the user.
"""

from typing import Optional


class ImageChatError(Exception):
    """Base class for all ImageChat errors."""


class GenerationError(ImageChatError):
    """A failure that is fatal to one generation attempt."""


class NoModelError(GenerationError):
    """The catalog is empty or no model could be selected."""

    def __init__(self, message: str = "No suitable model found"):
        super().__init__(message)


class ConnectivityError(NoModelError):
    """The serving API is unreachable."""

    def __init__(self, base_url: str, detail: Optional[str] = None):
        message = (
            f"Ollama is not running. Please start Ollama and ensure it's "
            f"accessible at {base_url}"
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.base_url = base_url
        self.detail = detail


class ApiError(GenerationError):
    """The serving API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Ollama API error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class ApiReportedError(GenerationError):
    """The serving API answered 2xx but reported an error in the body."""

    def __init__(self, message: str):
        super().__init__(message)


class PersistenceError(ImageChatError):
    """Any failure talking to the message store."""


class DuplicateMessageError(PersistenceError):
    """A message with the same id already exists."""

    def __init__(self, message_id: str):
        super().__init__("Message with this ID already exists")
        self.message_id = message_id


class MessageNotFoundError(PersistenceError):
    """No message with the given id exists."""

    def __init__(self, message_id: str):
        super().__init__("Message not found")
        self.message_id = message_id
