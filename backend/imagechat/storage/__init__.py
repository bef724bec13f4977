"""Storage module - provides interface and implementations for message persistence."""

from .interface import MessageStore
from .local_storage import LocalMessageStore
from .http_store import HttpMessageStore
from .factory import create_message_store, init_message_store, get_message_store

__all__ = [
    'MessageStore', 'LocalMessageStore', 'HttpMessageStore',
    'create_message_store', 'init_message_store', 'get_message_store',
]
