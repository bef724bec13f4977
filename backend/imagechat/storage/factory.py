"""
Message Store Factory - Creates the configured store and holds the process-wide
instance served by the /api/messages router.
"""

from typing import Any, Optional

from .interface import MessageStore
from .local_storage import LocalMessageStore
from .http_store import HttpMessageStore


def create_message_store(
    config: Any,
    local_store: Optional[LocalMessageStore] = None,
) -> MessageStore:
    """
    Create a message store from settings.

    Args:
        config: Settings with storage_type, local_storage_path, backend_url
            and persistence_timeout
        local_store: Existing local store to reuse for storage_type "local",
            so one directory is never indexed by two instances

    Returns:
        MessageStore instance
    """
    if config.storage_type == "local":
        return local_store or LocalMessageStore(config.local_storage_path)

    elif config.storage_type == "http":
        return HttpMessageStore(config.backend_url, timeout=config.persistence_timeout)

    else:
        raise ValueError(f"Unsupported storage type: {config.storage_type}")


# Global local store instance
_message_store: Optional[LocalMessageStore] = None


def init_message_store(store: Optional[LocalMessageStore] = None) -> LocalMessageStore:
    """
    Initialize the global local message store.

    Args:
        store: Optional store instance. If None, creates LocalMessageStore().
    """
    global _message_store
    _message_store = store or LocalMessageStore()
    return _message_store


def get_message_store() -> LocalMessageStore:
    """
    Get the global local message store.

    Raises:
        RuntimeError: If the store has not been initialized
    """
    if _message_store is None:
        raise RuntimeError("Message store not initialized. Call init_message_store() first.")
    return _message_store
