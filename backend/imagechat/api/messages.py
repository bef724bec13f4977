"""
Message Store API endpoints - REST surface of the local message store.
Every response uses the {success, data | error} envelope.
"""

import logging
from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import Any, Dict, List, Optional

from ..core.errors import DuplicateMessageError, MessageNotFoundError, PersistenceError
from ..models.message import DEFAULT_SESSION_ID, Message, MessageUpdate
from ..storage import LocalMessageStore, get_message_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])


def _error(status_code: int, error: str, details: Optional[List[str]] = None) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _validation_details(error: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]


@router.get("")
async def get_messages(
    session_id: str = Query(DEFAULT_SESSION_ID, alias="sessionId"),
    store: LocalMessageStore = Depends(get_message_store),
):
    """
    Get all messages for a session.

    Args:
        session_id: Session key, "default" when omitted

    Returns:
        Messages sorted by timestamp, oldest first
    """
    try:
        messages = await store.list_messages(session_id)
    except PersistenceError as e:
        logger.error(f"Error fetching messages: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch messages")

    return {"success": True, "data": [m.to_wire() for m in messages]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_message(
    body: Dict[str, Any] = Body(...),
    store: LocalMessageStore = Depends(get_message_store),
):
    """
    Save a new message.

    Returns:
        The stored message; 400 when id, type or content is missing,
        409 when the id is already taken
    """
    if not body.get("id") or not body.get("type") or not body.get("content"):
        return _error(status.HTTP_400_BAD_REQUEST, "Missing required fields: id, type, content")

    try:
        message = Message.model_validate(body)
    except ValidationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid message", _validation_details(e))

    try:
        saved = await store.save_message(message)
    except DuplicateMessageError as e:
        return _error(status.HTTP_409_CONFLICT, str(e))
    except PersistenceError as e:
        logger.error(f"Error saving message: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save message")

    return {"success": True, "data": saved.to_wire()}


@router.put("/{message_id}")
async def update_message(
    message_id: str,
    body: Dict[str, Any] = Body(...),
    store: LocalMessageStore = Depends(get_message_store),
):
    """
    Partially update a message (content, images, isGenerating, error).

    Returns:
        The updated message; 404 when the id is unknown
    """
    try:
        update = MessageUpdate.model_validate(body)
    except ValidationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid update", _validation_details(e))

    try:
        updated = await store.update_message(message_id, update)
    except MessageNotFoundError as e:
        return _error(status.HTTP_404_NOT_FOUND, str(e))
    except PersistenceError as e:
        logger.error(f"Error updating message: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update message")

    return {"success": True, "data": updated.to_wire()}


@router.delete("")
async def clear_messages(
    session_id: str = Query(DEFAULT_SESSION_ID, alias="sessionId"),
    store: LocalMessageStore = Depends(get_message_store),
):
    """
    Delete all messages for a session.

    Returns:
        Number of deleted messages
    """
    try:
        deleted = await store.clear_messages(session_id)
    except PersistenceError as e:
        logger.error(f"Error clearing messages: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to clear messages")

    return {"success": True, "data": {"deletedCount": deleted}}
