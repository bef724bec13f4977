"""
Chat API endpoints - Session commands: submit prompts, pick a model, clear history.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from typing import Any, Dict, List, Optional

from ..core.model_catalog import OTHER_CATEGORY_ID, MODEL_CATEGORIES, get_category
from ..core.session import SessionManager, get_session_manager
from ..models.ollama import SelectedModel
from ..models.requests import ModelSelectionRequest, PromptRequest

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/{session_id}/messages")
async def list_session_messages(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> List[Dict[str, Any]]:
    """
    Get the session's messages in display order.

    Args:
        session_id: Session key

    Returns:
        Messages as the session currently holds them
    """
    session = await manager.get_session(session_id)
    return [m.to_wire() for m in session.messages]


@router.post("/{session_id}/messages")
async def submit_prompt(
    session_id: str,
    request: PromptRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """
    Submit a prompt and wait for the assistant message to reach a terminal state.

    A failed generation is not an HTTP error: the returned message carries
    the error text.

    Args:
        session_id: Session key
        request: Prompt body

    Returns:
        The assistant message
    """
    session = await manager.get_session(session_id)
    try:
        message = await session.submit(request.prompt)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return message.to_wire()


@router.delete("/{session_id}/messages")
async def clear_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, int]:
    """Clear the session locally and in the message store."""
    session = await manager.get_session(session_id)
    removed = await session.clear()
    return {"deletedCount": removed}


@router.get("/{session_id}/model")
async def get_selected_model(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> Optional[SelectedModel]:
    """The session's model override, or null when auto-selecting."""
    session = await manager.get_session(session_id)
    return session.selected_model


@router.put("/{session_id}/model")
async def select_model(
    session_id: str,
    request: ModelSelectionRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SelectedModel:
    """
    Set the session's model override.

    Args:
        session_id: Session key
        request: Model name and optional category id

    Returns:
        The stored selection
    """
    if request.category is not None:
        category = get_category(request.category)
        if category is None and request.category != OTHER_CATEGORY_ID:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown category: {request.category}"
            )
    else:
        category = next((c for c in MODEL_CATEGORIES if c.matches(request.name)), None)

    selected = SelectedModel(
        name=request.name,
        category=category.id if category else OTHER_CATEGORY_ID,
        purpose=category.name if category else "Other",
    )
    session = await manager.get_session(session_id)
    session.select_model(selected)
    return selected
