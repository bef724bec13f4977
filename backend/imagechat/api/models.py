"""
Ollama API endpoints - Serving API status and the categorized model catalog.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict

from ..core.model_catalog import OTHER_CATEGORY_ID, MODEL_CATEGORIES, display_name, format_size
from ..core.session import SessionManager, get_session_manager
from ..models.message import DEFAULT_SESSION_ID

router = APIRouter(prefix="/api/ollama", tags=["ollama"])


@router.get("/status")
async def get_status(
    session_id: str = Query(DEFAULT_SESSION_ID, alias="sessionId"),
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """Probe the serving API once."""
    session = await manager.get_session(session_id)
    connected = await session.probe()
    return {"connected": connected, "baseUrl": manager.config.base_url}


@router.get("/models")
async def list_models(
    session_id: str = Query(DEFAULT_SESSION_ID, alias="sessionId"),
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """
    Refresh the session's catalog and return it grouped by category.

    Categories come in table order and may share models; "other" holds the
    models no category matched. Empty categories are omitted.
    """
    session = await manager.get_session(session_id)
    models = await session.refresh_models()
    categorized = session.catalog.categorize(models)

    categories = []
    for category in MODEL_CATEGORIES:
        names = [m.name for m in categorized.get(category.id, [])]
        if names:
            categories.append({
                "id": category.id,
                "name": category.name,
                "description": category.description,
                "models": names,
            })
    if categorized.get(OTHER_CATEGORY_ID):
        categories.append({
            "id": OTHER_CATEGORY_ID,
            "name": "Other",
            "description": "Models outside every category",
            "models": [m.name for m in categorized[OTHER_CATEGORY_ID]],
        })

    return {
        "models": [
            {
                **m.model_dump(exclude_none=True),
                "displayName": display_name(m.name),
                "sizeLabel": format_size(m.size),
            }
            for m in models
        ],
        "categories": categories,
        "selected": session.selected_model.model_dump() if session.selected_model else None,
    }
