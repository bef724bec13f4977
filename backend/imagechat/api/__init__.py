"""API module."""

from .messages import router as messages_router
from .chat import router as chat_router
from .models import router as models_router

__all__ = ['messages_router', 'chat_router', 'models_router']
