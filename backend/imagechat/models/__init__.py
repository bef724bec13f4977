"""Models module."""

from .message import Message, MessageType, MessageUpdate, GeneratedImage, DEFAULT_SESSION_ID
from .ollama import OllamaModel, ModelDetails, ModelCategory, SelectedModel

__all__ = [
    'Message', 'MessageType', 'MessageUpdate', 'GeneratedImage', 'DEFAULT_SESSION_ID',
    'OllamaModel', 'ModelDetails', 'ModelCategory', 'SelectedModel',
]
