"""
Request Models - Bodies accepted by the chat session endpoints.
"""

from typing import Optional
from pydantic import BaseModel, Field


class PromptRequest(BaseModel):
    """A prompt submitted to a session."""
    prompt: str = Field(..., min_length=1, max_length=4000)


class ModelSelectionRequest(BaseModel):
    """The user's model pick. Category defaults to the first one the name matches."""
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
