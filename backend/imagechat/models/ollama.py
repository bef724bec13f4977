"""
Ollama Models - Catalog entries reported by the serving API, model categories
and the user's explicit model choice.
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict


class ModelDetails(BaseModel):
    """Optional details block of a catalog entry."""
    model_config = ConfigDict(extra="allow")

    parent_model: Optional[str] = None
    format: Optional[str] = None
    family: Optional[str] = None
    families: Optional[List[str]] = None
    parameter_size: Optional[str] = None
    quantization_level: Optional[str] = None


class OllamaModel(BaseModel):
    """One entry of GET /api/tags. Read-only to this service."""
    model_config = ConfigDict(extra="allow")

    name: str
    model: Optional[str] = None
    modified_at: Optional[str] = None
    size: int = 0  # bytes
    digest: Optional[str] = None
    details: Optional[ModelDetails] = None


class ModelCategory(BaseModel):
    """A keyword-defined capability grouping."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    keywords: Tuple[str, ...]

    def matches(self, model_name: str) -> bool:
        lowered = model_name.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


class SelectedModel(BaseModel):
    """The user's explicit model override for a session."""
    name: str
    category: str
    purpose: str
