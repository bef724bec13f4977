"""
Model Catalog - Discovers installed models and groups them by capability.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ApiError, ConnectivityError
from ..models.ollama import ModelCategory, OllamaModel
from ..ollama.base import ModelServingGateway

logger = logging.getLogger(__name__)

OTHER_CATEGORY_ID = "other"

# Order matters: it is the display order and the first-match order.
MODEL_CATEGORIES: Tuple[ModelCategory, ...] = (
    ModelCategory(
        id="text-generation",
        name="Text Generation",
        description="General text and conversation",
        keywords=("llama", "mistral", "deepseek", "qwen", "gemma", "phi"),
    ),
    ModelCategory(
        id="code-generation",
        name="Code Generation",
        description="Programming and coding assistance",
        keywords=("code", "coder", "programming", "developer"),
    ),
    ModelCategory(
        id="image-generation",
        name="Image Generation",
        description="Create images from text prompts",
        keywords=("sdxl", "stable-diffusion", "dall-e", "image", "diffusion"),
    ),
    ModelCategory(
        id="multimodal",
        name="Multimodal",
        description="Text and image understanding",
        keywords=("llava", "bakllava", "multimodal", "vision"),
    ),
    ModelCategory(
        id="creative",
        name="Creative Writing",
        description="Creative content and storytelling",
        keywords=("creative", "story", "writing", "artistic"),
    ),
)


def get_category(category_id: str) -> Optional[ModelCategory]:
    """Look up a static category by id."""
    for category in MODEL_CATEGORIES:
        if category.id == category_id:
            return category
    return None


def categorize_models(
    models: Sequence[OllamaModel],
    categories: Sequence[ModelCategory] = MODEL_CATEGORIES,
) -> Dict[str, List[OllamaModel]]:
    """
    Group models by category keyword match.

    A model lands in every category whose keywords it matches, so the groups
    overlap. Models matching no category go to the "other" bucket, which is
    only present when non-empty.

    Args:
        models: Catalog entries
        categories: Category table, in priority order

    Returns:
        Mapping of category id to the models in it, in table order
    """
    categorized: Dict[str, List[OllamaModel]] = {}
    for category in categories:
        categorized[category.id] = [m for m in models if category.matches(m.name)]

    uncategorized = [
        m for m in models
        if not any(category.matches(m.name) for category in categories)
    ]
    if uncategorized:
        categorized[OTHER_CATEGORY_ID] = uncategorized

    return categorized


def display_name(model_name: str) -> str:
    """Model name without the implicit ':latest' tag."""
    return model_name.replace(":latest", "").strip() or model_name


def format_size(size: int) -> str:
    """Human readable model size."""
    if size >= 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024 * 1024):.1f} GB"
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / 1024:.1f} KB"


class ModelCatalog:
    """
    Holds the most recent view of the serving API's installed models.
    An empty catalog means "unknown or unavailable".
    """

    def __init__(self, gateway: ModelServingGateway):
        self.gateway = gateway
        self.models: List[OllamaModel] = []

    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    async def discover(self) -> List[OllamaModel]:
        """
        Refresh the catalog from the serving API.

        Failures are swallowed: an unreachable API or an error status yields
        an empty list.
        """
        try:
            models = await self.gateway.list_models()
        except (ConnectivityError, ApiError) as e:
            logger.warning(f"Error checking available models: {e}")
            models = []

        self.models = models
        logger.debug(f"Catalog refreshed: {len(models)} models")
        return list(models)

    def categorize(self, models: Optional[Sequence[OllamaModel]] = None) -> Dict[str, List[OllamaModel]]:
        """Categorize `models`, or the current catalog when omitted."""
        return categorize_models(self.models if models is None else models)

    def find(self, name: str) -> Optional[OllamaModel]:
        for model in self.models:
            if model.name == name:
                return model
        return None
