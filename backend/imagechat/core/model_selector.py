"""
Model Selector - Picks the model used for a task.
A user override always wins; otherwise the task's preferred keywords are
matched against the catalog in priority order.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

from .model_catalog import ModelCatalog
from ..models.ollama import SelectedModel

logger = logging.getLogger(__name__)


class ModelTask(str, Enum):
    IMAGE_GENERATION = "IMAGE_GENERATION"
    TEXT_TO_IMAGE = "TEXT_TO_IMAGE"
    MULTIMODAL = "MULTIMODAL"
    TEXT = "TEXT"


# Preferred model keywords per task, highest priority first
TASK_MODELS: Dict[ModelTask, Tuple[str, ...]] = {
    ModelTask.IMAGE_GENERATION: ("sdxl", "stable-diffusion", "dall-e"),
    ModelTask.TEXT_TO_IMAGE: ("stable-diffusion", "sdxl"),
    ModelTask.MULTIMODAL: ("llava", "bakllava"),
    ModelTask.TEXT: ("llama2", "mistral", "codellama"),
}

# Keywords that mark a model as able to perform a capability
CAPABILITY_KEYWORDS: Dict[ModelTask, FrozenSet[str]] = {
    ModelTask.IMAGE_GENERATION: frozenset(
        TASK_MODELS[ModelTask.IMAGE_GENERATION] + TASK_MODELS[ModelTask.TEXT_TO_IMAGE]
    ),
}


def select_auto(available_names: Sequence[str], task: ModelTask) -> Optional[str]:
    """
    Choose a model for `task` from `available_names`.

    For each preferred keyword in order, the first name containing it
    (case-insensitive) wins. With no match the first available name is
    returned; with no names, None.
    """
    for keyword in TASK_MODELS[task]:
        needle = keyword.lower()
        for name in available_names:
            if needle in name.lower():
                return name

    return available_names[0] if available_names else None


def is_capable_of(model_name: str, capability: ModelTask = ModelTask.IMAGE_GENERATION) -> bool:
    """True iff the model name contains any keyword of the capability."""
    keywords = CAPABILITY_KEYWORDS.get(capability, frozenset(TASK_MODELS[capability]))
    lowered = model_name.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


class ModelSelector:
    """Per-session model choice: explicit override or catalog auto-selection."""

    def __init__(self, catalog: ModelCatalog):
        self.catalog = catalog
        self.selected: Optional[SelectedModel] = None

    def select(self, model: SelectedModel) -> None:
        """Set the override. Later picks replace earlier ones; it is never auto-cleared."""
        self.selected = model
        logger.info(f"Model override set: {model.name} ({model.category})")

    def resolve(self, task: ModelTask) -> Optional[str]:
        """
        Model name to use for `task`.

        The override is returned even if the serving API no longer lists it.
        """
        if self.selected is not None:
            return self.selected.name

        chosen = select_auto(self.catalog.model_names, task)
        logger.debug(f"Auto-selected model for {task.value}: {chosen}")
        return chosen
