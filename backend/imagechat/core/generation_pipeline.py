"""
Generation Pipeline - Turns a prompt into placeholder images.

Flow per prompt: discover models -> resolve model -> classify capability ->
dispatch to /api/generate -> fabricate two captioned placeholder images.
A model without image capability gets the prompt wrapped in a request for a
visual description; the result shape is the same either way.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import List
from urllib.parse import quote, urlencode

from .errors import ConnectivityError, NoModelError
from .model_catalog import ModelCatalog
from .model_selector import ModelSelector, ModelTask, is_capable_of
from ..config.settings import OllamaConfig
from ..models.message import GeneratedImage
from ..ollama.base import ModelServingGateway

logger = logging.getLogger(__name__)

IMAGE_COUNT = 2

DESCRIPTION_PROMPT = (
    'Generate a detailed description of an image based on this prompt: "{prompt}". '
    'Focus on visual details, composition, style, and artistic elements.'
)


class GenerationPipeline:
    """
    Stateless between calls; each generate() runs the full flow and either
    returns every image or raises the first failure.
    """

    def __init__(
        self,
        gateway: ModelServingGateway,
        catalog: ModelCatalog,
        selector: ModelSelector,
        config: OllamaConfig,
    ):
        self.gateway = gateway
        self.catalog = catalog
        self.selector = selector
        self.config = config

    async def generate(self, prompt: str) -> List[GeneratedImage]:
        """
        Generate images for a prompt.

        Args:
            prompt: User prompt

        Returns:
            Exactly IMAGE_COUNT placeholder images captioned with the model's response

        Raises:
            ConnectivityError: No models could be discovered
            NoModelError: No model could be selected
            ApiError: The serving API returned a non-success status
            ApiReportedError: The serving API reported an error in its body
        """
        models = await self.catalog.discover()
        if not models:
            raise ConnectivityError(self.config.base_url)

        model_name = self.selector.resolve(ModelTask.IMAGE_GENERATION)
        if not model_name:
            raise NoModelError()

        if is_capable_of(model_name, ModelTask.IMAGE_GENERATION):
            logger.info(f"Generating with image model {model_name}")
            caption = await self._generate_with_image_model(prompt, model_name)
        else:
            logger.info(f"No image capability in {model_name}, falling back to text description")
            caption = await self._generate_with_text_model(prompt, model_name)

        return self._produce_images(prompt, caption)

    async def _generate_with_image_model(self, prompt: str, model_name: str) -> str:
        result = await self.gateway.generate(model_name, prompt, self.config.options)
        return result.response or prompt

    async def _generate_with_text_model(self, prompt: str, model_name: str) -> str:
        wrapped = DESCRIPTION_PROMPT.format(prompt=prompt)
        result = await self.gateway.generate(model_name, wrapped, self.config.options)
        return result.response or prompt

    def placeholder_url(self, nonce: int, prompt: str) -> str:
        query = urlencode({"random": nonce, "prompt": prompt}, quote_via=quote)
        return f"{self.config.placeholder_image_url}?{query}"

    def _produce_images(self, prompt: str, caption: str) -> List[GeneratedImage]:
        nonce = int(time.time() * 1000)
        now = datetime.now(timezone.utc)
        return [
            GeneratedImage(
                id=f"img-{nonce}-{index + 1}-{uuid.uuid4().hex[:8]}",
                url=self.placeholder_url(nonce + index, prompt),
                prompt=caption,
                timestamp=now,
            )
            for index in range(IMAGE_COUNT)
        ]
