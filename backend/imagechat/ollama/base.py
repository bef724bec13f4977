"""
Model Serving Gateway - Abstract contract for the model-serving HTTP API.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, Optional, List

from ..config.settings import GenerationOptions
from ..models.ollama import OllamaModel


@dataclass
class GenerateResult:
    """Decoded body of a successful, error-free generate call."""
    response: Optional[str]
    model: str = ""
    raw: Optional[Dict[str, Any]] = None


class ModelServingGateway(ABC):
    """
    Abstract base class for model-serving backends.
    The execution of models behind it is opaque to this service.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url

    @abstractmethod
    async def is_reachable(self) -> bool:
        """
        Single liveness request against the model-list endpoint.

        Returns:
            True iff the serving API answered with a success status
        """
        pass

    @abstractmethod
    async def list_models(self) -> List[OllamaModel]:
        """
        Fetch the models currently installed on the serving API.

        Returns:
            Catalog entries, empty if the API reports none

        Raises:
            ConnectivityError: The API could not be reached
            ApiError: The API answered with a non-success status
        """
        pass

    @abstractmethod
    async def generate(
        self,
        model: str,
        prompt: str,
        options: GenerationOptions,
    ) -> GenerateResult:
        """
        Run one non-streaming generation.

        Args:
            model: Model name as reported by list_models
            prompt: Prompt text sent verbatim
            options: Sampling options

        Returns:
            GenerateResult with the model's response text

        Raises:
            ConnectivityError: The API could not be reached
            ApiError: Non-success HTTP status, carries status and raw body
            ApiReportedError: Success status but the body carried an error
        """
        pass
