"""
Ollama HTTP client.
Talks to the local Ollama server through /api/tags and /api/generate.
"""

import httpx
import logging
import time
from typing import Any, Dict, List

from .base import ModelServingGateway, GenerateResult
from ..config.settings import GenerationOptions, OllamaConfig
from ..core.errors import ApiError, ApiReportedError, ConnectivityError
from ..core.logging_config import truncate_large_data
from ..models.ollama import OllamaModel

logger = logging.getLogger(__name__)

TAGS_ENDPOINT = "/api/tags"
GENERATE_ENDPOINT = "/api/generate"


def _describe(error: Exception) -> str:
    # httpx timeouts often carry an empty message
    return str(error) or type(error).__name__


class OllamaClient(ModelServingGateway):
    """
    Gateway to an Ollama server.
    Opens a short-lived httpx.AsyncClient per call; no retries.
    """

    def __init__(self, config: OllamaConfig):
        super().__init__(config.base_url)
        self.config = config

    def _request_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.config.request_timeout, connect=self.config.connection_timeout)

    async def is_reachable(self) -> bool:
        """GET /api/tags with the short connection timeout."""
        url = f"{self.base_url}{TAGS_ENDPOINT}"
        try:
            async with httpx.AsyncClient(timeout=self.config.connection_timeout) as client:
                resp = await client.get(url)
            logger.debug(f"Ollama status probe: {resp.status_code}")
            return resp.is_success
        except httpx.HTTPError as e:
            logger.warning(f"Ollama not available at {self.base_url}: {_describe(e)}")
            return False

    async def list_models(self) -> List[OllamaModel]:
        """GET /api/tags and parse its `models` field."""
        url = f"{self.base_url}{TAGS_ENDPOINT}"
        try:
            async with httpx.AsyncClient(timeout=self._request_timeout()) as client:
                resp = await client.get(url)
        except httpx.HTTPError as e:
            raise ConnectivityError(self.base_url, _describe(e)) from e

        if not resp.is_success:
            raise ApiError(resp.status_code, resp.text)

        try:
            data = resp.json()
            entries = data.get("models") if isinstance(data, dict) else None
            models = [OllamaModel.model_validate(item) for item in entries or []]
        except ValueError as e:
            raise ApiError(resp.status_code, f"Malformed model list: {e}") from e

        logger.debug(f"Ollama reported {len(models)} models")
        return models

    async def generate(
        self,
        model: str,
        prompt: str,
        options: GenerationOptions,
    ) -> GenerateResult:
        """POST /api/generate with stream disabled."""
        start_time = time.time()
        url = f"{self.base_url}{GENERATE_ENDPOINT}"
        payload: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": options.to_payload(),
        }

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Ollama generate starting: model={model}, "
                f"prompt={truncate_large_data(prompt, max_length=200)}"
            )

        try:
            async with httpx.AsyncClient(timeout=self._request_timeout()) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(
                f"Ollama generate failed: {_describe(e)}",
                extra={"extra_fields": {
                    "model": model,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "error": _describe(e),
                }}
            )
            raise ConnectivityError(self.base_url, _describe(e)) from e

        duration_ms = round((time.time() - start_time) * 1000, 2)

        if not resp.is_success:
            logger.error(
                f"Ollama generate returned {resp.status_code}",
                extra={"extra_fields": {
                    "model": model,
                    "status_code": resp.status_code,
                    "duration_ms": duration_ms,
                    "body": truncate_large_data(resp.text),
                }}
            )
            raise ApiError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, resp.text) from e
        if not isinstance(data, dict):
            raise ApiError(resp.status_code, resp.text)

        if data.get("error"):
            logger.warning(f"Ollama reported an error for model={model}: {data['error']}")
            raise ApiReportedError(str(data["error"]))

        logger.info(
            "Ollama generate completed",
            extra={"extra_fields": {
                "model": data.get("model", model),
                "duration_ms": duration_ms,
                "eval_count": data.get("eval_count", 0),
            }}
        )

        return GenerateResult(
            response=data.get("response"),
            model=data.get("model", model),
            raw=data,
        )
