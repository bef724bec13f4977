"""
Shared test fixtures and configuration.
"""

import pytest
import os
from unittest.mock import AsyncMock, MagicMock

# Set test environment variables before importing app modules
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/imagechat_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from imagechat.config.settings import OllamaConfig
from imagechat.models.ollama import OllamaModel
from imagechat.ollama.base import GenerateResult, ModelServingGateway


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def ollama_config():
    return OllamaConfig(base_url="http://localhost:11434")


@pytest.fixture
def gateway(ollama_config):
    """Gateway double: reachable, no models, empty response."""
    mock_gateway = AsyncMock(spec=ModelServingGateway)
    mock_gateway.base_url = ollama_config.base_url
    mock_gateway.is_reachable.return_value = True
    mock_gateway.list_models.return_value = []
    mock_gateway.generate.return_value = GenerateResult(response=None)
    return mock_gateway


def make_models(*names):
    return [OllamaModel(name=name, size=4 * 1024 * 1024 * 1024) for name in names]


def mock_http_response(status_code=200, json_data=None, text=""):
    """Stand-in for httpx.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


def mock_async_client(mock_client_cls, **method_results):
    """Wire a patched httpx.AsyncClient so `async with` yields an instance."""
    mock_instance = AsyncMock()
    for method, result in method_results.items():
        if isinstance(result, Exception):
            getattr(mock_instance, method).side_effect = result
        else:
            getattr(mock_instance, method).return_value = result
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_instance
    return mock_instance
