"""
Configuration Settings.
"""

from dataclasses import dataclass, field
from pydantic_settings import BaseSettings
from typing import Any, Dict


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "ImageChat"
    app_version: str = "1.0.0"
    debug: bool = True

    # Ollama serving API
    ollama_base_url: str = "http://localhost:11434"
    ollama_connection_timeout: float = 5.0  # seconds, liveness probes and connects
    ollama_request_timeout: float = 30.0  # seconds, generation requests

    # Fixed generation options sent with every /api/generate call
    ollama_temperature: float = 0.7
    ollama_top_p: float = 0.9
    ollama_top_k: int = 40
    ollama_repeat_penalty: float = 1.1

    # Placeholder images
    placeholder_image_url: str = "https://picsum.photos/512/512"

    # Message storage
    storage_type: str = "local"  # "local" or "http"
    local_storage_path: str = "./data"
    backend_url: str = "http://localhost:5000"  # remote message store (storage_type=http)
    persistence_timeout: float = 10.0

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/imagechat.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_api_requests: bool = True  # one line per HTTP request

    class Config:
        env_file = ".env"
        case_sensitive = False


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling options forwarded verbatim to the serving API."""
    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40
    repeat_penalty: float = 1.1

    def to_payload(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "top_k": self.top_k,
            "repeat_penalty": self.repeat_penalty,
        }


@dataclass(frozen=True)
class OllamaConfig:
    """
    Immutable serving-API configuration, built once at startup and injected
    into the gateway and the generation pipeline.
    """
    base_url: str = "http://localhost:11434"
    connection_timeout: float = 5.0
    request_timeout: float = 30.0
    options: GenerationOptions = field(default_factory=GenerationOptions)
    placeholder_image_url: str = "https://picsum.photos/512/512"

    @staticmethod
    def from_settings(config: Settings) -> "OllamaConfig":
        """Build the serving-API configuration from application settings."""
        return OllamaConfig(
            base_url=config.ollama_base_url.rstrip("/"),
            connection_timeout=config.ollama_connection_timeout,
            request_timeout=config.ollama_request_timeout,
            options=GenerationOptions(
                temperature=config.ollama_temperature,
                top_p=config.ollama_top_p,
                top_k=config.ollama_top_k,
                repeat_penalty=config.ollama_repeat_penalty,
            ),
            placeholder_image_url=config.placeholder_image_url,
        )


settings = Settings()
