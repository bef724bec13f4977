"""Configuration module."""

from .settings import Settings, OllamaConfig, GenerationOptions, settings

__all__ = ['Settings', 'OllamaConfig', 'GenerationOptions', 'settings']
