"""Ollama module - gateway to the model-serving API."""

from .base import ModelServingGateway, GenerateResult
from .client import OllamaClient

__all__ = ['ModelServingGateway', 'GenerateResult', 'OllamaClient']
