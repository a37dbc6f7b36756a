"""
Registry module: Feature-to-model configuration and metadata.

This module contains:
- models.py: one registered model per moderation feature

Public API:
- ModelProvider: Enum for inference providers
- ModelMetadata: Pydantic model for model configuration
- ModelRegistry: Central registry class
- get_model_registry: Singleton accessor function
"""

from aimod.registry.models import (
    ModelMetadata,
    ModelProvider,
    ModelRegistry,
    get_model_registry,
)

__all__ = [
    "ModelProvider",
    "ModelMetadata",
    "ModelRegistry",
    "get_model_registry",
]
