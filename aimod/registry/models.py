"""
Model Registry

This module defines which model serves each moderation feature:
- Sentiment (DistilBERT SST-2): returns a list of label/score candidates
- Classification (instruction-tuned Llama): answers a JSON-formatted prompt
- Summarization (BART large CNN): returns a summary for the input text

Sentiment and summarization are task models only available on Cloudflare
Workers AI. Classification is prompt driven, so it can also be served by a
chat-completion provider (Groq or OpenAI) when configured.

Each model entry includes:
- Model ID and provider
- The feature it serves
- Generation limits used by chat providers
"""

from enum import Enum
from pydantic import BaseModel, Field

from aimod.config import Settings, get_settings
from aimod.schemas.moderation import FeatureName


class ModelProvider(str, Enum):
    """Supported inference providers."""

    WORKERS_AI = "workers_ai"
    GROQ = "groq"
    OPENAI = "openai"


class ModelMetadata(BaseModel):
    """
    Complete metadata for a registered model.

    This class holds all information needed to:
    1. Resolve the model serving a feature
    2. Dispatch requests to the correct provider
    """

    model_id: str = Field(
        ...,
        description="Identifier used by services when invoking the model",
    )

    feature: FeatureName = Field(
        ...,
        description="Moderation feature served by this model",
    )

    provider: ModelProvider = Field(
        ...,
        description="Inference provider hosting the model",
    )

    api_model_name: str = Field(
        ...,
        description="Model name used in provider API calls",
    )

    description: str = Field(
        default="",
        description="Human-readable summary of the model",
    )

    max_tokens: int = Field(
        default=256,
        gt=0,
        description="Default max output tokens for chat providers",
    )

    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Default temperature for chat providers",
    )


class ModelRegistry:
    """
    Central registry of the models backing each feature.

    Attributes:
        _models: Dictionary mapping model IDs to their metadata
        _feature_to_model: Dictionary mapping feature names to model IDs
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._models: dict[str, ModelMetadata] = {}
        self._feature_to_model: dict[FeatureName, str] = {}
        self._initialize_models()

    def _initialize_models(self) -> None:
        """Register one model per feature from the configured identifiers."""
        settings = self._settings

        self._register(
            ModelMetadata(
                model_id=settings.sentiment_model,
                feature=FeatureName.SENTIMENT,
                provider=ModelProvider.WORKERS_AI,
                api_model_name=settings.sentiment_model,
                description="Binary sentiment classifier returning scored labels",
            )
        )

        self._register(
            ModelMetadata(
                model_id=settings.classification_model,
                feature=FeatureName.CLASSIFICATION,
                provider=ModelProvider(settings.classification_provider),
                api_model_name=settings.classification_model,
                description="Instruction model answering the classification prompt",
                max_tokens=settings.classification_max_tokens,
            )
        )

        self._register(
            ModelMetadata(
                model_id=settings.summarization_model,
                feature=FeatureName.SUMMARIZATION,
                provider=ModelProvider.WORKERS_AI,
                api_model_name=settings.summarization_model,
                description="Abstractive summarizer",
            )
        )

    def _register(self, model: ModelMetadata) -> None:
        """Register a model and bind it to its feature."""
        self._models[model.model_id] = model
        self._feature_to_model[model.feature] = model.model_id

    def get_model(self, model_id: str) -> ModelMetadata | None:
        """
        Retrieve model metadata by ID.

        Args:
            model_id: The unique identifier of the model

        Returns:
            ModelMetadata if found, None otherwise
        """
        return self._models.get(model_id)

    def get_model_for_feature(self, feature: FeatureName) -> ModelMetadata | None:
        """
        Get the model serving a given feature.

        Args:
            feature: The moderation feature

        Returns:
            ModelMetadata for the serving model, None if the feature has no model
        """
        model_id = self._feature_to_model.get(feature)
        if model_id:
            return self.get_model(model_id)
        return None

    def list_models(self) -> list[ModelMetadata]:
        """Return all registered models."""
        return list(self._models.values())

    def get_feature_mapping(self) -> dict[str, str]:
        """Return the feature-to-model mapping keyed by feature value."""
        return {feature.value: model_id for feature, model_id in self._feature_to_model.items()}


_registry_instance: ModelRegistry | None = None


def get_model_registry() -> ModelRegistry:
    """
    Get the global model registry instance.

    Uses lazy initialization to create the registry only when needed.
    This ensures consistent access to model metadata throughout the application.

    Returns:
        The singleton ModelRegistry instance
    """
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ModelRegistry()
    return _registry_instance
