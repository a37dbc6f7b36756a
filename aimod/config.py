"""
AI-Mod Configuration Module

This module manages application settings and environment variables using
pydantic-settings for type-safe configuration management.

Environment variables are loaded from .env file or system environment.
All sensitive values use SecretStr to prevent accidental logging.

Runtime thresholds consumed by the moderation pipeline are frozen into a
ModerationConfig so they can be injected into the orchestrator and services
instead of being read from module-level constants.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal
import logging
import sys

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically reads from:
    1. Environment variables
    2. .env file in working directory
    3. Default values defined here

    API keys use SecretStr to prevent accidental exposure in logs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    cloudflare_account_id: str | None = Field(
        default=None, description="Cloudflare account that owns the Workers AI models"
    )

    cloudflare_api_token: SecretStr | None = Field(
        default=None, description="API token with Workers AI read access"
    )

    workers_ai_base_url: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Base URL of the Cloudflare REST API",
    )

    groq_api_key: SecretStr | None = Field(
        default=None, description="Groq API key (only needed when classification runs on Groq)"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="OpenAI API key (only needed when classification runs on OpenAI)"
    )

    sentiment_model: str = Field(
        default="@cf/huggingface/distilbert-sst-2-int8",
        description="Model used for sentiment analysis",
    )

    classification_model: str = Field(
        default="@cf/meta/llama-2-7b-chat-int8",
        description="Instruction-following model used for content classification",
    )

    classification_provider: Literal["workers_ai", "groq", "openai"] = Field(
        default="workers_ai",
        description="Provider serving the classification model",
    )

    summarization_model: str = Field(
        default="@cf/facebook/bart-large-cnn",
        description="Model used for summarization",
    )

    min_text_length: int = Field(
        default=10, ge=1, description="Shortest text accepted for moderation"
    )

    max_text_length: int = Field(
        default=5000, ge=1, description="Longest text accepted for moderation"
    )

    summarize_threshold: int = Field(
        default=500,
        ge=0,
        description="Texts must be longer than this many characters to be summarized",
    )

    default_summary_length: int = Field(
        default=150, gt=0, description="Summary length limit when the request sets none"
    )

    classification_max_tokens: int = Field(
        default=100, gt=0, description="Completion budget for the classification prompt"
    )

    inference_timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP timeout for a single inference call"
    )

    environment: str = Field(default="development", description="Deployment environment name")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Application log level"
    )

    host: str = Field(default="0.0.0.0", description="Server bind host")

    port: int = Field(default=8000, description="Server bind port")

    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("max_text_length")
    @classmethod
    def validate_length_bounds(cls, v: int, info: ValidationInfo) -> int:
        """Ensure the accepted text range is not empty."""
        minimum = info.data.get("min_text_length")
        if minimum is not None and v < minimum:
            raise ValueError("max_text_length must not be smaller than min_text_length")
        return v


@dataclass(frozen=True)
class ModerationConfig:
    """
    Immutable thresholds and model identifiers for one moderation pipeline.

    Built once from Settings and handed to the orchestrator, which passes it
    on to every service it creates.
    """

    sentiment_model: str = "@cf/huggingface/distilbert-sst-2-int8"
    classification_model: str = "@cf/meta/llama-2-7b-chat-int8"
    summarization_model: str = "@cf/facebook/bart-large-cnn"
    min_text_length: int = 10
    max_text_length: int = 5000
    summarize_threshold: int = 500
    default_summary_length: int = 150
    classification_max_tokens: int = 100
    ai_error_keywords: tuple[str, ...] = ("AI", "model")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModerationConfig":
        return cls(
            sentiment_model=settings.sentiment_model,
            classification_model=settings.classification_model,
            summarization_model=settings.summarization_model,
            min_text_length=settings.min_text_length,
            max_text_length=settings.max_text_length,
            summarize_threshold=settings.summarize_threshold,
            default_summary_length=settings.default_summary_length,
            classification_max_tokens=settings.classification_max_tokens,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Returns cached settings instance.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated file reads and environment parsing.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()


def get_moderation_config() -> ModerationConfig:
    """Build the pipeline configuration from the cached settings."""
    return ModerationConfig.from_settings(get_settings())


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging based on settings.

    Sets up structured logging with timestamps and reduces noise
    from third-party HTTP libraries.

    Args:
        settings: The application settings instance.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("groq").setLevel(logging.WARNING)
