"""
Pydantic Schemas for the Moderation API

This module defines the request, result and envelope models for AI-Mod:
- ModerationRequest: Text to moderate with optional feature list and options
- SentimentResult / ClassificationResult / SummarizationResult: per-feature
  normalized model output
- SuccessEnvelope / ErrorEnvelope: the uniform wrapper returned to callers
- HealthResponse: health check payload

Wire names are camelCase (isSpam, originalLength, processingTime, ...) while
Python attributes stay snake_case; the alias generator bridges the two.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMERATIONS
# =============================================================================


class FeatureName(str, Enum):
    """
    Moderation dimensions that can be requested.

    Declaration order is the canonical execution and reporting order.
    """

    SENTIMENT = "sentiment"
    CLASSIFICATION = "classification"
    SUMMARIZATION = "summarization"


ALL_FEATURES = "all"


class SentimentLabel(str, Enum):
    """Normalized sentiment polarity."""

    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class ContentCategory(str, Enum):
    """Categories the classification prompt asks the model to choose from."""

    SPAM = "spam"
    LEGITIMATE = "legitimate"
    PROMOTIONAL = "promotional"
    INFORMATIONAL = "informational"
    SOCIAL = "social"
    UNKNOWN = "unknown"


class CamelModel(BaseModel):
    """Base model serialising snake_case attributes under camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# REQUEST MODELS
# =============================================================================


class ModerationOptions(CamelModel):
    """
    Optional tuning knobs for a moderation request.

    Unknown keys are ignored so older clients sending extra options keep working.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    max_length: int | None = Field(
        default=None,
        gt=0,
        description="Summary length limit in characters",
    )


class ModerationRequest(CamelModel):
    """
    Validated body of a POST /api/moderate request.

    Text bounds are enforced by the validation gate before this model is
    built, so they can be reported with their dedicated error codes.

    Example:
        {
            "text": "Limited offer!!! Click here to claim your prize now.",
            "features": ["sentiment", "classification"],
            "options": {"maxLength": 100}
        }
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "text": "Limited offer!!! Click here to claim your prize now.",
                    "features": ["sentiment", "classification"],
                    "options": {"maxLength": 100},
                }
            ]
        },
    )

    text: str = Field(..., description="The text content to moderate")

    features: tuple[str, ...] = Field(
        default=(),
        description="Features to run; empty or containing 'all' runs every feature",
    )

    options: ModerationOptions = Field(
        default_factory=ModerationOptions,
        description="Optional request options",
    )

    @field_validator("features", mode="before")
    @classmethod
    def validate_features(cls, v: Any) -> Any:
        """Accept only known feature names and the 'all' sentinel."""
        if v is None:
            return ()
        if not isinstance(v, (list, tuple)):
            raise ValueError("features must be a list of feature names")
        allowed = {feature.value for feature in FeatureName} | {ALL_FEATURES}
        for name in v:
            if not isinstance(name, str):
                raise ValueError("features must contain feature names as strings")
            if name not in allowed:
                raise ValueError(
                    f"Unknown feature '{name}', expected one of {sorted(allowed)}"
                )
        return tuple(v)

    @field_validator("options", mode="before")
    @classmethod
    def default_options(cls, v: Any) -> Any:
        return {} if v is None else v


# =============================================================================
# RESULT MODELS
# =============================================================================


class SentimentResult(CamelModel):
    """Sentiment polarity with its score (4 decimals) and integer confidence."""

    label: SentimentLabel
    score: float = Field(..., ge=0.0, le=1.0)
    confidence: int = Field(..., ge=0, le=100)


class ClassificationResult(CamelModel):
    """Content category with the model's confidence and a spam flag."""

    category: ContentCategory
    confidence: float = Field(..., ge=0.0, le=1.0)
    is_spam: bool


class SummarizationResult(CamelModel):
    """Trimmed summary along with input and summary lengths."""

    summary: str
    original_length: int = Field(..., ge=0)
    summary_length: int = Field(..., ge=0)


class ModerationResult(CamelModel):
    """
    Aggregated per-feature results.

    Only features that actually ran are set; the others stay None and are
    dropped when the envelope is serialised.
    """

    sentiment: SentimentResult | None = None
    classification: ClassificationResult | None = None
    summarization: SummarizationResult | None = None

    def executed_features(self) -> list[FeatureName]:
        """Features with a result, in canonical order."""
        return [feature for feature in FeatureName if getattr(self, feature.value) is not None]


class ModerationData(ModerationResult):
    """Success payload: the moderated text plus its feature results."""

    text: str


# =============================================================================
# ENVELOPES
# =============================================================================


class ErrorCodes:
    """
    Standard error codes for API responses.

    These codes enable programmatic error handling by clients
    without parsing human-readable messages.
    """

    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_TEXT = "MISSING_TEXT"
    TEXT_TOO_SHORT = "TEXT_TOO_SHORT"
    TEXT_TOO_LONG = "TEXT_TOO_LONG"
    AI_ERROR = "AI_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ResponseMetadata(CamelModel):
    """Timing and feature metadata attached to a successful response."""

    timestamp: str = Field(..., description="ISO-8601 UTC time the response was built")

    processing_time: int = Field(
        ...,
        ge=0,
        description="Milliseconds the orchestrator spent running the selected features",
    )

    features: list[FeatureName] = Field(
        default_factory=list,
        description="Features selected for this request",
    )


class SuccessEnvelope(CamelModel):
    """
    Envelope returned for a successful moderation.

    Example:
        {
            "success": true,
            "data": {
                "text": "Great article, thanks for sharing it with us!",
                "sentiment": {"label": "POSITIVE", "score": 0.9987, "confidence": 100},
                "classification": {"category": "social", "confidence": 0.9, "isSpam": false}
            },
            "metadata": {
                "timestamp": "2024-01-01T00:00:00.000Z",
                "processingTime": 412,
                "features": ["sentiment", "classification", "summarization"]
            }
        }
    """

    success: Literal[True] = True
    data: ModerationData
    metadata: ResponseMetadata


class ErrorDetail(CamelModel):
    """
    Detailed error information for API error responses.

    Provides machine-readable error codes, human-readable messages,
    and optional structured details such as the original error text.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code for programmatic handling",
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional context, e.g. the upstream error message",
    )


class ErrorEnvelope(CamelModel):
    """
    Standard error envelope for all API errors.

    Example:
        {
            "success": false,
            "error": {
                "code": "TEXT_TOO_SHORT",
                "message": "Text must be at least 10 characters"
            },
            "timestamp": "2024-01-01T00:00:00.000Z"
        }
    """

    success: Literal[False] = False
    error: ErrorDetail
    timestamp: str


class HealthResponse(BaseModel):
    """Response from the /health endpoint."""

    status: Literal["healthy"] = "healthy"
    timestamp: str
    version: str


# =============================================================================
# ENVELOPE BUILDERS
# =============================================================================


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_success_envelope(
    text: str,
    result: ModerationResult,
    processing_time_ms: int,
    features: list[FeatureName],
) -> SuccessEnvelope:
    """
    Wrap orchestration output in a success envelope.

    Args:
        text: The moderated text, echoed back to the caller
        result: Per-feature results from the orchestrator
        processing_time_ms: Elapsed request time in milliseconds
        features: Features selected for the request

    Returns:
        SuccessEnvelope stamped with the current time
    """
    return SuccessEnvelope(
        data=ModerationData(text=text, **result.model_dump(exclude_none=True)),
        metadata=ResponseMetadata(
            timestamp=utc_timestamp(),
            processing_time=processing_time_ms,
            features=features,
        ),
    )


def build_error_envelope(
    code: str, message: str, details: dict[str, Any] | None = None
) -> ErrorEnvelope:
    """Wrap a failure code and message in an error envelope."""
    return ErrorEnvelope(
        error=ErrorDetail(code=code, message=message, details=details),
        timestamp=utc_timestamp(),
    )
