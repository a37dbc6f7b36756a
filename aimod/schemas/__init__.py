"""
Schemas module: Pydantic request, result and envelope models.

Example usage:
    from aimod.schemas import ModerationRequest, build_success_envelope

    request = ModerationRequest(text="Hello world, nice to meet you")
    envelope = build_success_envelope(request.text, result, 120, features)
"""

from aimod.schemas.moderation import (
    # Enums
    ALL_FEATURES,
    ContentCategory,
    FeatureName,
    SentimentLabel,
    # Request models
    ModerationOptions,
    ModerationRequest,
    # Result models
    ClassificationResult,
    ModerationData,
    ModerationResult,
    SentimentResult,
    SummarizationResult,
    # Envelopes
    ErrorCodes,
    ErrorDetail,
    ErrorEnvelope,
    HealthResponse,
    ResponseMetadata,
    SuccessEnvelope,
    # Builders
    build_error_envelope,
    build_success_envelope,
    utc_timestamp,
)

__all__ = [
    # Enums
    "ALL_FEATURES",
    "FeatureName",
    "SentimentLabel",
    "ContentCategory",
    # Request models
    "ModerationOptions",
    "ModerationRequest",
    # Result models
    "SentimentResult",
    "ClassificationResult",
    "SummarizationResult",
    "ModerationResult",
    "ModerationData",
    # Envelopes
    "ErrorCodes",
    "ErrorDetail",
    "ErrorEnvelope",
    "ResponseMetadata",
    "SuccessEnvelope",
    "HealthResponse",
    # Builders
    "build_success_envelope",
    "build_error_envelope",
    "utc_timestamp",
]
