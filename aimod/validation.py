"""
Validation Gate - request checks that run before orchestration.

Text presence and length are checked by hand so each failure maps to its own
error code; the remaining fields are validated by the ModerationRequest
schema and reported as INVALID_REQUEST.
"""

from typing import Any

from pydantic import ValidationError

from aimod.config import ModerationConfig
from aimod.exceptions import RequestValidationFailure
from aimod.schemas.moderation import ErrorCodes, ModerationRequest


def validate_moderation_body(body: Any, config: ModerationConfig) -> ModerationRequest:
    """
    Validate a decoded JSON body into a ModerationRequest.

    Args:
        body: The decoded request body.
        config: Pipeline configuration holding the text length bounds.

    Returns:
        The immutable, validated ModerationRequest.

    Raises:
        RequestValidationFailure: With the error code describing the first problem.
    """
    if not isinstance(body, dict):
        raise RequestValidationFailure(
            ErrorCodes.INVALID_REQUEST, "Request body must be a JSON object"
        )

    text = body.get("text")
    if not text or not isinstance(text, str):
        raise RequestValidationFailure(
            ErrorCodes.MISSING_TEXT, "Text field is required and must be a string"
        )

    if len(text) < config.min_text_length:
        raise RequestValidationFailure(
            ErrorCodes.TEXT_TOO_SHORT,
            f"Text must be at least {config.min_text_length} characters",
        )

    if len(text) > config.max_text_length:
        raise RequestValidationFailure(
            ErrorCodes.TEXT_TOO_LONG,
            f"Text must not exceed {config.max_text_length} characters",
        )

    try:
        return ModerationRequest.model_validate(body)
    except ValidationError as e:
        errors = e.errors()
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        message = first_error.get("msg", "Invalid request body")
        raise RequestValidationFailure(
            ErrorCodes.INVALID_REQUEST, f"{field}: {message}" if field else message
        ) from e
