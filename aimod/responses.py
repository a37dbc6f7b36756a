"""
Response helpers - envelopes to HTTP responses.

- success_response(): 200 with the success envelope, never cached
- error_response(): any status with the error envelope
- handle_error(): classifies an orchestration failure as AI_ERROR or
  INTERNAL_ERROR by inspecting its message
"""

import logging
from typing import Any

from fastapi.responses import JSONResponse

from aimod.config import ModerationConfig
from aimod.schemas.moderation import (
    ErrorCodes,
    SuccessEnvelope,
    build_error_envelope,
)

logger = logging.getLogger(__name__)


def success_response(envelope: SuccessEnvelope) -> JSONResponse:
    """Serialize a success envelope, dropping features that did not run."""
    return JSONResponse(
        status_code=200,
        content=envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers={"Cache-Control": "no-cache"},
    )


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Serialize an error envelope with the given HTTP status."""
    envelope = build_error_envelope(code, message, details)
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def is_ai_error(exc: BaseException, config: ModerationConfig) -> bool:
    """Whether an error message points at the inference backend."""
    message = str(exc)
    return any(keyword in message for keyword in config.ai_error_keywords)


def handle_error(exc: BaseException, config: ModerationConfig) -> JSONResponse:
    """
    Convert an orchestration failure into a 500 error envelope.

    The original error text is attached as details.originalError.
    """
    logger.error("Moderation request failed", exc_info=exc)

    if is_ai_error(exc, config):
        return error_response(
            ErrorCodes.AI_ERROR,
            "AI service temporarily unavailable",
            status_code=500,
            details={"originalError": str(exc)},
        )

    return error_response(
        ErrorCodes.INTERNAL_ERROR,
        "An unexpected error occurred",
        status_code=500,
        details={"originalError": str(exc)},
    )
