"""
AI-Mod: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints:
- /api/moderate: Parallel sentiment, classification and summarization
- /health and /: Health check

Every error, including unknown routes, is answered with the JSON error
envelope. CORS headers are added to every response and OPTIONS requests are
answered as preflights.

The application uses a lifespan context manager to:
1. Load and validate configuration at startup
2. Configure logging based on settings
3. Build the moderation orchestrator over the inference dispatcher
4. Close provider clients on shutdown
"""

from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from aimod import __version__
from aimod.config import ModerationConfig, configure_logging, get_settings
from aimod.dispatcher.handlers import close_clients, invoke
from aimod.exceptions import RequestValidationFailure
from aimod.middleware import CORS_HEADERS, cors_middleware
from aimod.orchestrator import ModerationOrchestrator, resolve_features
from aimod.registry import get_model_registry
from aimod.responses import error_response, handle_error, success_response
from aimod.schemas.moderation import (
    ErrorCodes,
    ErrorEnvelope,
    HealthResponse,
    SuccessEnvelope,
    build_success_envelope,
    utc_timestamp,
)
from aimod.validation import validate_moderation_body

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    On startup:
    - Loads configuration from environment
    - Configures logging
    - Builds the orchestrator

    On shutdown:
    - Closes provider clients
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("AI-Mod starting up...")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment}")
    for model in get_model_registry().list_models():
        logger.info(f"  - {model.feature.value}: {model.model_id} ({model.provider.value})")
    logger.info(
        f"Text length bounds: {settings.min_text_length}-{settings.max_text_length} chars"
    )
    logger.info(f"Summarize texts longer than {settings.summarize_threshold} chars")

    if not settings.cloudflare_account_id or not settings.cloudflare_api_token:
        logger.warning("Cloudflare credentials not configured: Workers AI calls will fail")

    app.state.orchestrator = ModerationOrchestrator(
        invoke, ModerationConfig.from_settings(settings)
    )

    logger.info("AI-Mod ready to accept requests")

    yield  # Application runs here

    logger.info("AI-Mod shutting down...")
    await close_clients()


app = FastAPI(
    title="AI-Mod",
    description="Parallel sentiment, classification and summarization for text moderation",
    version=__version__,
    docs_url="/docs" if get_settings().debug else None,
    redoc_url=None,
    openapi_url="/openapi.json" if get_settings().debug else None,
    lifespan=lifespan,
)

app.middleware("http")(cors_middleware)


def get_orchestrator(request: Request) -> ModerationOrchestrator:
    """Orchestrator built at startup."""
    return request.app.state.orchestrator


def _health() -> HealthResponse:
    return HealthResponse(status="healthy", timestamp=utc_timestamp(), version=__version__)


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint, identical to /health."""
    return _health()


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Report that the service is up, with its version.",
)
async def health_check():
    return _health()


@app.post(
    "/api/moderate",
    response_model=SuccessEnvelope,
    responses={
        400: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
    },
    summary="Moderate text",
    description="Run sentiment, classification and summarization on a text in parallel.",
)
async def moderate(
    request: Request,
    orchestrator: ModerationOrchestrator = Depends(get_orchestrator),
):
    """
    Main moderation endpoint.

    Flow:
    1. Decode and validate the body
    2. Resolve the requested features
    3. Run the selected features concurrently
    4. Return the merged results with timing metadata
    """
    try:
        body = await request.json()
    except ValueError:
        return error_response(ErrorCodes.INVALID_REQUEST, "Invalid JSON in request body")

    try:
        moderation_request = validate_moderation_body(body, orchestrator.config)
    except RequestValidationFailure as e:
        logger.info(f"Rejected moderation request: {e.code}")
        return error_response(e.code, e.message)

    features = resolve_features(moderation_request.features)

    try:
        outcome = await orchestrator.run(
            moderation_request.text, features, moderation_request.options
        )
    except Exception as e:
        return handle_error(e, orchestrator.config)

    return success_response(
        build_success_envelope(
            text=moderation_request.text,
            result=outcome.result,
            processing_time_ms=round(outcome.processing_time_ms),
            features=outcome.features,
        )
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns the error envelope with the first validation error's message.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return error_response(
        ErrorCodes.INVALID_REQUEST,
        first_error.get("msg", "Validation failed"),
        details={"field": ".".join(str(loc) for loc in first_error.get("loc", []))},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle HTTP exceptions, including unmatched routes and methods.

    Unknown paths are 404 and wrong methods on a known path are 400, both
    reported as INVALID_REQUEST.
    """
    path = request.url.path

    if exc.status_code == 404:
        return error_response(
            ErrorCodes.INVALID_REQUEST, f"Route not found: {path}", status_code=404
        )
    if exc.status_code == 405:
        return error_response(
            ErrorCodes.INVALID_REQUEST, f"Method {request.method} is not allowed on {path}"
        )

    code = ErrorCodes.INVALID_REQUEST if exc.status_code < 500 else ErrorCodes.INTERNAL_ERROR
    return error_response(code, str(exc.detail), status_code=exc.status_code)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    envelope to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    response = error_response(
        ErrorCodes.INTERNAL_ERROR, "An unexpected error occurred", status_code=500
    )
    response.headers.update(CORS_HEADERS)
    return response


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "aimod.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
