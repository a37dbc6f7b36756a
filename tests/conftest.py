"""
Pytest configuration and shared fixtures.

Provides a fake inference capability, a patched FastAPI TestClient and
environment setup for the AI-Mod test suite.

IMPORTANT: Environment variables must be set BEFORE importing app modules
that use pydantic-settings, as Settings validates on import.
"""

import os
import sys

# Set test environment variables before importing app modules
os.environ["CLOUDFLARE_ACCOUNT_ID"] = "test-account"
os.environ["CLOUDFLARE_API_TOKEN"] = "test-token-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"

# Now safe to import everything else
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from aimod.config import ModerationConfig
from tests.fixtures import (
    CLASSIFICATION_MODEL,
    SENTIMENT_MODEL,
    SUMMARIZATION_MODEL,
)


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "asyncio: mark test as async")


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset all singleton instances between tests.

    This ensures each test starts with a clean state.
    """
    yield

    from aimod.registry import models

    models._registry_instance = None

    from aimod.dispatcher import handlers

    handlers._clients = None


@pytest.fixture
def config():
    """Default pipeline configuration."""
    return ModerationConfig()


@pytest.fixture
def model_responses():
    """
    Raw results returned by the fake inference capability, keyed by model.

    Tests may replace an entry with an exception instance to make that
    model's call fail.
    """
    return {
        SENTIMENT_MODEL: [
            {"label": "NEGATIVE", "score": 0.0123},
            {"label": "POSITIVE", "score": 0.9877},
        ],
        CLASSIFICATION_MODEL: {
            "response": '{"category": "social", "confidence": 0.9, "isSpam": false}'
        },
        SUMMARIZATION_MODEL: {"summary": "  The council postponed the parking vote.  "},
    }


@pytest.fixture
def fake_invoke(model_responses):
    """
    AsyncMock standing in for the inference dispatcher.

    Usage:
        fake_invoke.call_args_list  # inspect (model_id, payload) calls
    """

    async def _invoke(model_id, payload):
        response = model_responses[model_id]
        if isinstance(response, BaseException):
            raise response
        return response

    return AsyncMock(side_effect=_invoke)


@pytest.fixture
def orchestrator(fake_invoke, config):
    """Orchestrator wired to the fake inference capability."""
    from aimod.orchestrator import ModerationOrchestrator

    return ModerationOrchestrator(fake_invoke, config)


@pytest.fixture
def test_client(fake_invoke):
    """
    Create a FastAPI TestClient whose orchestrator uses the fake invoke.

    The dispatcher is patched where it is referenced (aimod.main) before
    the lifespan builds the orchestrator.
    """
    # Clear cached app module to ensure fresh import with patches
    if "aimod.main" in sys.modules:
        del sys.modules["aimod.main"]

    with patch("aimod.main.invoke", new=fake_invoke), patch(
        "aimod.main.close_clients", new_callable=AsyncMock
    ):
        # Import app after patches are in place
        from aimod.main import app

        with TestClient(app) as client:
            yield client

    # Clean up
    if "aimod.main" in sys.modules:
        del sys.modules["aimod.main"]
