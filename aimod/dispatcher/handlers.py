"""
Dispatcher Handlers - Provider-specific inference execution.

This module implements the inference capability used by every moderation
service: invoke(model_id, payload) -> raw result. Provider differences are
hidden behind that single coroutine.

Key components:
- ProviderClients: Lazy-initialized async clients (httpx, Groq, OpenAI)
- dispatch_workers_ai(): Cloudflare Workers AI REST call, returns `result`
- dispatch_groq() / dispatch_openai(): chat completion for prompt payloads
- invoke(): Looks up the model in the registry and routes to its provider

Raw results are returned untouched; shaping them is the job of the
normalizers in aimod.services.
"""

import logging
import time
from typing import Any, Awaitable, Callable

import httpx
from groq import AsyncGroq
from openai import AsyncOpenAI

from aimod.config import get_settings
from aimod.exceptions import InferenceError
from aimod.registry.models import ModelMetadata, ModelProvider, get_model_registry

logger = logging.getLogger(__name__)

InvokeFn = Callable[[str, dict[str, Any]], Awaitable[Any]]


class ProviderClients:
    """
    Lazy-initialized provider clients.

    Clients are created on first use to avoid initialization errors
    when credentials are not configured for unused providers.
    """

    def __init__(self) -> None:
        self._settings = get_settings()
        self._workers_ai: httpx.AsyncClient | None = None
        self._groq: AsyncGroq | None = None
        self._openai: AsyncOpenAI | None = None

    @property
    def workers_ai(self) -> httpx.AsyncClient:
        """
        Get the Workers AI HTTP client (lazy initialization).

        The base URL points at the account's model runner, so callers only
        append the model name.

        Raises:
            ValueError: If the Cloudflare account or API token is missing.
        """
        if self._workers_ai is None:
            settings = self._settings
            if not settings.cloudflare_account_id or not settings.cloudflare_api_token:
                raise ValueError(
                    "CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN are required for Workers AI models"
                )
            base_url = (
                f"{settings.workers_ai_base_url.rstrip('/')}"
                f"/accounts/{settings.cloudflare_account_id}/ai/run/"
            )
            self._workers_ai = httpx.AsyncClient(
                base_url=base_url,
                headers={
                    "Authorization": f"Bearer {settings.cloudflare_api_token.get_secret_value()}"
                },
                timeout=settings.inference_timeout_seconds,
            )
            logger.debug("Initialized Workers AI client")
        return self._workers_ai

    @property
    def groq(self) -> AsyncGroq:
        """
        Get Groq client (lazy initialization).

        Raises:
            ValueError: If GROQ_API_KEY is not configured.
        """
        if self._groq is None:
            if self._settings.groq_api_key is None:
                raise ValueError("GROQ_API_KEY is required for Groq-hosted models")
            self._groq = AsyncGroq(
                api_key=self._settings.groq_api_key.get_secret_value(),
                timeout=self._settings.inference_timeout_seconds,
            )
            logger.debug("Initialized Groq client")
        return self._groq

    @property
    def openai(self) -> AsyncOpenAI:
        """
        Get OpenAI client (lazy initialization).

        Raises:
            ValueError: If OPENAI_API_KEY is not configured.
        """
        if self._openai is None:
            if self._settings.openai_api_key is None:
                raise ValueError("OPENAI_API_KEY is required for OpenAI-hosted models")
            self._openai = AsyncOpenAI(
                api_key=self._settings.openai_api_key.get_secret_value(),
                timeout=self._settings.inference_timeout_seconds,
            )
            logger.debug("Initialized OpenAI client")
        return self._openai

    async def close(self) -> None:
        """Close every client that was created."""
        if self._workers_ai is not None:
            await self._workers_ai.aclose()
            self._workers_ai = None
        if self._groq is not None:
            await self._groq.close()
            self._groq = None
        if self._openai is not None:
            await self._openai.close()
            self._openai = None


# Global client instance (singleton pattern)
_clients: ProviderClients | None = None


def get_clients() -> ProviderClients:
    """
    Get the global provider clients instance.

    Returns:
        The singleton ProviderClients instance.
    """
    global _clients
    if _clients is None:
        _clients = ProviderClients()
    return _clients


async def close_clients() -> None:
    """Close the global provider clients (call on shutdown)."""
    global _clients
    if _clients is not None:
        await _clients.close()
        _clients = None


async def dispatch_workers_ai(model: ModelMetadata, payload: dict[str, Any]) -> Any:
    """
    Run a model on Cloudflare Workers AI.

    The REST API wraps model output as {"success": bool, "result": ...,
    "errors": [...]}; only `result` is returned.

    Args:
        model: Model metadata containing the Workers AI model name.
        payload: Model-specific input (text, prompt, input_text, ...).

    Returns:
        The raw model result.

    Raises:
        InferenceError: If the API reports an unsuccessful run.
    """
    clients = get_clients()

    response = await clients.workers_ai.post(model.api_model_name, json=payload)
    response.raise_for_status()
    body = response.json()

    if not body.get("success", True):
        messages = [str(error.get("message", error)) for error in body.get("errors") or []]
        raise InferenceError(model.model_id, "; ".join(messages) or "unsuccessful run")

    return body.get("result")


async def _chat_completion(client: Any, model: ModelMetadata, payload: dict[str, Any]) -> dict[str, str]:
    """
    Send a prompt payload as a single user message.

    The reply is returned as {"response": text}, the same shape Workers AI
    text-generation models produce.
    """
    prompt = payload.get("prompt")
    if not isinstance(prompt, str):
        raise InferenceError(model.model_id, "chat providers only accept prompt payloads")

    response = await client.chat.completions.create(
        model=model.api_model_name,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=payload.get("max_tokens", model.max_tokens),
        temperature=model.temperature,
    )

    return {"response": response.choices[0].message.content or ""}


async def dispatch_groq(model: ModelMetadata, payload: dict[str, Any]) -> dict[str, str]:
    """Run a prompt payload through a Groq-hosted chat model."""
    return await _chat_completion(get_clients().groq, model, payload)


async def dispatch_openai(model: ModelMetadata, payload: dict[str, Any]) -> dict[str, str]:
    """Run a prompt payload through an OpenAI chat model."""
    return await _chat_completion(get_clients().openai, model, payload)


async def invoke(model_id: str, payload: dict[str, Any]) -> Any:
    """
    Invoke a registered model with a payload and return its raw result.

    This is the main entry point for the dispatcher. It routes to the
    appropriate provider based on the model's registry entry. No retry is
    attempted; a failed call fails the caller.

    Args:
        model_id: Registry identifier of the model.
        payload: Model-specific input.

    Returns:
        The raw, provider-shaped model result.

    Raises:
        InferenceError: On any provider, transport or configuration failure.
    """
    model = get_model_registry().get_model(model_id)
    if model is None:
        raise InferenceError(model_id, "model is not registered")

    logger.info(f"Invoking {model.model_id} via {model.provider.value}")
    start_time = time.perf_counter()

    try:
        match model.provider:
            case ModelProvider.WORKERS_AI:
                raw = await dispatch_workers_ai(model, payload)
            case ModelProvider.GROQ:
                raw = await dispatch_groq(model, payload)
            case ModelProvider.OPENAI:
                raw = await dispatch_openai(model, payload)
            case _:
                raise InferenceError(model.model_id, f"unknown provider {model.provider}")
    except InferenceError as e:
        logger.error(f"Inference failed: {e}")
        raise
    except Exception as e:
        logger.error(f"{model.provider.value} dispatch failed for {model.model_id}: {e}")
        raise InferenceError(model.model_id, str(e)) from e

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{model.provider.value} dispatch completed: model={model.model_id}, "
        f"latency={latency_ms:.0f}ms"
    )
    return raw
