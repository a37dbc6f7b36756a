"""
Dispatcher module: Provider-specific handlers for model inference.

This module provides the single inference capability used by the moderation
services, invoke(model_id, payload), across Cloudflare Workers AI, Groq and
OpenAI.

Key exports:
- InvokeFn: Type of the inference capability
- ProviderClients: Lazy-initialized async clients
- get_clients() / close_clients(): Global client lifecycle
- invoke(): Main dispatch function routing to the correct provider
"""

from aimod.dispatcher.handlers import (
    InvokeFn,
    # Provider clients
    ProviderClients,
    get_clients,
    close_clients,
    # Core dispatch function
    invoke,
    # Provider-specific (for testing/advanced use)
    dispatch_workers_ai,
    dispatch_groq,
    dispatch_openai,
)

__all__ = [
    "InvokeFn",
    # Provider clients
    "ProviderClients",
    "get_clients",
    "close_clients",
    # Core dispatch function
    "invoke",
    # Provider-specific
    "dispatch_workers_ai",
    "dispatch_groq",
    "dispatch_openai",
]
