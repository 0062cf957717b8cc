# backend/integrations/adapters/__init__.py
import httpx

from core.contracts import IntegrationStore
from integrations.core import IntegrationRegistry

from .google import GoogleIntegrationHandler
from .slack import SlackIntegrationHandler

BUILTIN_HANDLERS = (SlackIntegrationHandler, GoogleIntegrationHandler)


def build_registry(http: httpx.AsyncClient, store: IntegrationStore) -> IntegrationRegistry:
    """Create a registry seeded with the built-in providers."""
    return IntegrationRegistry(handler(http, store) for handler in BUILTIN_HANDLERS)


__all__ = [
    "BUILTIN_HANDLERS",
    "GoogleIntegrationHandler",
    "SlackIntegrationHandler",
    "build_registry",
]
