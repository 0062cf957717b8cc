# backend/integrations/base/__init__.py
from .handler import BaseIntegrationHandler, ProviderSession
from .protocols import IntegrationHandler

__all__ = [
    "BaseIntegrationHandler",
    "ProviderSession",
    "IntegrationHandler",
]
