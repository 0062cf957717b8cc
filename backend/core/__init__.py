# backend/core/__init__.py
from .config import Settings, settings
from .contracts import IntegrationStore, KeyValueStore

__all__ = [
    "Settings",
    "settings",
    "IntegrationStore",
    "KeyValueStore",
]
