# backend/integrations/core/registry.py
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Dict, Iterable, List

from integrations.core.definition import IntegrationDefinition
from integrations.core.errors import UnknownProviderError

if TYPE_CHECKING:
    from integrations.base.protocols import IntegrationHandler

logger = logging.getLogger(__name__)


class IntegrationRegistry:
    """Maps provider ids to their handlers.

    Writes replace the whole map under a lock, so readers never lock and
    always see a complete map. Re-registering a provider id replaces the
    previous handler (last write wins) and logs a warning.
    """

    def __init__(self, handlers: Iterable[IntegrationHandler] = ()):
        self._handlers: Dict[str, IntegrationHandler] = {}
        self._lock = threading.Lock()
        for handler in handlers:
            self.register_handler(handler)

    def register_handler(self, handler: IntegrationHandler) -> None:
        key = handler.definition.id.lower()
        with self._lock:
            handlers = dict(self._handlers)
            if key in handlers:
                logger.warning(f"Replacing handler registered for '{key}'")
            handlers[key] = handler
            self._handlers = handlers
        logger.info(f"Registered integration handler: {key}")

    def get_handler(self, provider_id: str) -> IntegrationHandler:
        handler = self._handlers.get(provider_id.lower())
        if handler is None:
            raise UnknownProviderError(provider_id)
        return handler

    def get_all_definitions(self) -> List[IntegrationDefinition]:
        return [handler.definition for handler in self._handlers.values()]

    def provider_ids(self) -> List[str]:
        return list(self._handlers)

    def __contains__(self, provider_id: str) -> bool:
        return provider_id.lower() in self._handlers
