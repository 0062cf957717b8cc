# backend/integrations/store.py
from __future__ import annotations

from typing import Optional, Union

from core.contracts import IntegrationStore, KeyValueStore
from integrations.core.models import Integration, IntegrationStatus


def _decode(value: Union[bytes, str]) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class KeyValueIntegrationStore(IntegrationStore):
    """Integration records as JSON in a key-value store.

    ``integration:{id}`` holds the record; ``integration_connected:{provider}:{user}``
    points at the user's connected integration for a provider.
    """

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store

    async def get(self, integration_id: str) -> Optional[Integration]:
        raw = await self.kv_store.get(f"integration:{integration_id}")
        if not raw:
            return None
        return Integration.model_validate_json(raw)

    async def save(self, integration: Integration) -> None:
        await self.kv_store.set(
            f"integration:{integration.id}", integration.model_dump_json()
        )
        if not integration.user_id:
            return

        index_key = f"integration_connected:{integration.provider_id}:{integration.user_id}"
        if integration.status == IntegrationStatus.CONNECTED:
            await self.kv_store.set(index_key, integration.id)
            return

        current = await self.kv_store.get(index_key)
        if current and _decode(current) == integration.id:
            await self.kv_store.delete(index_key)

    async def find_connected(
        self, provider_id: str, user_id: str
    ) -> Optional[Integration]:
        integration_id = await self.kv_store.get(
            f"integration_connected:{provider_id}:{user_id}"
        )
        if not integration_id:
            return None
        integration = await self.get(_decode(integration_id))
        if integration is None or integration.status != IntegrationStatus.CONNECTED:
            return None
        return integration
