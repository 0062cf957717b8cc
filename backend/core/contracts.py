from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from integrations.core.models import Integration


class KeyValueStore(Protocol):
    async def set(self, key: str, value: str, expire: Optional[int] = None) -> None: ...

    async def get(self, key: str) -> Optional[bytes]: ...

    async def delete(self, key: str) -> None: ...


class IntegrationStore(Protocol):
    """Persistence for tenant integration records, owned outside the handlers."""

    async def get(self, integration_id: str) -> Optional[Integration]: ...

    async def save(self, integration: Integration) -> None: ...

    async def find_connected(
        self, provider_id: str, user_id: str
    ) -> Optional[Integration]: ...
