# backend/integrations/base/handler.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from core.contracts import IntegrationStore
from integrations.core.definition import IntegrationDefinition
from integrations.core.errors import (
    AuthError,
    ConfigValidationError,
    IntegrationError,
    InvalidActionInputError,
    ProviderCallError,
    ProviderTimeoutError,
    UnsupportedActionError,
)
from integrations.core.models import (
    Integration,
    IntegrationConfig,
    IntegrationStatus,
    Workflow,
    WorkflowAction,
)
from integrations.core.schema import validate_params

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSession:
    """Request state bound to one integration's stored credential."""

    integration: Integration
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def access_token(self) -> Optional[str]:
        return self.integration.config.access_token


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class BaseIntegrationHandler(ABC):
    """Shared lifecycle and dispatch for provider handlers.

    Subclasses build their ``IntegrationDefinition`` (actions bound to their
    own coroutines) and implement ``revoke``. All provider HTTP traffic goes
    through ``request`` so failures surface as typed integration errors.
    """

    def __init__(self, http: httpx.AsyncClient, store: IntegrationStore):
        self.http = http
        self.store = store
        self.definition: IntegrationDefinition = self.build_definition()

    @property
    def provider_id(self) -> str:
        return self.definition.id

    @abstractmethod
    def build_definition(self) -> IntegrationDefinition:
        pass

    @abstractmethod
    async def revoke(self, session: ProviderSession) -> None:
        """Revoke the remote credential held by the session."""
        pass

    async def initialize(self, integration: Integration) -> ProviderSession:
        if integration.provider_id.lower() != self.provider_id:
            raise ConfigValidationError(
                f"Integration {integration.id} belongs to provider "
                f"'{integration.provider_id}', not '{self.provider_id}'",
                provider=self.provider_id,
            )
        headers = {}
        if integration.config.access_token:
            headers["Authorization"] = f"Bearer {integration.config.access_token}"
        return ProviderSession(integration=integration, headers=headers)

    def normalize_config(self, config: IntegrationConfig) -> IntegrationConfig:
        return config.model_copy(
            update={
                "access_token": _clean(config.access_token),
                "refresh_token": _clean(config.refresh_token),
                "api_key": _clean(config.api_key),
                "workspace": _clean(config.workspace),
                "account": _clean(config.account),
                "token_type": config.token_type or "Bearer",
            }
        )

    async def connect(self, integration: Integration) -> Integration:
        config = self.normalize_config(integration.config)
        if not config.access_token and not config.api_key:
            raise AuthError(
                f"No credential stored for {self.provider_id} integration {integration.id}",
                provider=self.provider_id,
            )
        if not self.definition.validate_config(config):
            raise ConfigValidationError(
                f"Incomplete {self.provider_id} configuration for integration {integration.id}",
                provider=self.provider_id,
            )

        candidate = integration.model_copy(update={"config": config})
        if not await self.definition.test_connection(candidate):
            raise AuthError(
                f"{self.provider_id} rejected the credential for integration {integration.id}",
                provider=self.provider_id,
            )

        connected = candidate.model_copy(
            update={
                "status": IntegrationStatus.CONNECTED,
                "last_synced_at": datetime.now(timezone.utc),
            }
        )
        await self.store.save(connected)
        logger.info(f"Connected {self.provider_id} integration {integration.id}")
        return connected

    async def disconnect(self, integration: Integration) -> Integration:
        session = await self.initialize(integration)
        disconnected = integration.model_copy(
            update={
                "status": IntegrationStatus.DISCONNECTED,
                "config": IntegrationConfig(),
            }
        )
        try:
            if session.access_token:
                try:
                    await self.revoke(session)
                except (IntegrationError, httpx.HTTPError) as err:
                    logger.warning(
                        f"Failed to revoke {self.provider_id} credential for integration {integration.id}: {err}"
                    )
        finally:
            # local state is cleared even when revoke fails unexpectedly
            await self.store.save(disconnected)
        logger.info(f"Disconnected {self.provider_id} integration {integration.id}")
        return disconnected

    async def execute_action(self, action: WorkflowAction, workflow: Workflow) -> Any:
        action_def = self.definition.get_action(action.type)
        if action_def is None:
            raise UnsupportedActionError(self.provider_id, action.type)

        problems = validate_params(action_def.input_schema, action.config)
        if problems:
            raise InvalidActionInputError(self.provider_id, action.type, problems)

        return await action_def.handler(action.config, workflow)

    async def resolve_integration(
        self, workflow: Workflow, action_id: Optional[str] = None
    ) -> Integration:
        """Find the integration a workflow runs this provider's actions against."""
        integration = None
        integration_id = workflow.integration_ids.get(self.provider_id)
        if integration_id:
            integration = await self.store.get(integration_id)
        elif workflow.user_id:
            integration = await self.store.find_connected(
                self.provider_id, workflow.user_id
            )

        if integration is None or integration.status != IntegrationStatus.CONNECTED:
            raise AuthError(
                f"No connected {self.provider_id} integration for workflow {workflow.id}",
                provider=self.provider_id,
                action=action_id,
            )
        return integration

    async def session_for(self, workflow: Workflow, action_id: str) -> ProviderSession:
        integration = await self.resolve_integration(workflow, action_id)
        session = await self.initialize(integration)
        if not session.access_token:
            raise AuthError(
                f"{self.provider_id} integration {integration.id} has no access token",
                provider=self.provider_id,
                action=action_id,
            )
        return session

    async def request(
        self,
        method: str,
        url: str,
        *,
        session: ProviderSession,
        action_id: Optional[str] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = {**session.headers, **kwargs.pop("headers", {})}
        try:
            response = await self.http.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as err:
            logger.error(f"{self.provider_id} request timed out: {method} {url}")
            raise ProviderTimeoutError(
                f"{self.provider_id} request timed out: {err}",
                provider=self.provider_id,
                action=action_id,
            ) from err
        except httpx.HTTPError as err:
            logger.error(f"{self.provider_id} request failed: {method} {url}: {err}")
            raise ProviderCallError(
                f"{self.provider_id} request failed: {err}",
                provider=self.provider_id,
                action=action_id,
            ) from err

        if response.status_code in (401, 403):
            raise AuthError(
                f"{self.provider_id} rejected the credential: status={response.status_code}",
                provider=self.provider_id,
                action=action_id,
                status_code=response.status_code,
            )
        if response.is_error:
            logger.error(
                f"{self.provider_id} call failed: {method} {url} status={response.status_code}"
            )
            raise ProviderCallError(
                f"{self.provider_id} call failed: status={response.status_code}",
                provider=self.provider_id,
                action=action_id,
                status_code=response.status_code,
                retryable=response.status_code == 429 or response.status_code >= 500,
            )
        return response

    def json_body(
        self, response: httpx.Response, action_id: Optional[str] = None
    ) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as err:
            raise ProviderCallError(
                f"{self.provider_id} returned a non-JSON response",
                provider=self.provider_id,
                action=action_id,
                status_code=response.status_code,
            ) from err
        if not isinstance(body, dict):
            raise ProviderCallError(
                f"{self.provider_id} returned a non-object JSON response",
                provider=self.provider_id,
                action=action_id,
                status_code=response.status_code,
            )
        return body
