"""Entry point used by the HTTP API and the workflow engine.

Resolves handlers from an injected registry, checks configuration before a
connection is attempted and writes one audit log line per lifecycle event.
Errors are logged and re-raised unchanged; nothing here retries.
"""

import logging
from typing import Any, Dict, List

from core.contracts import IntegrationStore
from integrations.core import (
    ConfigValidationError,
    Integration,
    IntegrationConfig,
    IntegrationError,
    IntegrationNotFoundError,
    IntegrationRegistry,
    UnknownProviderError,
    Workflow,
    WorkflowAction,
)

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("integrations.audit")


class IntegrationService:
    def __init__(self, registry: IntegrationRegistry, store: IntegrationStore):
        self.registry = registry
        self.store = store

    def get_available_integrations(self) -> List[Dict[str, Any]]:
        return [definition.summary() for definition in self.registry.get_all_definitions()]

    def validate_config(self, provider_id: str, config: IntegrationConfig) -> bool:
        handler = self.registry.get_handler(provider_id)
        return handler.definition.validate_config(config)

    async def get_integration(self, integration_id: str) -> Integration:
        integration = await self.store.get(integration_id)
        if integration is None:
            raise IntegrationNotFoundError(f"Integration {integration_id} not found")
        return integration

    async def validate_integration(self, integration: Integration) -> bool:
        """Live credential probe. Returns False instead of raising."""
        try:
            handler = self.registry.get_handler(integration.provider_id)
            return await handler.definition.test_connection(integration)
        except Exception as err:
            logger.warning(f"Validation of integration {integration.id} failed: {err}")
            return False

    async def connect_integration(self, integration: Integration) -> Integration:
        try:
            handler = self.registry.get_handler(integration.provider_id)
            if not handler.definition.validate_config(integration.config):
                raise ConfigValidationError(
                    f"Incomplete {integration.provider_id} configuration for integration {integration.id}",
                    provider=integration.provider_id,
                )
            connected = await handler.connect(integration)
        except IntegrationError as err:
            logger.error(f"Failed to connect integration {integration.id}: {err}")
            raise

        audit_logger.info(
            f"integration_connected user={integration.user_id} integration={integration.id} provider={integration.provider_id}"
        )
        return connected

    async def disconnect_integration(self, integration: Integration) -> Integration:
        try:
            handler = self.registry.get_handler(integration.provider_id)
            disconnected = await handler.disconnect(integration)
        except IntegrationError as err:
            logger.error(f"Failed to disconnect integration {integration.id}: {err}")
            raise

        audit_logger.info(
            f"integration_disconnected user={integration.user_id} integration={integration.id} provider={integration.provider_id}"
        )
        return disconnected

    async def execute_action(self, action: WorkflowAction, workflow: Workflow) -> Any:
        try:
            handler = self.registry.get_handler(self.resolve_provider(action))
            result = await handler.execute_action(action, workflow)
        except IntegrationError as err:
            logger.error(f"Failed to execute action {action.type} in workflow {workflow.id}: {err}")
            raise

        audit_logger.info(
            f"integration_action_executed user={workflow.user_id} workflow={workflow.id} action={action.id} type={action.type}"
        )
        return result

    def resolve_provider(self, action: WorkflowAction) -> str:
        """Provider named on the action, else the only provider declaring its type."""
        if action.provider:
            return action.provider

        candidates = [
            definition.id
            for definition in self.registry.get_all_definitions()
            if definition.get_action(action.type) is not None
        ]
        if len(candidates) != 1:
            raise UnknownProviderError(
                None,
                f"Cannot resolve a provider for action type '{action.type}'"
                + (f" (candidates: {', '.join(candidates)})" if candidates else ""),
            )
        return candidates[0]
