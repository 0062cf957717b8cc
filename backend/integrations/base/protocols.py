# backend/integrations/base/protocols.py
from __future__ import annotations

from typing import Any, Protocol

from integrations.core.definition import IntegrationDefinition
from integrations.core.models import Integration, Workflow, WorkflowAction


class IntegrationHandler(Protocol):
    definition: IntegrationDefinition

    async def initialize(self, integration: Integration) -> Any:
        """Prepare provider client state for an integration. No network calls."""
        ...

    async def connect(self, integration: Integration) -> Integration:
        """Normalize and persist the stored credential; mark the integration connected."""
        ...

    async def disconnect(self, integration: Integration) -> Integration:
        """Revoke the credential (best effort) and mark the integration disconnected."""
        ...

    async def execute_action(self, action: WorkflowAction, workflow: Workflow) -> Any:
        """Dispatch a workflow action to the matching action handler."""
        ...
