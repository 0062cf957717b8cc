# backend/integrations/core/definition.py
from __future__ import annotations

from dataclasses import field
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from pydantic.dataclasses import dataclass

from integrations.core.models import (
    AuthType,
    Integration,
    IntegrationAuthConfig,
    IntegrationConfig,
    Workflow,
)
from integrations.core.schema import ActionSchema

ActionHandler = Callable[[Dict[str, Any], Workflow], Awaitable[Any]]
ConfigValidator = Callable[[IntegrationConfig], bool]
ConnectionTester = Callable[[Integration], Awaitable[bool]]


class RequiredConfigFields:
    """Config validator: every named credential field is present and non-empty."""

    def __init__(self, *fields: str):
        self.fields = fields

    def __call__(self, config: IntegrationConfig) -> bool:
        for name in self.fields:
            value = getattr(config, name, None)
            if value is None:
                value = config.extra.get(name)
            if isinstance(value, str):
                value = value.strip()
            if not value:
                return False
        return True

    def __repr__(self) -> str:
        return f"RequiredConfigFields{self.fields!r}"


@dataclass(frozen=True)
class IntegrationAction:
    id: str
    name: str
    description: str
    handler: ActionHandler
    input_schema: ActionSchema = field(default_factory=dict)
    output_schema: ActionSchema = field(default_factory=dict)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "input_schema": {
                name: spec.model_dump(mode="json")
                for name, spec in self.input_schema.items()
            },
            "output_schema": {
                name: spec.model_dump(mode="json")
                for name, spec in self.output_schema.items()
            },
        }


@dataclass(frozen=True)
class IntegrationDefinition:
    id: str
    name: str
    description: str
    icon: str
    category: str
    auth: IntegrationAuthConfig
    validate_config: ConfigValidator
    test_connection: ConnectionTester
    actions: Tuple[IntegrationAction, ...] = ()

    def __post_init__(self):
        seen = set()
        for action in self.actions:
            if action.id in seen:
                raise ValueError(
                    f"Duplicate action id '{action.id}' in integration '{self.id}'"
                )
            seen.add(action.id)

    @property
    def auth_type(self) -> AuthType:
        return AuthType(self.auth.type)

    def get_action(self, action_id: str) -> Optional[IntegrationAction]:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def summary(self) -> Dict[str, Any]:
        """Catalog entry for the UI. Never includes the client secret."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "auth": {
                "type": self.auth_type.value,
                "scopes": list(self.auth.config.scopes),
                "redirect_uri": self.auth.config.redirect_uri,
            },
            "required_config": list(getattr(self.validate_config, "fields", ())),
            "actions": [action.summary() for action in self.actions],
        }
