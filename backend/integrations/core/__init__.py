# Core integration types and utilities
from .definition import IntegrationAction, IntegrationDefinition, RequiredConfigFields
from .errors import (
    AuthError,
    ConfigValidationError,
    IntegrationError,
    IntegrationNotFoundError,
    InvalidActionInputError,
    ProviderCallError,
    ProviderTimeoutError,
    UnknownProviderError,
    UnsupportedActionError,
)
from .models import (
    ApiKeyAuth,
    AuthConfig,
    AuthType,
    BasicAuth,
    Integration,
    IntegrationConfig,
    IntegrationStatus,
    OAuth2Auth,
    Workflow,
    WorkflowAction,
)
from .registry import IntegrationRegistry
from .schema import ActionSchema, FieldSpec, FieldType, validate_params

__all__ = [
    "IntegrationAction",
    "IntegrationDefinition",
    "RequiredConfigFields",
    "AuthError",
    "ConfigValidationError",
    "IntegrationError",
    "IntegrationNotFoundError",
    "InvalidActionInputError",
    "ProviderCallError",
    "ProviderTimeoutError",
    "UnknownProviderError",
    "UnsupportedActionError",
    "ApiKeyAuth",
    "AuthConfig",
    "AuthType",
    "BasicAuth",
    "Integration",
    "IntegrationConfig",
    "IntegrationStatus",
    "OAuth2Auth",
    "Workflow",
    "WorkflowAction",
    "IntegrationRegistry",
    "ActionSchema",
    "FieldSpec",
    "FieldType",
    "validate_params",
]
