# backend/integrations/core/models.py
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class AuthType(str, Enum):
    OAUTH2 = "oauth2"
    API_KEY = "api_key"
    BASIC = "basic"


class AuthConfig(BaseModel):
    """Provider-level auth settings; ``extra`` holds provider-specific keys."""

    model_config = ConfigDict(frozen=True)

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    scopes: Tuple[str, ...] = ()
    redirect_uri: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    workspace: Optional[str] = None
    account: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class OAuth2Auth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["oauth2"] = "oauth2"
    config: AuthConfig


class ApiKeyAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["api_key"] = "api_key"
    config: AuthConfig


class BasicAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    config: AuthConfig


IntegrationAuthConfig = Annotated[
    Union[OAuth2Auth, ApiKeyAuth, BasicAuth], Field(discriminator="type")
]


class IntegrationStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class IntegrationConfig(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_at: Optional[datetime] = None
    workspace: Optional[str] = None
    account: Optional[str] = None
    api_key: Optional[str] = None
    scopes: List[str] = Field(default_factory=list)
    extra: Dict[str, Any] = Field(default_factory=dict)


class Integration(BaseModel):
    id: str
    provider_id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    status: IntegrationStatus = IntegrationStatus.DISCONNECTED
    config: IntegrationConfig = Field(default_factory=IntegrationConfig)
    last_synced_at: Optional[datetime] = None


class WorkflowAction(BaseModel):
    id: Optional[str] = None
    type: str
    provider: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)


class Workflow(BaseModel):
    id: str
    name: Optional[str] = None
    user_id: Optional[str] = None
    status: str = "active"
    integration_ids: Dict[str, str] = Field(default_factory=dict)
