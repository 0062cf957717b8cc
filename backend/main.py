# backend/main.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

import httpx
from core import settings
from core.redis_store import RedisStore
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from integrations.adapters import build_registry
from integrations.core import (
    AuthError,
    ConfigValidationError,
    IntegrationConfig,
    IntegrationError,
    IntegrationNotFoundError,
    InvalidActionInputError,
    ProviderCallError,
    ProviderTimeoutError,
    UnknownProviderError,
    UnsupportedActionError,
    Workflow,
    WorkflowAction,
)
from integrations.service import IntegrationService
from integrations.store import KeyValueIntegrationStore
from pydantic import BaseModel

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

# most specific first
ERROR_STATUS_CODES = (
    (UnknownProviderError, 404),
    (IntegrationNotFoundError, 404),
    (UnsupportedActionError, 400),
    (ConfigValidationError, 400),
    (InvalidActionInputError, 422),
    (AuthError, 401),
    (ProviderTimeoutError, 504),
    (ProviderCallError, 502),
)


class ExecuteActionRequest(BaseModel):
    action: WorkflowAction
    workflow: Workflow


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        limits=httpx.Limits(
            max_keepalive_connections=settings.http_max_keepalive_connections,
            max_connections=settings.http_max_connections,
        ),
        headers={"User-Agent": settings.http_user_agent},
    )
    kv = RedisStore()
    store = KeyValueIntegrationStore(kv)
    registry = build_registry(client, store)
    app.state.service = IntegrationService(registry, store)
    logger.info(f"Registered providers: {', '.join(registry.provider_ids())}")

    yield

    await client.aclose()
    await kv.close()


app = FastAPI(lifespan=lifespan)
origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError):
    status_code = 500
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def get_service(request: Request) -> IntegrationService:
    return request.app.state.service


@app.get("/integrations")
async def list_integrations(service: IntegrationService = Depends(get_service)):
    """Catalog of every registered provider and its actions."""
    return service.get_available_integrations()


@app.post("/integrations/{provider}/validate")
async def validate_integration_config(
    provider: str,
    config: IntegrationConfig,
    service: IntegrationService = Depends(get_service),
) -> Dict[str, bool]:
    return {"valid": service.validate_config(provider, config)}


@app.post("/integrations/{integration_id}/test")
async def check_integration_connection(
    integration_id: str, service: IntegrationService = Depends(get_service)
) -> Dict[str, bool]:
    integration = await service.get_integration(integration_id)
    return {"connected": await service.validate_integration(integration)}


@app.post("/integrations/{integration_id}/connect")
async def connect_integration(
    integration_id: str, service: IntegrationService = Depends(get_service)
):
    integration = await service.get_integration(integration_id)
    return await service.connect_integration(integration)


@app.post("/integrations/{integration_id}/disconnect")
async def disconnect_integration(
    integration_id: str, service: IntegrationService = Depends(get_service)
):
    integration = await service.get_integration(integration_id)
    return await service.disconnect_integration(integration)


@app.post("/actions/execute")
async def execute_action(
    payload: ExecuteActionRequest, service: IntegrationService = Depends(get_service)
) -> Dict[str, Any]:
    result = await service.execute_action(payload.action, payload.workflow)
    return {"result": result}
