"""Shared fixtures: in-memory storage and a stubbed provider transport."""

import json
from typing import Dict, List, Optional

import httpx
import pytest
from integrations.adapters import GoogleIntegrationHandler, SlackIntegrationHandler, build_registry
from integrations.core import Integration, IntegrationConfig, IntegrationStatus, Workflow
from integrations.store import KeyValueIntegrationStore


class InMemoryKeyValueStore:
    """KeyValueStore fake that returns bytes like redis does."""

    def __init__(self):
        self.data: Dict[str, bytes] = {}

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> None:
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value

    async def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


def _without_query(request: httpx.Request) -> str:
    return str(request.url).split("?")[0]


class ProviderStub:
    """Serves canned responses keyed by (method, url without query) and records requests."""

    def __init__(self):
        self.routes = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url: str, status_code: int = 200, json_body=None, error=None):
        self.routes[(method.upper(), url)] = (status_code, json_body, error)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, _without_query(request))
        if key not in self.routes:
            return httpx.Response(404, json={"error": "no_route"})
        status_code, json_body, error = self.routes[key]
        if error is not None:
            raise error("stubbed transport failure", request=request)
        return httpx.Response(status_code, json=json_body)

    def calls(self, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if _without_query(r) == url]

    @staticmethod
    def json_of(request: httpx.Request) -> dict:
        return json.loads(request.content)


@pytest.fixture
def provider():
    return ProviderStub()


@pytest.fixture
def http(provider):
    return httpx.AsyncClient(transport=httpx.MockTransport(provider))


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return KeyValueIntegrationStore(kv)


@pytest.fixture
def registry(http, store):
    return build_registry(http, store)


@pytest.fixture
def slack_handler(http, store):
    return SlackIntegrationHandler(http, store)


@pytest.fixture
def google_handler(http, store):
    return GoogleIntegrationHandler(http, store)


@pytest.fixture
def workflow():
    return Workflow(id="wf-1", name="Daily digest", user_id="user-1")


@pytest.fixture
def slack_integration():
    return Integration(
        id="int-slack",
        provider_id="slack",
        user_id="user-1",
        name="Acme Slack",
        status=IntegrationStatus.CONNECTED,
        config=IntegrationConfig(access_token="xoxb-token", workspace="acme"),
    )


@pytest.fixture
def google_integration():
    return Integration(
        id="int-google",
        provider_id="google",
        user_id="user-1",
        name="Acme Google",
        status=IntegrationStatus.CONNECTED,
        config=IntegrationConfig(access_token="ya29-token", refresh_token="1//refresh"),
    )
