# slack.py
import logging
from typing import Any, Dict, Optional

import httpx

from core import settings
from integrations.base import BaseIntegrationHandler, ProviderSession
from integrations.core import (
    AuthConfig,
    AuthError,
    FieldSpec,
    FieldType,
    Integration,
    IntegrationAction,
    IntegrationDefinition,
    InvalidActionInputError,
    OAuth2Auth,
    ProviderCallError,
    RequiredConfigFields,
    Workflow,
)

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"

# Slack reports these with HTTP 200 and ok=false
SLACK_AUTH_ERRORS = {
    "invalid_auth",
    "not_authed",
    "token_revoked",
    "token_expired",
    "account_inactive",
}
SLACK_RETRYABLE_ERRORS = {
    "ratelimited",
    "internal_error",
    "fatal_error",
    "service_unavailable",
    "request_timeout",
}


class SlackIntegrationHandler(BaseIntegrationHandler):
    def build_definition(self) -> IntegrationDefinition:
        return IntegrationDefinition(
            id="slack",
            name="Slack",
            description="Send messages and interact with Slack channels",
            icon="message-square",
            category="communication",
            auth=OAuth2Auth(
                config=AuthConfig(
                    client_id=settings.slack_client_id,
                    client_secret=settings.slack_client_secret,
                    scopes=tuple(settings.slack_scope.split()),
                    redirect_uri=settings.slack_redirect_uri,
                    base_url=SLACK_API_URL,
                )
            ),
            actions=(
                IntegrationAction(
                    id="send_message",
                    name="Send Message",
                    description="Send a message to a Slack channel",
                    handler=self.send_message,
                    input_schema={
                        "channel": FieldSpec(type=FieldType.STRING, required=True),
                        "message": FieldSpec(type=FieldType.STRING, required=True),
                        "attachments": FieldSpec(type=FieldType.ARRAY),
                    },
                    output_schema={
                        "ok": FieldSpec(type=FieldType.BOOLEAN),
                        "channel": FieldSpec(type=FieldType.STRING),
                        "ts": FieldSpec(type=FieldType.STRING),
                    },
                ),
                IntegrationAction(
                    id="list_channels",
                    name="List Channels",
                    description="List channels visible to the connected workspace",
                    handler=self.list_channels,
                    input_schema={
                        "limit": FieldSpec(type=FieldType.INTEGER),
                        "types": FieldSpec(type=FieldType.STRING),
                        "cursor": FieldSpec(type=FieldType.STRING),
                    },
                    output_schema={
                        "channels": FieldSpec(type=FieldType.ARRAY),
                        "next_cursor": FieldSpec(type=FieldType.STRING),
                    },
                ),
            ),
            validate_config=RequiredConfigFields("access_token", "workspace"),
            test_connection=self.test_connection,
        )

    async def test_connection(self, integration: Integration) -> bool:
        """Probe auth.test with the stored token. Any failure means not connected."""
        try:
            session = await self.initialize(integration)
            response = await self.request(
                "POST", f"{SLACK_API_URL}/auth.test", session=session
            )
            return bool(self.json_body(response).get("ok"))
        except Exception as err:
            logger.warning(
                f"Slack connection test failed for integration {integration.id}: {err}"
            )
            return False

    async def revoke(self, session: ProviderSession) -> None:
        response = await self.request(
            "POST", f"{SLACK_API_URL}/auth.revoke", session=session
        )
        self._check_body(response, None)

    async def send_message(self, params: Dict[str, Any], workflow: Workflow) -> Dict[str, Any]:
        session = await self.session_for(workflow, "send_message")
        payload = {"channel": params["channel"], "text": params["message"]}
        if params.get("attachments"):
            payload["attachments"] = params["attachments"]

        response = await self.request(
            "POST",
            f"{SLACK_API_URL}/chat.postMessage",
            session=session,
            action_id="send_message",
            json=payload,
        )
        body = self._check_body(response, "send_message")
        logger.info(f"Posted Slack message to {params['channel']} for workflow {workflow.id}")
        return body

    async def list_channels(self, params: Dict[str, Any], workflow: Workflow) -> Dict[str, Any]:
        limit = params.get("limit")
        if limit is not None and limit < 1:
            raise InvalidActionInputError(
                self.provider_id, "list_channels", ["field 'limit' must be at least 1"]
            )
        session = await self.session_for(workflow, "list_channels")
        query = {
            "limit": 100 if limit is None else limit,
            "types": params.get("types") or "public_channel",
        }
        if params.get("cursor"):
            query["cursor"] = params["cursor"]

        response = await self.request(
            "GET",
            f"{SLACK_API_URL}/conversations.list",
            session=session,
            action_id="list_channels",
            params=query,
        )
        body = self._check_body(response, "list_channels")
        return {
            "channels": body.get("channels", []),
            "next_cursor": body.get("response_metadata", {}).get("next_cursor") or None,
        }

    def _check_body(
        self, response: httpx.Response, action_id: Optional[str]
    ) -> Dict[str, Any]:
        body = self.json_body(response, action_id)
        if body.get("ok"):
            return body

        error = body.get("error", "unknown_error")
        if error in SLACK_AUTH_ERRORS:
            raise AuthError(
                f"Slack rejected the credential: {error}",
                provider=self.provider_id,
                action=action_id,
                status_code=response.status_code,
                code=error,
            )
        raise ProviderCallError(
            f"Slack call failed: {error}",
            provider=self.provider_id,
            action=action_id,
            status_code=response.status_code,
            code=error,
            retryable=error in SLACK_RETRYABLE_ERRORS,
        )
