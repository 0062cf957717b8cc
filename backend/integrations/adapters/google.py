# google.py
import base64
import binascii
import logging
from email.message import EmailMessage
from typing import Any, Dict, List

from core import settings
from integrations.base import BaseIntegrationHandler, ProviderSession
from integrations.core import (
    AuthConfig,
    FieldSpec,
    FieldType,
    Integration,
    IntegrationAction,
    IntegrationDefinition,
    InvalidActionInputError,
    OAuth2Auth,
    RequiredConfigFields,
    Workflow,
)

logger = logging.getLogger(__name__)

GMAIL_SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"
CALENDAR_EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"
TOKENINFO_URL = "https://www.googleapis.com/oauth2/v1/tokeninfo"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"


class GoogleIntegrationHandler(BaseIntegrationHandler):
    def build_definition(self) -> IntegrationDefinition:
        return IntegrationDefinition(
            id="google",
            name="Google Workspace",
            description="Integrate with Gmail, Calendar, and Drive",
            icon="mail",
            category="email",
            auth=OAuth2Auth(
                config=AuthConfig(
                    client_id=settings.google_client_id,
                    client_secret=settings.google_client_secret,
                    scopes=tuple(settings.google_scope.split()),
                    redirect_uri=settings.google_redirect_uri,
                )
            ),
            actions=(
                IntegrationAction(
                    id="send_email",
                    name="Send Email",
                    description="Send an email through Gmail",
                    handler=self.send_email,
                    input_schema={
                        "to": FieldSpec(type=FieldType.STRING, required=True),
                        "subject": FieldSpec(type=FieldType.STRING, required=True),
                        "body": FieldSpec(type=FieldType.STRING, required=True),
                        "attachments": FieldSpec(type=FieldType.ARRAY),
                    },
                    output_schema={
                        "messageId": FieldSpec(type=FieldType.STRING),
                        "threadId": FieldSpec(type=FieldType.STRING),
                    },
                ),
                IntegrationAction(
                    id="create_event",
                    name="Create Calendar Event",
                    description="Create a new Google Calendar event",
                    handler=self.create_event,
                    input_schema={
                        "title": FieldSpec(type=FieldType.STRING, required=True),
                        "start": FieldSpec(type=FieldType.STRING, required=True),
                        "end": FieldSpec(type=FieldType.STRING, required=True),
                        "description": FieldSpec(type=FieldType.STRING),
                        "attendees": FieldSpec(type=FieldType.ARRAY),
                    },
                    output_schema={
                        "eventId": FieldSpec(type=FieldType.STRING),
                        "htmlLink": FieldSpec(type=FieldType.STRING),
                    },
                ),
            ),
            validate_config=RequiredConfigFields("access_token", "refresh_token"),
            test_connection=self.test_connection,
        )

    async def test_connection(self, integration: Integration) -> bool:
        try:
            session = await self.initialize(integration)
            await self.request("GET", TOKENINFO_URL, session=session)
            return True
        except Exception as err:
            logger.warning(
                f"Google connection test failed for integration {integration.id}: {err}"
            )
            return False

    async def revoke(self, session: ProviderSession) -> None:
        await self.request(
            "POST",
            REVOKE_URL,
            session=session,
            data={"token": session.access_token},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    async def send_email(self, params: Dict[str, Any], workflow: Workflow) -> Dict[str, Any]:
        message = self._build_message(params)
        session = await self.session_for(workflow, "send_email")
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")

        response = await self.request(
            "POST",
            GMAIL_SEND_URL,
            session=session,
            action_id="send_email",
            json={"raw": raw},
        )
        body = self.json_body(response, "send_email")
        logger.info(f"Sent Gmail message {body.get('id')} for workflow {workflow.id}")
        return {"messageId": body.get("id"), "threadId": body.get("threadId")}

    async def create_event(self, params: Dict[str, Any], workflow: Workflow) -> Dict[str, Any]:
        attendees = self._attendees(params.get("attendees") or [])
        session = await self.session_for(workflow, "create_event")
        event = {
            "summary": params["title"],
            "start": {"dateTime": params["start"]},
            "end": {"dateTime": params["end"]},
        }
        if params.get("description"):
            event["description"] = params["description"]
        if attendees:
            event["attendees"] = attendees

        response = await self.request(
            "POST",
            CALENDAR_EVENTS_URL,
            session=session,
            action_id="create_event",
            json=event,
        )
        body = self.json_body(response, "create_event")
        return {"eventId": body.get("id"), "htmlLink": body.get("htmlLink")}

    def _build_message(self, params: Dict[str, Any]) -> EmailMessage:
        message = EmailMessage()
        for header, name in (("To", "to"), ("Subject", "subject")):
            try:
                message[header] = params[name]
            except ValueError:
                raise InvalidActionInputError(
                    self.provider_id,
                    "send_email",
                    [f"field '{name}' must not contain line breaks"],
                )
        message.set_content(params["body"])

        for attachment in params.get("attachments") or []:
            # attachments are {filename, content (base64), mime_type}
            if not isinstance(attachment, dict) or not attachment.get("content"):
                raise InvalidActionInputError(
                    self.provider_id, "send_email", ["attachment without content"]
                )
            try:
                content = base64.b64decode(attachment["content"], validate=True)
            except (binascii.Error, ValueError):
                raise InvalidActionInputError(
                    self.provider_id,
                    "send_email",
                    [f"attachment '{attachment.get('filename')}' is not valid base64"],
                )
            maintype, _, subtype = (
                attachment.get("mime_type") or "application/octet-stream"
            ).partition("/")
            message.add_attachment(
                content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.get("filename") or "attachment",
            )
        return message

    def _attendees(self, attendees: List[Any]) -> List[Dict[str, Any]]:
        """Calendar attendees from email strings or {email, ...} objects."""
        normalized = []
        for attendee in attendees:
            if isinstance(attendee, str) and attendee.strip():
                normalized.append({"email": attendee.strip()})
            elif isinstance(attendee, dict) and attendee.get("email"):
                normalized.append(attendee)
            else:
                raise InvalidActionInputError(
                    self.provider_id,
                    "create_event",
                    [f"attendee {attendee!r} must be an email or an object with 'email'"],
                )
        return normalized
