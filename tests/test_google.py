"""Tests for the Google Workspace integration handler."""

import base64
from email import message_from_bytes

import httpx
import pytest
from integrations.core import (
    AuthError,
    IntegrationConfig,
    InvalidActionInputError,
    ProviderCallError,
    UnsupportedActionError,
    WorkflowAction,
)

GMAIL_SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"
CALENDAR_EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"
TOKENINFO_URL = "https://www.googleapis.com/oauth2/v1/tokeninfo"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"


class TestDefinition:
    def test_actions(self, google_handler):
        definition = google_handler.definition
        assert definition.id == "google"
        assert [a.id for a in definition.actions] == ["send_email", "create_event"]

    def test_validate_config(self, google_handler):
        validate = google_handler.definition.validate_config
        assert validate(IntegrationConfig(access_token="ya29", refresh_token="1//r"))
        assert not validate(IntegrationConfig(access_token="ya29"))
        assert not validate(IntegrationConfig(access_token="ya29", refresh_token=""))


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unsupported_action(self, google_handler, workflow):
        with pytest.raises(UnsupportedActionError) as exc_info:
            await google_handler.execute_action(
                WorkflowAction(type="not_a_real_action", config={}), workflow
            )

        message = str(exc_info.value)
        assert "google" in message.lower()
        assert "not_a_real_action" in message
        assert exc_info.value.provider == "google"


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_sends_encoded_message(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        provider.add("POST", GMAIL_SEND_URL, json_body={"id": "m-1", "threadId": "t-1"})
        action = WorkflowAction(
            type="send_email",
            config={
                "to": "ops@example.com",
                "subject": "Report",
                "body": "All green",
                "attachments": [
                    {
                        "filename": "report.txt",
                        "content": base64.b64encode(b"numbers").decode(),
                        "mime_type": "text/plain",
                    }
                ],
            },
        )

        result = await google_handler.execute_action(action, workflow)

        assert result == {"messageId": "m-1", "threadId": "t-1"}
        (request,) = provider.calls(GMAIL_SEND_URL)
        assert request.headers["Authorization"] == "Bearer ya29-token"
        raw = provider.json_of(request)["raw"]
        sent = message_from_bytes(base64.urlsafe_b64decode(raw))
        assert sent["To"] == "ops@example.com"
        assert sent["Subject"] == "Report"
        filenames = [part.get_filename() for part in sent.walk() if part.get_filename()]
        assert filenames == ["report.txt"]

    @pytest.mark.asyncio
    async def test_invalid_attachment(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        action = WorkflowAction(
            type="send_email",
            config={
                "to": "ops@example.com",
                "subject": "Report",
                "body": "All green",
                "attachments": [{"filename": "x.bin", "content": "not base64!"}],
            },
        )

        with pytest.raises(InvalidActionInputError):
            await google_handler.execute_action(action, workflow)
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_expired_token(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        provider.add("POST", GMAIL_SEND_URL, status_code=401, json_body={"error": "invalid"})
        action = WorkflowAction(
            type="send_email", config={"to": "a@b.c", "subject": "s", "body": "b"}
        )

        with pytest.raises(AuthError) as exc_info:
            await google_handler.execute_action(action, workflow)
        assert exc_info.value.provider == "google"
        assert exc_info.value.action == "send_email"

    @pytest.mark.asyncio
    async def test_line_break_in_subject_rejected(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        action = WorkflowAction(
            type="send_email",
            config={"to": "a@b.com", "subject": "hi\nBcc: evil@x.com", "body": "x"},
        )

        with pytest.raises(InvalidActionInputError) as exc_info:
            await google_handler.execute_action(action, workflow)

        assert exc_info.value.problems == ["field 'subject' must not contain line breaks"]
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_non_object_body(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        provider.add("POST", GMAIL_SEND_URL, json_body="sent")
        action = WorkflowAction(
            type="send_email", config={"to": "a@b.c", "subject": "s", "body": "b"}
        )

        with pytest.raises(ProviderCallError) as exc_info:
            await google_handler.execute_action(action, workflow)
        assert exc_info.value.action == "send_email"


class TestCreateEvent:
    @pytest.mark.asyncio
    async def test_creates_event(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        provider.add(
            "POST",
            CALENDAR_EVENTS_URL,
            json_body={"id": "ev-1", "htmlLink": "https://calendar.google.com/ev-1"},
        )
        action = WorkflowAction(
            type="create_event",
            config={
                "title": "Standup",
                "start": "2026-10-19T09:00:00Z",
                "end": "2026-10-19T09:15:00Z",
                "attendees": ["dev@example.com"],
            },
        )

        result = await google_handler.execute_action(action, workflow)

        assert result == {"eventId": "ev-1", "htmlLink": "https://calendar.google.com/ev-1"}
        (request,) = provider.calls(CALENDAR_EVENTS_URL)
        assert provider.json_of(request) == {
            "summary": "Standup",
            "start": {"dateTime": "2026-10-19T09:00:00Z"},
            "end": {"dateTime": "2026-10-19T09:15:00Z"},
            "attendees": [{"email": "dev@example.com"}],
        }

    @pytest.mark.asyncio
    async def test_invalid_attendee_rejected(
        self, google_handler, google_integration, store, provider, workflow
    ):
        await store.save(google_integration)
        action = WorkflowAction(
            type="create_event",
            config={
                "title": "Standup",
                "start": "2026-10-19T09:00:00Z",
                "end": "2026-10-19T09:15:00Z",
                "attendees": ["dev@example.com", 42],
            },
        )

        with pytest.raises(InvalidActionInputError) as exc_info:
            await google_handler.execute_action(action, workflow)

        assert exc_info.value.action == "create_event"
        assert provider.requests == []


class TestConnection:
    @pytest.mark.asyncio
    async def test_valid_token(self, google_handler, google_integration, provider):
        provider.add("GET", TOKENINFO_URL, json_body={"expires_in": 3000})
        assert await google_handler.definition.test_connection(google_integration) is True

    @pytest.mark.asyncio
    async def test_network_error_returns_false(
        self, google_handler, google_integration, provider
    ):
        provider.add("GET", TOKENINFO_URL, error=httpx.ConnectError)
        assert await google_handler.definition.test_connection(google_integration) is False

    @pytest.mark.asyncio
    async def test_disconnect_revokes_token(
        self, google_handler, google_integration, provider, store
    ):
        provider.add("POST", REVOKE_URL, json_body={})

        await google_handler.disconnect(google_integration)

        (request,) = provider.calls(REVOKE_URL)
        assert request.content == b"token=ya29-token"
        assert (await store.get("int-google")).config.access_token is None
