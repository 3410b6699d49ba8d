"""
Unit tests for Gmail Client.

Tests RFC 2822 encoding and draft creation with mocked HTTP.
"""
import base64
import email
import json

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from app.integrations.gmail_client import GmailClient, build_raw_message
from app.models.draft import DraftRequest
from app.utils.errors import AuthRequiredError, DraftCreationError


def decode_raw(raw: str):
    return email.message_from_bytes(base64.urlsafe_b64decode(raw))


@pytest.fixture
def draft():
    return DraftRequest(to="ann@x.com", subject="Hello Ann", body="Hi Ann,\nThanks for stopping by.")


class TestRawMessage:
    """RFC 2822 message encoding."""

    def test_headers(self, draft):
        message = decode_raw(build_raw_message(draft))

        assert message["To"] == "ann@x.com"
        assert message["Subject"] == "Hello Ann"
        assert message["MIME-Version"] == "1.0"
        assert message.get_content_type() == "text/plain"
        assert message.get_content_charset() == "utf-8"

    def test_body_round_trips(self, draft):
        message = decode_raw(build_raw_message(draft))
        assert message.get_payload(decode=True).decode("utf-8") == draft.body

    def test_non_ascii_body(self):
        body = "Grüße aus München, José ✉"
        message = decode_raw(build_raw_message(DraftRequest(to="a@b.c", subject="Hi", body=body)))
        assert message.get_payload(decode=True).decode("utf-8") == body

    def test_raw_is_url_safe(self, draft):
        raw = build_raw_message(draft)
        assert "+" not in raw
        assert "/" not in raw


class TestCreateDraft:
    """Draft creation against a mock Gmail endpoint."""

    @pytest.mark.asyncio
    async def test_posts_to_drafts_resource(self, draft):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "r-123", "message": {"id": "m-1"}})

        client = GmailClient("mock-access-token", transport=httpx.MockTransport(handler))
        draft_id = await client.create_draft(draft)

        assert draft_id == "r-123"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://gmail.googleapis.com/gmail/v1/users/me/drafts"
        assert request.headers["Authorization"] == "Bearer mock-access-token"

        payload = json.loads(request.content)
        message = decode_raw(payload["message"]["raw"])
        assert message["To"] == "ann@x.com"
        assert message["Subject"] == "Hello Ann"

    @pytest.mark.asyncio
    async def test_single_request_per_draft(self, draft):
        client = GmailClient("mock-access-token")

        with patch.object(client, "_make_request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = {"id": "r-1"}
            await client.create_draft(draft)

            mock_request.assert_called_once()
            assert mock_request.call_args[0][:2] == ("POST", "/drafts")


class TestGmailClientErrorHandling:
    """Gmail error translation."""

    def test_missing_token(self):
        with pytest.raises(AuthRequiredError):
            GmailClient("")

    @pytest.mark.asyncio
    async def test_upstream_message_surfaced(self, draft):
        transport = httpx.MockTransport(lambda request: httpx.Response(
            400, json={"error": {"code": 400, "message": "Invalid To header"}}
        ))
        client = GmailClient("mock-access-token", transport=transport)

        with pytest.raises(DraftCreationError) as exc:
            await client.create_draft(draft)
        assert exc.value.message == "Invalid To header"

    @pytest.mark.asyncio
    async def test_default_message_without_body(self, draft):
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        client = GmailClient("mock-access-token", transport=transport)

        with pytest.raises(DraftCreationError) as exc:
            await client.create_draft(draft)
        assert exc.value.message == "Failed to create email draft"

    @pytest.mark.asyncio
    async def test_401_requires_sign_in(self, draft):
        transport = httpx.MockTransport(lambda request: httpx.Response(
            401, json={"error": {"code": 401, "message": "Invalid Credentials"}}
        ))
        client = GmailClient("expired-token", transport=transport)

        with pytest.raises(AuthRequiredError):
            await client.create_draft(draft)

    @pytest.mark.asyncio
    async def test_rate_limit_not_retried(self, draft):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(429, json={"error": {"message": "Rate Limit Exceeded"}})

        client = GmailClient("mock-access-token", transport=httpx.MockTransport(handler))

        with pytest.raises(DraftCreationError) as exc:
            await client.create_draft(draft)
        assert exc.value.message == "Rate Limit Exceeded"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connection_failure(self, draft):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = GmailClient("mock-access-token", transport=httpx.MockTransport(handler))

        with pytest.raises(DraftCreationError):
            await client.create_draft(draft)
