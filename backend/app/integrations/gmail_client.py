"""
Gmail API client integration.

This module handles direct communication with Gmail API:
1. Compose an RFC 2822 plain-text message
2. Create a draft from it in the signed-in user's mailbox
3. Translate Gmail error responses into user-facing errors

Gmail API Reference: https://developers.google.com/gmail/api/reference/rest
"""
import base64
from email.mime.text import MIMEText

import httpx

from app.config import get_settings
from app.models.draft import DraftRequest
from app.utils.http import google_error_message
from app.utils.logger import get_logger
from app.utils.errors import AuthRequiredError, DraftCreationError

logger = get_logger(__name__)

# Gmail API base URL
GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1/users/me"


def build_raw_message(draft: DraftRequest) -> str:
    """
    Encode a draft as base64url RFC 2822.

    Headers: To, Subject, Content-Type text/plain; charset=utf-8,
    MIME-Version 1.0.
    """
    message = MIMEText(draft.body, "plain", "utf-8")
    message["To"] = draft.to
    message["Subject"] = draft.subject
    return base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")


class GmailClient:
    """
    Gmail API client for draft creation.

    Usage:
        client = GmailClient(access_token)
        draft_id = await client.create_draft(DraftRequest(to=..., subject=..., body=...))
    """

    def __init__(self, access_token: str, transport: httpx.AsyncBaseTransport = None):
        """
        Initialize Gmail client with access token.

        Args:
            access_token: Google OAuth access token with gmail.compose scope
            transport: Optional httpx transport (tests inject a mock)
        """
        if not access_token:
            raise AuthRequiredError()
        self.access_token = access_token
        self.transport = transport
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        json_data: dict = None,
    ) -> dict:
        """
        Make an authenticated request to Gmail API.

        No retries: any failure is surfaced immediately.

        Raises:
            AuthRequiredError: 401, token expired or revoked
            DraftCreationError: Any other non-2xx status or transport failure
        """
        url = f"{GMAIL_API_BASE}{endpoint}"

        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=get_settings().http_timeout_seconds,
        ) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self.headers,
                    json=json_data,
                )
            except httpx.RequestError as e:
                logger.error(f"Gmail API request failed: {e}")
                raise DraftCreationError("Couldn't reach Gmail. Please try again.")

        if 200 <= response.status_code < 300:
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()

        message = google_error_message(response)

        if response.status_code == 401:
            logger.warning("Gmail API: Token expired or invalid")
            raise AuthRequiredError()

        logger.error(f"Gmail API error: {response.status_code} - {message}")
        raise DraftCreationError(message or "Failed to create email draft")

    async def create_draft(self, draft: DraftRequest) -> str:
        """
        Create a draft.

        Args:
            draft: Rendered recipient, subject and body

        Returns:
            Created draft ID
        """
        response = await self._make_request(
            "POST",
            "/drafts",
            json_data={"message": {"raw": build_raw_message(draft)}},
        )

        draft_id = response.get("id", "unknown")
        logger.debug(f"Draft {draft_id} created for {draft.to}")
        return draft_id

