"""
Google Sheets API client integration.

This module handles:
1. Extracting the sheet ID from a sharing URL
2. Minting a read-only service-account access token
3. Reading the first worksheet's title and values

Sheets API Reference: https://developers.google.com/sheets/api/reference/rest
"""
import asyncio
import json
import re
from typing import List, Optional
from urllib.parse import quote

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from app.config import get_settings
from app.utils.http import google_error_message
from app.utils.logger import get_logger
from app.utils.errors import InvalidUrlError, MissingCredentialsError, UpstreamError

logger = get_logger(__name__)

# Sheets API base URL
SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"

SHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9-_]+)")


def extract_sheet_id(url: str) -> str:
    """
    Extract the spreadsheet ID from a Google Sheets URL.

    Example:
        https://docs.google.com/spreadsheets/d/ABC123/edit#gid=0 -> "ABC123"

    Raises:
        InvalidUrlError: If the URL has no /d/<id> segment
    """
    match = SHEET_ID_PATTERN.search(url or "")
    if not match:
        raise InvalidUrlError()
    return match.group(1)


def sheet_range(title: str) -> str:
    """
    A1 range covering a whole worksheet.

    The title is always single-quoted so names like "Q1" or "A1:B2" are
    not read as cell references. Embedded quotes are doubled.
    """
    return "'" + title.replace("'", "''") + "'"


def load_service_account_credentials(key_json: Optional[str] = None):
    """
    Build service-account credentials scoped for read-only sheet access.

    Args:
        key_json: Service account JSON blob; defaults to settings

    Raises:
        MissingCredentialsError: If the key is absent or not valid JSON
    """
    settings = get_settings()
    key_json = key_json if key_json is not None else settings.google_service_account_key

    if not key_json or not key_json.strip():
        raise MissingCredentialsError()

    try:
        info = json.loads(key_json)
        return service_account.Credentials.from_service_account_info(
            info, scopes=settings.sheets_scopes
        )
    except (ValueError, KeyError) as e:
        logger.error(f"Service account key is unreadable: {e}")
        raise MissingCredentialsError("Google service account key is invalid")


class SheetsClient:
    """
    Read-only Google Sheets client.

    Usage:
        client = SheetsClient(credentials)
        title = await client.get_first_sheet_title(sheet_id)
        values = await client.get_values(sheet_id, title)
    """

    def __init__(self, credentials, transport: httpx.AsyncBaseTransport = None):
        """
        Args:
            credentials: google.auth credentials able to mint a bearer token
            transport: Optional httpx transport (tests inject a mock)
        """
        self.credentials = credentials
        self.transport = transport
        self.timeout = get_settings().http_timeout_seconds

    async def _get_access_token(self) -> str:
        """Refresh credentials off the event loop when the token is stale."""
        if not self.credentials.valid:
            try:
                await asyncio.to_thread(self.credentials.refresh, Request())
            except GoogleAuthError as e:
                logger.error(f"Service account token refresh failed: {e}")
                raise UpstreamError(str(e))
        return self.credentials.token

    async def _get(self, url: str, params: dict = None) -> dict:
        """
        Make an authenticated GET against the Sheets API.

        Raises:
            UpstreamError: On transport failure or any non-2xx status
        """
        token = await self._get_access_token()
        headers = {"Authorization": f"Bearer {token}"}

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.get(url, headers=headers, params=params)
            except httpx.RequestError as e:
                logger.error(f"Sheets API request failed: {e}")
                raise UpstreamError(str(e) or "Request failed")

        if response.status_code != 200:
            message = google_error_message(response) or f"HTTP {response.status_code}"
            logger.error(f"Sheets API error: {response.status_code} - {message}")
            raise UpstreamError(message)

        return response.json()

    async def get_first_sheet_title(self, sheet_id: str) -> Optional[str]:
        """Title of the first worksheet, or None if metadata lists none."""
        metadata = await self._get(
            f"{SHEETS_API_BASE}/{sheet_id}",
            params={"fields": "sheets.properties.title"},
        )
        sheets = metadata.get("sheets") or []
        if not sheets:
            return None
        return sheets[0].get("properties", {}).get("title") or None

    async def get_values(self, sheet_id: str, sheet_title: str) -> List[List[str]]:
        """All populated values of a worksheet as a (possibly ragged) grid."""
        range_name = sheet_range(sheet_title)
        data = await self._get(f"{SHEETS_API_BASE}/{sheet_id}/values/{quote(range_name, safe='')}")
        return data.get("values") or []

