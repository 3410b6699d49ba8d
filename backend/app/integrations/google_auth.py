"""
Google OAuth client integration.

This module handles:
1. Building the consent URL for Gmail compose + Sheets read scopes
2. Exchanging authorization codes for tokens
3. Refreshing expired access tokens
4. Fetching the signed-in user's profile
"""
import httpx
from typing import Tuple
from urllib.parse import urlencode

from app.config import get_settings
from app.utils.logger import get_logger
from app.utils.errors import AuthError, PermissionRevokedError

logger = get_logger(__name__)
settings = get_settings()

# Google OAuth endpoints
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


def get_oauth_url() -> str:
    """
    Generate Google OAuth authorization URL.

    Offline access is requested so the session can refresh the access
    token without sending the user back through consent.

    Returns:
        OAuth authorization URL string
    """
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": " ".join(settings.google_scopes),
        "access_type": "offline",
        "prompt": "consent",
        "include_granted_scopes": "true",
    }

    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def _post_token(data: dict) -> httpx.Response:
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        return await client.post(GOOGLE_TOKEN_URL, data=data)


async def exchange_code_for_tokens(code: str) -> dict:
    """
    Exchange authorization code for access and refresh tokens.

    Args:
        code: Authorization code from Google callback

    Returns:
        Dict with access_token, refresh_token, expires_in

    Raises:
        AuthError: If token exchange fails
    """
    data = {
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": settings.google_redirect_uri,
    }

    try:
        response = await _post_token(data)
    except httpx.RequestError as e:
        logger.error(f"Token exchange request failed: {e}")
        raise AuthError("Failed to connect to Google for authentication")

    if response.status_code != 200:
        error_data = response.json() if response.content else {}
        logger.error(f"Token exchange failed: {error_data.get('error', response.status_code)}")
        raise AuthError(f"Failed to exchange code: {error_data.get('error_description', 'Unknown error')}")

    tokens = response.json()
    logger.info("Exchanged code for tokens")

    return {
        "access_token": tokens["access_token"],
        "refresh_token": tokens.get("refresh_token"),  # absent on re-auth
        "expires_in": tokens.get("expires_in", 3600),
    }


async def refresh_access_token(refresh_token: str) -> Tuple[str, int]:
    """
    Refresh an expired access token.

    Returns:
        Tuple of (new_access_token, expires_in_seconds)

    Raises:
        PermissionRevokedError: If refresh token is invalid/revoked
        AuthError: For other refresh failures
    """
    data = {
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "refresh_token": refresh_token,
        "grant_type": "refresh_token",
    }

    try:
        response = await _post_token(data)
    except httpx.RequestError as e:
        logger.error(f"Token refresh request failed: {e}")
        raise AuthError("Failed to connect to Google for token refresh")

    if response.status_code != 200:
        error_data = response.json() if response.content else {}

        if error_data.get("error") == "invalid_grant":
            logger.warning("Refresh token revoked or expired")
            raise PermissionRevokedError()

        logger.error(f"Token refresh failed: {error_data}")
        raise AuthError("Failed to refresh access token")

    tokens = response.json()
    logger.info("Refreshed access token")

    return tokens["access_token"], tokens.get("expires_in", 3600)


async def get_user_info(access_token: str) -> dict:
    """
    Fetch user profile information from Google.

    Returns:
        Dict with id, email, name, picture

    Raises:
        AuthError: If request fails or token is invalid
    """
    headers = {"Authorization": f"Bearer {access_token}"}

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        try:
            response = await client.get(GOOGLE_USERINFO_URL, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"User info request failed: {e}")
            raise AuthError("Failed to connect to Google for user information")

    if response.status_code == 401:
        logger.warning("Access token invalid when fetching user info")
        raise AuthError("Access token is invalid")

    if response.status_code != 200:
        logger.error(f"Failed to get user info: {response.status_code}")
        raise AuthError("Failed to fetch user information")

    user_data = response.json()

    return {
        "id": user_data["id"],
        "email": user_data["email"],
        "name": user_data.get("name", user_data["email"]),
        "picture": user_data.get("picture"),
    }
