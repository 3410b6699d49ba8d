"""
Authentication service.

Drives sign-in for the session context:
1. Consent URL -> google_auth
2. Callback -> exchange code -> fetch profile -> SessionContext.sign_in
3. Refresh of expired access tokens
"""
from datetime import datetime, timedelta
from typing import Optional

from app.integrations.google_auth import (
    get_oauth_url as _get_oauth_url,
    exchange_code_for_tokens,
    get_user_info,
    refresh_access_token,
)
from app.models.session import AuthSession
from app.services.session_service import (
    create_session,
    get_session,
    update_tokens,
    is_token_expired,
)
from app.utils.logger import get_logger
from app.utils.errors import AuthError, SessionExpiredError

logger = get_logger(__name__)

PROVIDER = "google"


class AuthService:
    """
    Authentication service handling the Google OAuth flow.

    Usage:
        auth_service = AuthService()
        url = auth_service.get_oauth_url()
        token = await auth_service.handle_oauth_callback(code)
    """

    def get_oauth_url(self) -> str:
        """Consent URL the frontend redirects the user to."""
        return _get_oauth_url()

    async def handle_oauth_callback(self, code: str) -> str:
        """
        Complete sign-in after the user grants permission.

        Args:
            code: Authorization code from Google callback

        Returns:
            Session token (JWT) to store in cookie

        Raises:
            AuthError: If any step fails
        """
        tokens = await exchange_code_for_tokens(code)
        user_info = await get_user_info(tokens["access_token"])

        auth = AuthSession(
            email=user_info["email"],
            access_token=tokens["access_token"],
            provider=PROVIDER,
            user_id=user_info["id"],
            name=user_info["name"],
            picture=user_info.get("picture"),
            refresh_token=tokens["refresh_token"],
            token_expiry=datetime.utcnow() + timedelta(seconds=tokens["expires_in"]),
        )

        return create_session(auth)

    async def refresh_session(self, session_token: str) -> Optional[str]:
        """
        Refresh the access token if it is expired.

        Returns:
            Session token if refreshed, None if not needed

        Raises:
            AuthError: If session invalid or refresh fails
        """
        context = get_session(session_token)

        if not context or context.current_session() is None:
            raise SessionExpiredError()

        auth = context.current_session()

        if not is_token_expired(auth):
            return None

        if not auth.refresh_token:
            raise AuthError("Session cannot be refreshed. Please sign in again.")

        new_access_token, expires_in = await refresh_access_token(auth.refresh_token)
        update_tokens(session_token, new_access_token, expires_in)
        logger.info(f"Refreshed session for: {auth.email}")

        # JWT is unchanged, only the stored token
        return session_token
