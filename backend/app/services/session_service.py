"""
Session management service.

This module handles:
1. SessionContext - per-user owner of auth state, the loaded sheet and
   the template, with subscribe/unsubscribe change notification
2. Creating and storing sessions behind a JWT cookie
3. Retrieving the session for authenticated requests
4. Refreshing Google access tokens when needed

Security: Sessions are stored in-memory only; tokens are never written
to durable storage.
"""
import asyncio
import jwt
from datetime import datetime, timedelta
from typing import Callable, Optional
from fastapi import Request, HTTPException

from app.config import get_settings
from app.models.session import AuthSession
from app.models.sheet import SheetTable
from app.models.template import EmailTemplate
from app.utils.logger import get_logger
from app.utils.errors import AuthRequiredError, SessionExpiredError

logger = get_logger(__name__)
settings = get_settings()

SessionListener = Callable[[Optional[AuthSession]], None]


class SessionContext:
    """
    Everything one signed-in user owns for the lifetime of their session.

    Usage:
        context = SessionContext()
        unsubscribe = context.on_session_change(listener)
        context.sign_in(auth_session)
        token = context.require_access_token()
        context.sign_out()
    """

    def __init__(self, session_id: str = None, auth: AuthSession = None):
        self.session_id = session_id
        self.session_expiry = datetime.utcnow() + timedelta(hours=settings.session_expire_hours)
        self.created_at = datetime.utcnow()

        self.sheet: Optional[SheetTable] = None
        self.template = EmailTemplate()

        # Batch runner bookkeeping
        self.batch_lock = asyncio.Lock()
        self.batch_state = None
        self.batch_error: Optional[str] = None

        self._auth: Optional[AuthSession] = None
        self._listeners: list[SessionListener] = []
        self._load_ticket = 0

        if auth:
            self.sign_in(auth)

    # Auth state

    def current_session(self) -> Optional[AuthSession]:
        return self._auth

    def sign_in(self, auth: AuthSession) -> None:
        """Install a new auth session and notify listeners."""
        self._auth = auth
        logger.info(f"Signed in: {auth.email} via {auth.provider}")
        self._notify()

    def sign_out(self) -> None:
        """Drop auth state and everything loaded under it."""
        email = self._auth.email if self._auth else "unknown"
        self._auth = None
        self.sheet = None
        self._load_ticket += 1
        self.batch_state = None
        self.batch_error = None
        logger.info(f"Signed out: {email}")
        self._notify()

    def on_session_change(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener for sign-in / sign-out.

        The listener is called immediately if a session already exists.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)
        if self._auth is not None:
            listener(self._auth)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._auth)

    def update_access_token(self, access_token: str, expires_in: int) -> None:
        if self._auth is None:
            return
        self._auth = self._auth.model_copy(update={
            "access_token": access_token,
            "token_expiry": datetime.utcnow() + timedelta(seconds=expires_in),
        })
        self._notify()

    def require_access_token(self) -> str:
        """
        Access token for a privileged call.

        Raises:
            AuthRequiredError: No session, empty token, or token expired
        """
        auth = self._auth
        if auth is None or not auth.access_token:
            raise AuthRequiredError()
        if auth.token_expiry is not None and datetime.utcnow() >= auth.token_expiry:
            raise AuthRequiredError()
        return auth.access_token

    # Loaded sheet

    def begin_sheet_load(self) -> int:
        """Start a load: discard the current table and take a new ticket."""
        self._load_ticket += 1
        self.sheet = None
        return self._load_ticket

    def finish_sheet_load(self, ticket: int, table: SheetTable) -> bool:
        """
        Install a loaded table unless a newer load has started since.

        Returns:
            True if installed, False if the result was superseded
        """
        if ticket != self._load_ticket:
            logger.info(f"Discarding superseded sheet load (ticket {ticket}, current {self._load_ticket})")
            return False
        self.sheet = table
        return True

    def clear_sheet(self) -> None:
        self.sheet = None


# In-memory session store
# Key: session_id (from JWT), Value: SessionContext
_sessions: dict[str, SessionContext] = {}


def create_session(auth: AuthSession) -> str:
    """
    Create a new user session and return a JWT session token.

    The JWT contains only the session ID. Actual session data
    (tokens, user info) is stored server-side.

    Args:
        auth: Signed-in user and Google tokens

    Returns:
        JWT session token (to be stored in cookie)
    """
    session_id = f"{auth.user_id or auth.email}_{datetime.utcnow().timestamp()}"
    context = SessionContext(session_id=session_id, auth=auth)
    _sessions[session_id] = context

    jwt_payload = {
        "session_id": session_id,
        "exp": context.session_expiry,
        "iat": datetime.utcnow(),
    }

    token = jwt.encode(jwt_payload, settings.session_secret, algorithm="HS256")
    logger.info(f"Created session for user: {auth.email}")

    return token


def get_session_id(session_token: str, verify_exp: bool = True) -> Optional[str]:
    """Extract session ID from a JWT; None when invalid."""
    try:
        payload = jwt.decode(
            session_token,
            settings.session_secret,
            algorithms=["HS256"],
            options={"verify_exp": verify_exp},
        )
        return payload.get("session_id")
    except jwt.ExpiredSignatureError:
        logger.warning("JWT expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid JWT: {e}")
        return None


def get_session(session_token: str) -> Optional[SessionContext]:
    """
    Retrieve the session context for a JWT session token.

    Returns None if the JWT is invalid, the session doesn't exist,
    or the session has expired.
    """
    session_id = get_session_id(session_token)
    if not session_id or session_id not in _sessions:
        return None

    context = _sessions[session_id]

    if datetime.utcnow() > context.session_expiry:
        logger.info("Session expired")
        delete_session(session_token)
        return None

    return context


def delete_session(session_token: str) -> bool:
    """
    Delete a session (logout). Listeners see the sign-out.

    Returns:
        True if deleted, False if not found
    """
    session_id = get_session_id(session_token, verify_exp=False)
    if session_id and session_id in _sessions:
        context = _sessions.pop(session_id)
        context.sign_out()
        return True
    return False


def is_token_expired(auth: AuthSession) -> bool:
    """
    Check if the Google access token is expired or about to expire.

    Tokens within 5 minutes of expiry count as expired so they are
    refreshed before a batch starts.
    """
    if auth.token_expiry is None:
        return False
    buffer = timedelta(minutes=5)
    return datetime.utcnow() + buffer > auth.token_expiry


def update_tokens(session_token: str, access_token: str, expires_in: int) -> bool:
    """
    Update session with refreshed access token.

    Returns:
        True if updated, False if session not found
    """
    context = get_session(session_token)
    if context is None:
        return False
    context.update_access_token(access_token, expires_in)
    return True


# Dependency for protected routes
async def get_current_session(request: Request) -> SessionContext:
    """
    FastAPI dependency to get current authenticated session.

    Use this as a dependency in protected routes:

        @router.post("/drafts")
        async def create_drafts(session: SessionContext = Depends(get_current_session)):
            pass

    Raises:
        HTTPException 401: If not authenticated or session expired
    """
    session_cookie = request.cookies.get("session")

    if not session_cookie:
        raise HTTPException(
            status_code=401,
            detail={"error": "Authentication required", "code": "AUTH_REQUIRED"}
        )

    context = get_session(session_cookie)

    if not context or context.current_session() is None:
        raise HTTPException(status_code=401, detail=SessionExpiredError().to_dict())

    auth = context.current_session()

    # Check if access token needs refresh
    if is_token_expired(auth):
        # Import here to avoid circular dependency
        from app.integrations.google_auth import refresh_access_token
        from app.utils.errors import PermissionRevokedError

        if not auth.refresh_token:
            raise HTTPException(
                status_code=401,
                detail={"error": "Authentication required. Please sign in again.", "code": "AUTH_REQUIRED"}
            )

        try:
            new_token, expires_in = await refresh_access_token(auth.refresh_token)
            context.update_access_token(new_token, expires_in)
            logger.info(f"Refreshed token for: {auth.email}")
        except PermissionRevokedError as e:
            delete_session(session_cookie)
            raise HTTPException(status_code=401, detail=e.to_dict())
        except Exception as e:
            logger.error(f"Token refresh failed: {e}")
            raise HTTPException(
                status_code=401,
                detail={"error": "Failed to refresh session. Please sign in again.", "code": "TOKEN_REFRESH_FAILED"}
            )

    return context


async def get_optional_session(request: Request) -> Optional[SessionContext]:
    """Session context when a valid cookie is present, else None."""
    session_cookie = request.cookies.get("session")
    if not session_cookie:
        return None
    return get_session(session_cookie)
