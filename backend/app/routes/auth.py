"""
Authentication routes for Google OAuth.

OAuth Flow:
1. Frontend calls GET /api/auth/login -> gets OAuth URL
2. Frontend redirects user to OAuth URL
3. User grants Gmail compose + Sheets read permissions
4. Google redirects to GET /api/auth/callback with code
5. Backend exchanges code for tokens, signs the session in
6. Backend redirects to the frontend with a session cookie

Tokens stay server-side; the cookie only carries a session ID.
"""
from urllib.parse import quote

from fastapi import APIRouter, Response, Request, HTTPException
from fastapi.responses import RedirectResponse

from app.config import get_settings
from app.services.auth_service import AuthService
from app.services.session_service import delete_session, get_session
from app.utils.logger import get_logger
from app.utils.errors import AppError

router = APIRouter()
logger = get_logger(__name__)
settings = get_settings()
auth_service = AuthService()


def _cookie_is_secure() -> bool:
    # Localhost over HTTP cannot use secure cookies
    return settings.frontend_url.startswith("https") and "localhost" not in settings.frontend_url


@router.get("/login")
async def login():
    """
    Get Google OAuth login URL.

    Returns:
        { auth_url: "https://accounts.google.com/..." }
    """
    return {"auth_url": auth_service.get_oauth_url()}


@router.get("/callback")
async def oauth_callback(code: str = None, error: str = None):
    """
    Handle Google OAuth callback.

    On success the session cookie is set and the user lands on the
    frontend home page; on failure they land on it with ?error=.
    """
    if error:
        logger.warning(f"OAuth error: {error}")
        return RedirectResponse(url=f"{settings.frontend_url}/?error=oauth_denied")

    if not code:
        logger.warning("OAuth callback missing code")
        return RedirectResponse(url=f"{settings.frontend_url}/?error=missing_code")

    try:
        session_token = await auth_service.handle_oauth_callback(code)
    except AppError as e:
        logger.error(f"OAuth callback failed: {e.message}")
        return RedirectResponse(
            url=f"{settings.frontend_url}/?error=auth_failed&detail={quote(e.message)}"
        )

    response = RedirectResponse(url=f"{settings.frontend_url}/", status_code=302)
    response.set_cookie(
        key="session",
        value=session_token,
        httponly=True,
        secure=_cookie_is_secure(),
        samesite="lax",
        max_age=settings.session_expire_hours * 3600,
        path="/",
    )
    return response


@router.post("/logout")
async def logout(request: Request, response: Response):
    """
    Sign out: drop the server-side session and clear the cookie.

    Returns:
        { success: true, message: "Successfully signed out" }
    """
    session_cookie = request.cookies.get("session")

    if session_cookie:
        delete_session(session_cookie)

    response.delete_cookie(key="session", path="/")

    return {"success": True, "message": "Successfully signed out"}


@router.get("/session")
async def get_session_info(request: Request):
    """
    Check current session status.

    Returns:
        { authenticated: true/false, email?, name?, provider? }
    """
    session_cookie = request.cookies.get("session")
    context = get_session(session_cookie) if session_cookie else None
    auth = context.current_session() if context else None

    if auth is None:
        return {"authenticated": False}

    return {
        "authenticated": True,
        "email": auth.email,
        "name": auth.name,
        "provider": auth.provider,
    }


@router.get("/refresh")
async def refresh_session(request: Request):
    """
    Refresh the Google access token if needed.

    Returns:
        { refreshed: true/false, valid: true }
    """
    session_cookie = request.cookies.get("session")

    if not session_cookie:
        raise HTTPException(status_code=401, detail="No session found")

    try:
        refreshed = await auth_service.refresh_session(session_cookie)
    except AppError as e:
        logger.error(f"Session refresh failed: {e.message}")
        raise HTTPException(status_code=401, detail="Session invalid or expired")

    return {"refreshed": refreshed is not None, "valid": True}
