"""
User profile endpoint.
"""
from fastapi import APIRouter, Depends

from app.services.session_service import SessionContext, get_current_session
from app.models.user import UserResponse

router = APIRouter()


@router.get("/user", response_model=UserResponse)
async def get_user(session: SessionContext = Depends(get_current_session)):
    """
    Get current user's profile information.
    """
    auth = session.current_session()
    return UserResponse(
        email=auth.email,
        name=auth.name or auth.email,
        picture=auth.picture,
        provider=auth.provider,
    )
