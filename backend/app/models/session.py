"""
Session-related Pydantic models.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AuthSession(BaseModel):
    """Signed-in user and the Google token issued for them."""
    email: str
    access_token: str
    provider: str = "google"
    user_id: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expiry: Optional[datetime] = None
