"""
Helpers for Google API HTTP responses.
"""
from typing import Optional

import httpx


def google_error_message(response: httpx.Response) -> Optional[str]:
    """
    Pull error.message out of a Google API error body.

    Returns None when the body is not JSON or carries no message.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or None
    return None
