"""
Custom error classes for the application.

Every error carries a short message meant to be shown to the user as-is.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", status_code: int = 500):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for response."""
        return {
            "error": self.message,
            "code": self.code,
        }


# Sheet path

class InvalidUrlError(AppError):
    """Sheet URL has no /d/<id> segment."""

    def __init__(self, message: str = "Invalid Google Sheet URL"):
        super().__init__(message, "INVALID_URL", status_code=400)


class MissingCredentialsError(AppError):
    """Service account key is absent or unreadable."""

    def __init__(self, message: str = "Google service account key is not configured"):
        super().__init__(message, "MISSING_CREDENTIALS", status_code=500)


class EmptySheetError(AppError):
    """Worksheet has no rows at all."""

    def __init__(self, message: str = "No data found in the sheet"):
        super().__init__(message, "EMPTY_SHEET", status_code=404)


class InvalidHeaderError(AppError):
    """Header row has an empty or duplicated column name."""

    def __init__(
        self,
        message: str = (
            "Sheet headers cannot be empty. "
            "Please ensure your first row contains valid column names."
        ),
    ):
        super().__init__(message, "INVALID_HEADERS", status_code=400)


class UpstreamError(AppError):
    """Transport or auth failure talking to Google Sheets."""

    def __init__(self, detail: str = "Unknown error"):
        super().__init__(
            f"Failed to load Google Sheet data: {detail}",
            "UPSTREAM_ERROR",
            status_code=500,
        )


# Draft path

class AuthError(AppError):
    """Authentication related errors."""

    def __init__(self, message: str, code: str = "AUTH_ERROR"):
        super().__init__(message, code, status_code=401)


class AuthRequiredError(AuthError):
    """No live access token for a privileged operation."""

    def __init__(self, message: str = "Authentication required. Please sign in again."):
        super().__init__(message, "AUTH_REQUIRED")


class SessionExpiredError(AuthError):
    """Session has expired."""

    def __init__(self):
        super().__init__(
            "Your session has expired. Please sign in again.",
            "SESSION_EXPIRED"
        )


class PermissionRevokedError(AuthError):
    """Google permissions were revoked."""

    def __init__(self):
        super().__init__(
            "Google access was revoked. Please sign in and grant permissions again.",
            "PERMISSION_REVOKED"
        )


class DraftCreationError(AppError):
    """Gmail refused or failed to create a draft."""

    def __init__(self, message: str = "Failed to create email draft"):
        super().__init__(message, "DRAFT_CREATION_FAILED", status_code=502)


class ValidationError(AppError):
    """A batch or request precondition is not met."""

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR", status_code=400)
