"""
Application configuration loaded from environment variables.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:8000/api/auth/callback"

    # Service account JSON blob used for reading sheets
    google_service_account_key: str = ""

    # Frontend URL for CORS and redirects
    frontend_url: str = "http://localhost:3000"

    # Public base URL of this API
    api_base_url: str = "http://localhost:8000"

    # Session
    session_secret: str = "dev-secret-change-in-production"
    session_expire_hours: int = 24

    # Worksheet title used when spreadsheet metadata lists no sheets
    default_sheet_name: str = "Sheet1"

    # Outbound HTTP timeout
    http_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    # Debug mode
    debug: bool = True

    # Google OAuth scopes
    @property
    def google_scopes(self) -> list[str]:
        return [
            "openid",
            "email",
            "profile",
            "https://www.googleapis.com/auth/gmail.compose",
            "https://www.googleapis.com/auth/spreadsheets.readonly",
        ]

    @property
    def sheets_scopes(self) -> list[str]:
        return ["https://www.googleapis.com/auth/spreadsheets.readonly"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
