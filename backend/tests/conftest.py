"""
Pytest fixtures for Gmail Drafter backend tests.
"""
import pytest
from datetime import datetime, timedelta

from app.models.session import AuthSession
from app.models.sheet import SheetTable
from app.models.template import EmailTemplate
from app.services import session_service
from app.services.session_service import SessionContext


@pytest.fixture(autouse=True)
def clear_session_store():
    """Each test starts with an empty in-memory session store."""
    session_service._sessions.clear()
    yield
    session_service._sessions.clear()


@pytest.fixture
def auth_session():
    """A signed-in Google user with a fresh access token."""
    return AuthSession(
        email="test@example.com",
        access_token="mock-access-token",
        provider="google",
        user_id="user-123",
        name="Test User",
        picture="https://example.com/avatar.jpg",
        refresh_token="mock-refresh-token",
        token_expiry=datetime.utcnow() + timedelta(hours=1),
    )


@pytest.fixture
def sheet_grid():
    """Raw values as returned by the Sheets API (row 3 is ragged)."""
    return [
        ["name", "email", "company"],
        ["Ann", "ann@x.com", "Acme"],
        ["Bo", "", "Globex"],
        ["Cy", "cy@x.com"],
    ]


@pytest.fixture
def sheet_table():
    return SheetTable(
        headers=["name", "email", "company"],
        rows=[
            {"name": "Ann", "email": "ann@x.com", "company": "Acme"},
            {"name": "Bo", "email": "", "company": "Globex"},
            {"name": "Cy", "email": "cy@x.com", "company": ""},
        ],
    )


@pytest.fixture
def email_template():
    return EmailTemplate(subject="Hello {name}", body="Hi {name},\n\nGreetings to everyone at {company}.")


@pytest.fixture
def session_context(auth_session, sheet_table, email_template):
    """Signed-in session with a sheet loaded and a template written."""
    context = SessionContext(session_id="test-session", auth=auth_session)
    context.sheet = sheet_table
    context.template = email_template
    return context


class FakeServiceAccountCredentials:
    """Stands in for google.oauth2 service account credentials."""

    def __init__(self, token="sa-token", valid=True):
        self.token = token
        self.valid = valid
        self.refresh_calls = 0

    def refresh(self, request):
        self.refresh_calls += 1
        self.valid = True


@pytest.fixture
def sa_credentials():
    return FakeServiceAccountCredentials()
