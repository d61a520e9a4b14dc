"""
Pytest configuration and fixtures for ProcessHub tests.

Environment variables are set before any ``processhub`` import because the
configuration is read when the modules load. API tests run against the real
application with an in-memory SQLite database; Redis and SMTP are replaced
through dependency overrides.
"""

import os
import tempfile

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SECURITY_SECRET_KEY", "k9Jm2xQv7LpR4sTn8WcZ1yBf5HdG3aEu6")
os.environ.setdefault("SECURITY_BCRYPT_ROUNDS", "4")
os.environ.setdefault("API_AUTH_RATE_LIMIT_REQUESTS", "100000")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("REDIS_SOCKET_CONNECT_TIMEOUT", "0.2")
os.environ.setdefault("LOG_JSON_OUTPUT", "false")
os.environ.setdefault("API_UPLOAD_DIR", tempfile.mkdtemp(prefix="processhub-uploads-"))

from typing import Any, Dict, List, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from processhub.api.app import app  # noqa: E402
from processhub.core.auth.google import GoogleOAuthError  # noqa: E402
from processhub.core.dependencies import (  # noqa: E402
    get_email_sender,
    get_google_client,
    get_otp_store,
)
from processhub.core.email import EmailSender  # noqa: E402


class FakeOTPStore:
    """In-memory replacement for the Redis backed code store."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self.codes: Dict[str, str] = {}

    async def save(self, email: str, code: str) -> None:
        self.codes[email.strip().lower()] = code

    async def verify(self, email: str, code: str) -> bool:
        key = email.strip().lower()
        if self.codes.get(key) != str(code).strip():
            return False
        del self.codes[key]
        return True

    async def discard(self, email: str) -> None:
        self.codes.pop(email.strip().lower(), None)


class RecordingEmailSender(EmailSender):
    """Email sender that keeps messages instead of delivering them."""

    def __init__(self) -> None:
        """Initialize with an empty outbox."""
        super().__init__()
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> bool:
        if self.fail:
            return False
        self.sent.append((to, subject, html))
        return True

    def subjects_for(self, to: str) -> List[str]:
        """Subjects of the messages sent to one address."""
        return [subject for recipient, subject, _ in self.sent if recipient == to]


class FakeGoogleClient:
    """Stand-in for Google's OAuth endpoints.

    ``profile`` is returned for any code; ``error`` makes the exchange fail
    with that reason.
    """

    def __init__(self) -> None:
        """Initialize with a default profile."""
        self.profile: Dict[str, Any] = {
            "id": "google-1",
            "email": "gwen@example.com",
            "name": "Gwen",
            "picture": "https://lh3.example/gwen.png",
        }
        self.error: Optional[str] = None
        self.codes: List[str] = []

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.example/auth?state={state}"

    async def exchange_code(self, code: str) -> str:
        self.codes.append(code)
        if self.error:
            raise GoogleOAuthError(self.error)
        return "google-access-token"

    async def fetch_profile(self, access_token: str) -> Dict[str, Any]:
        return dict(self.profile)


@pytest.fixture
def otp_store() -> FakeOTPStore:
    """Create an in-memory OTP store."""
    return FakeOTPStore()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    """Create an email sender that records messages."""
    return RecordingEmailSender()


@pytest.fixture
def google_client() -> FakeGoogleClient:
    """Create a fake Google OAuth client."""
    return FakeGoogleClient()


@pytest.fixture
def client(otp_store, email_sender, google_client):
    """Create a test client with a fresh database."""
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_google_client] = lambda: google_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client, otp_store):
    """Sign up a user through the OTP flow and return the new user.

    The client keeps the session cookie of the last registered user.
    """

    def _register(
        email: str,
        password: Optional[str] = "Passw0rd!",
        role: str = "user",
        name: Optional[str] = None,
    ) -> Dict:
        response = client.post("/api/auth/send-otp", json={"email": email})
        assert response.status_code == 200, response.text
        code = otp_store.codes[email.strip().lower()]
        response = client.post(
            "/api/auth/verify-otp",
            json={
                "email": email,
                "otp": code,
                "name": name or email.split("@")[0],
                "password": password,
                "role": role,
            },
        )
        assert response.status_code == 200, response.text
        return response.json()["user"]

    return _register


@pytest.fixture
def login(client):
    """Sign in an existing user so the client carries their cookie."""

    def _login(email: str, password: str = "Passw0rd!") -> Dict:
        client.cookies.clear()
        response = client.post(
            "/api/auth/signin", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return response.json()["user"]

    return _login


# Test markers
def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        directory = item.fspath.dirpath().basename
        if directory == "api":
            item.add_marker(pytest.mark.api)
        elif directory == "unit":
            item.add_marker(pytest.mark.unit)
