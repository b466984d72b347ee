"""
Pytest configuration and fixtures for the QR Menu tests.

Each test gets its own SQLite database file and a notification service
that records dispatched codes instead of sending them.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncIterator, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.core.config import Settings
from qrmenu.database import Database
from qrmenu.main import create_app
from qrmenu.models import User
from qrmenu.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

TEST_SECRET = "test-secret-do-not-use"


class RecordingNotificationService(BaseNotificationService):
    """Keeps every dispatched OTP so tests can complete a login."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    @property
    def provider_name(self) -> str:
        return "recording"

    async def send_email(self, to_email, subject, body_html, body_text=None) -> NotificationResult:
        if self.fail:
            return NotificationResult(success=False, error_message="delivery failed", provider="recording")
        return NotificationResult(success=True, provider="recording")

    async def send_otp(self, to_email: str, otp_code: str) -> NotificationResult:
        if self.fail:
            return NotificationResult(success=False, error_message="delivery failed", provider="recording")
        self.sent.append((to_email, otp_code))
        return NotificationResult(success=True, provider="recording")

    async def health_check(self) -> bool:
        return True

    def last_code(self, email: str) -> Optional[str]:
        for to_email, code in reversed(self.sent):
            if to_email == email:
                return code
        return None


class FakeClock:
    """Controllable replacement for utc_now."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings_factory(tmp_path: Path):
    """Build Settings on a temporary database with overrides applied."""
    def factory(**overrides) -> Settings:
        values = {
            "env_mode": "development",
            "jwt_secret": TEST_SECRET,
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
            "sendgrid_api_key": None,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return factory


@pytest.fixture
def test_settings(settings_factory) -> Settings:
    return settings_factory()


@pytest.fixture
def notifier() -> RecordingNotificationService:
    return RecordingNotificationService()


@pytest.fixture
async def database(test_settings: Settings) -> AsyncIterator[Database]:
    """An initialised database handle on a temporary file."""
    db = Database(test_settings.database_url)
    await db.init()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.session_maker() as s:
        yield s


@pytest.fixture
def client(test_settings: Settings, notifier: RecordingNotificationService) -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.

    Yields:
        TestClient instance with the lifespan started.
    """
    app = create_app(settings=test_settings, notifier=notifier)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sign_in(notifier: RecordingNotificationService):
    """Sign up and verify, leaving the session cookie on the given client."""
    def do_sign_in(client: TestClient, email: str, name: str = "Owner") -> dict:
        response = client.post("/api/auth/signup", json={"email": email, "name": name, "country": "IN"})
        assert response.status_code == 200, response.text
        response = client.post("/api/auth/verify-otp", json={"email": email, "otp": notifier.last_code(email)})
        assert response.status_code == 200, response.text
        return response.json()["user"]
    return do_sign_in


@pytest.fixture
def load_user(database: Database):
    """Read a user through a fresh session."""
    async def load(email: str) -> Optional[User]:
        async with database.session_maker() as s:
            result = await s.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
    return load
