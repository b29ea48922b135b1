from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at a scratch database first.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="ideaportal-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["DEBUG"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.database import async_session, drop_models
from app.main import app
from app.models.idea import Idea, IdeaStatus
from app.models.user import User, UserRole
from app.routers.auth import hash_password
from app.services.notifications import Mailer, get_mailer


class RecordingMailer(Mailer):
    """Mailer that keeps messages in memory instead of talking to SMTP."""

    def __init__(self):
        super().__init__(server="localhost", port=25)
        self.sent = []

    async def send(self, recipient_email, subject, html_body, wrap=True):
        self.sent.append({"to": recipient_email, "subject": subject, "body": html_body})


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def client(mailer) -> TestClient:
    """TestClient over a fresh schema with outgoing mail captured."""
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    asyncio.run(drop_models())


def make_user(
    email: str,
    role: UserRole = UserRole.USER,
    password: str = "password123",
    first_name: str = "Test",
    last_name: str = "User",
) -> int:
    """Insert a user directly and return its id."""

    async def _create() -> int:
        async with async_session() as session:
            user = User(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                role=role,
                email_verified=True,
            )
            session.add(user)
            await session.commit()
            return user.id

    return asyncio.run(_create())


def make_idea(owner_id: int, status: IdeaStatus = IdeaStatus.PENDING, **fields) -> int:
    """Insert an idea directly, bypassing the lifecycle rules."""

    async def _create() -> int:
        async with async_session() as session:
            values = dict(
                title="Smart Parking",
                description="Find a free spot faster.",
                category="Mobility",
                problem_statement="Drivers circle for minutes.",
                solution="Sensors and a live map.",
            )
            values.update(fields)
            idea = Idea(user_id=owner_id, status=status, **values)
            session.add(idea)
            await session.commit()
            return idea.id

    return asyncio.run(_create())


def login(client: TestClient, email: str, password: str = "password123") -> dict:
    """Log in and return bearer headers; the auth cookie is dropped."""
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def user_headers(client) -> dict:
    make_user("owner@example.com", first_name="Olivia", last_name="Owner")
    return login(client, "owner@example.com")


@pytest.fixture
def admin_headers(client) -> dict:
    make_user("admin@example.com", role=UserRole.ADMIN, first_name="Ada", last_name="Admin")
    return login(client, "admin@example.com")


IDEA_PAYLOAD = {
    "title": "Smart Parking",
    "description": "Find a free spot faster.",
    "category": "Mobility",
    "problem_statement": "Drivers circle for minutes.",
    "solution": "Sensors and a live map.",
    "tech_stack": ["Python", "FastAPI"],
}
