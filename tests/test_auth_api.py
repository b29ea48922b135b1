from __future__ import annotations

import asyncio
import re
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import select, update

from app.database import async_session
from app.models.password_reset_token import PasswordResetToken
from app.models.user import User
from tests.conftest import login, make_user

REGISTRATION = {
    "email": "new@example.com",
    "password": "s3cret-pass",
    "first_name": "Nia",
    "last_name": "New",
    "employee_id": "EMP-1",
}


def _set_otp(email: str, otp: str, expires_at: datetime) -> None:
    async def _update():
        async with async_session() as session:
            await session.execute(
                update(User).where(User.email == email).values(otp=otp, otp_expires_at=expires_at)
            )
            await session.commit()

    asyncio.run(_update())


def _latest_reset_token() -> PasswordResetToken:
    async def _fetch():
        async with async_session() as session:
            result = await session.execute(select(PasswordResetToken).order_by(PasswordResetToken.id.desc()))
            return result.scalars().first()

    return asyncio.run(_fetch())


def test_register_and_login(client: TestClient):
    r = client.post("/api/auth/register", json=REGISTRATION)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["user"]["role"] == "USER"
    assert body["user"]["email_verified"] is False
    assert body["access_token"]
    assert "token" in r.cookies

    client.cookies.clear()
    headers = login(client, REGISTRATION["email"], REGISTRATION["password"])
    r = client.get("/api/auth/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["employee_id"] == "EMP-1"


def test_register_rejects_duplicates(client: TestClient):
    assert client.post("/api/auth/register", json=REGISTRATION).status_code == 201
    r = client.post("/api/auth/register", json=REGISTRATION)
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists"

    r = client.post("/api/auth/register", json={**REGISTRATION, "email": "other@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Employee ID already exists"


def test_login_with_wrong_password(client: TestClient):
    make_user("someone@example.com")
    r = client.post("/api/auth/login", json={"email": "someone@example.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"


def test_cookie_authenticates_browser_requests(client: TestClient):
    make_user("cookie@example.com")
    r = client.post("/api/auth/login", json={"email": "cookie@example.com", "password": "password123"})
    assert r.status_code == 200
    assert client.get("/api/auth/profile").status_code == 200

    client.post("/api/auth/logout")
    client.cookies.clear()
    assert client.get("/api/auth/profile").status_code == 401


def test_bad_token_is_unauthorized(client: TestClient):
    r = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_otp_flow(client: TestClient, mailer):
    client.post("/api/auth/register", json=REGISTRATION)
    client.cookies.clear()

    r = client.post("/api/auth/send-otp", json={"email": REGISTRATION["email"]})
    assert r.status_code == 200
    assert len(mailer.sent) == 1
    otp = re.search(r">(\d{4})<", mailer.sent[0]["body"]).group(1)

    r = client.post("/api/auth/verify-otp", json={"email": REGISTRATION["email"], "otp": "9999" if otp != "9999" else "1111"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid OTP"

    r = client.post("/api/auth/verify-otp", json={"email": REGISTRATION["email"], "otp": otp})
    assert r.status_code == 200, r.text
    assert r.json()["verified"] is True
    assert r.json()["user"]["email_verified"] is True

    r = client.post("/api/auth/verify-otp", json={"email": REGISTRATION["email"], "otp": otp})
    assert r.json()["message"] == "Email already verified"


def test_expired_otp(client: TestClient):
    client.post("/api/auth/register", json=REGISTRATION)
    _set_otp(REGISTRATION["email"], "4321", datetime.now(timezone.utc) - timedelta(minutes=1))
    r = client.post("/api/auth/verify-otp", json={"email": REGISTRATION["email"], "otp": "4321"})
    assert r.status_code == 400
    assert r.json()["detail"] == "OTP has expired"


def test_send_otp_unknown_email(client: TestClient):
    r = client.post("/api/auth/send-otp", json={"email": "ghost@example.com"})
    assert r.status_code == 404


def test_password_reset(client: TestClient, mailer):
    make_user("forgetful@example.com")

    r = client.post("/api/auth/forgot-password", json={"email": "forgetful@example.com"})
    assert r.status_code == 200
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert unknown.json() == r.json()
    assert len(mailer.sent) == 1

    token = _latest_reset_token().token
    assert f"/reset-password/{token}" in mailer.sent[0]["body"]

    r = client.post("/api/auth/reset-password", json={"token": token, "password": "short"})
    assert r.status_code == 400

    r = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"})
    assert r.status_code == 200
    login(client, "forgetful@example.com", "brand-new-pass")

    r = client.post("/api/auth/reset-password", json={"token": token, "password": "another-pass"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid or expired token"


def test_profile_update(client: TestClient, user_headers):
    r = client.patch(
        "/api/auth/profile",
        json={"first_name": "Liv", "last_name": "Owner", "skills": ["Rust", "SQL"], "bio": "Builder"},
        headers=user_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["first_name"] == "Liv"
    assert r.json()["skills"] == ["Rust", "SQL"]

    r = client.patch("/api/auth/profile", json={"first_name": "", "last_name": "X"}, headers=user_headers)
    assert r.status_code == 400
