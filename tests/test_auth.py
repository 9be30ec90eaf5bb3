"""
Auth tests with real token checking.

Verifies:
1. Login sets HttpOnly cookies and returns a token pair
2. Bearer header and cookie both authenticate
3. Role guards and the duplicate check-in rejection with a real token
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from staffclock.core.security import (create_access_token, create_refresh_token,
                                      get_password_hash)
from staffclock.models.employee import Employee
from staffclock.models.user import User

pytestmark = pytest.mark.usefixtures("real_auth")

EMAIL = "cookie@test.com"
PASSWORD = "password123"


@pytest.fixture
async def login_user(db_session: AsyncSession) -> User:
    user = User(
        email=EMAIL, hashed_password=get_password_hash(PASSWORD), is_active=True, role="employee"
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _bearer(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.mark.asyncio
async def test_auth_cookies_httponly(async_client: AsyncClient, login_user):
    response = await async_client.post(
        "/api/v1/auth/login", data={"username": EMAIL, "password": PASSWORD}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"] and body["refresh_token"]

    assert "access_token" in response.cookies
    assert "refresh_token" in response.cookies

    # httpx's cookie jar hides the flags; inspect the raw headers
    set_cookie = response.headers.get_list("set-cookie")
    assert len(set_cookie) == 2
    for header in set_cookie:
        assert "HttpOnly" in header
        assert "SameSite=lax" in header


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, login_user):
    response = await async_client.post(
        "/api/v1/auth/login", data={"username": EMAIL, "password": "not-it"}
    )
    assert response.status_code == 401
    assert response.json()["reason"] == "http_error"


@pytest.mark.asyncio
async def test_me_with_bearer_header(async_client: AsyncClient, login_user):
    resp = await async_client.get("/api/v1/auth/me", headers=_bearer(login_user.id))
    assert resp.status_code == 200
    assert resp.json()["email"] == EMAIL
    assert resp.json()["role"] == "employee"


@pytest.mark.asyncio
async def test_me_with_cookie(async_client: AsyncClient, login_user):
    async_client.cookies.set("access_token", create_access_token(login_user.id))
    resp = await async_client.get("/api/v1/auth/me")
    assert resp.status_code == 200
    assert resp.json()["id"] == login_user.id


@pytest.mark.asyncio
async def test_missing_or_wrong_token_rejected(async_client: AsyncClient, login_user):
    assert (await async_client.get("/api/v1/auth/me")).status_code == 401

    # a refresh token is not an access token
    headers = {"Authorization": f"Bearer {create_refresh_token(login_user.id)}"}
    assert (await async_client.get("/api/v1/auth/me", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_refresh_issues_new_pair(async_client: AsyncClient, login_user):
    resp = await async_client.post(
        "/api/v1/auth/refresh", json={"refresh_token": create_refresh_token(login_user.id)}
    )
    assert resp.status_code == 200
    assert resp.json()["access_token"]

    bad = await async_client.post(
        "/api/v1/auth/refresh", json={"refresh_token": create_access_token(login_user.id)}
    )
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookies(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/logout")
    assert resp.status_code == 200
    cleared = resp.headers.get_list("set-cookie")
    assert any(h.startswith("access_token=") for h in cleared)
    assert any(h.startswith("refresh_token=") for h in cleared)


@pytest.mark.asyncio
async def test_admin_routes_require_admin(async_client: AsyncClient, login_user):
    headers = _bearer(login_user.id)
    assert (await async_client.get("/api/v1/settings", headers=headers)).status_code == 403
    adjust = await async_client.post(
        "/api/v1/admin/attendance/adjust",
        json={"employee_id": 1, "date": "2024-03-11", "status": "Present", "reason": "x"},
        headers=headers,
    )
    assert adjust.status_code == 403


@pytest.mark.asyncio
async def test_admin_creates_user_once(async_client: AsyncClient, db_session: AsyncSession):
    admin = User(email="boss@test.com", hashed_password="x", role="admin")
    db_session.add(admin)
    await db_session.commit()
    headers = _bearer(admin.id)

    payload = {"email": "New@Test.com", "password": "longenough", "role": "manager"}
    created = await async_client.post("/api/v1/auth/users", json=payload, headers=headers)
    assert created.status_code == 201
    assert created.json()["email"] == "new@test.com"
    assert created.json()["role"] == "manager"

    dup = await async_client.post("/api/v1/auth/users", json=payload, headers=headers)
    assert dup.status_code == 400
    assert dup.json()["reason"] == "email_taken"


@pytest.mark.asyncio
async def test_double_tap_check_in_with_real_token(
    async_client: AsyncClient, db_session: AsyncSession, login_user, clock
):
    """SQLite in tests shares one connection, so the taps are sent serially."""
    db_session.add(Employee(name="Concurrency Tester", user_id=login_user.id))
    await db_session.commit()
    headers = _bearer(login_user.id)

    clock.set("09:00:00")
    first = await async_client.post("/api/v1/attendance/check-in", headers=headers)
    second = await async_client.post("/api/v1/attendance/check-in", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["reason"] == "already_checked_in"
