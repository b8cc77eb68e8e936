from uuid import UUID

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import decode_access_token


async def test_login_success(client: AsyncClient, db_session: AsyncSession, school_a) -> None:
    payload = {"email": "admin@greenvalley.edu", "password": "StrongPass123"}

    response = await client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"

    data = body["data"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["schoolCode"] == "GVS"
    assert data["user"]["roleSlug"] == "super-admin"
    assert "fees.create" in data["user"]["permissions"]

    claims = decode_access_token(data["accessToken"])
    assert claims["schoolId"] == str(school_a.school.id)
    assert claims["schoolName"] == "Green Valley School"
    UUID(claims["sub"])

    user = (await db_session.execute(select(User).where(User.id == school_a.user.id))).scalar_one()
    await db_session.refresh(user)
    assert user.last_login is not None


async def test_login_wrong_password(client: AsyncClient, school_a) -> None:
    response = await client.post(
        "/api/v1/auth/login", json={"email": "admin@greenvalley.edu", "password": "nope-nope"}
    )
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid email or password"}


async def test_login_validation_error_uses_envelope(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("email:")


async def test_me_returns_context(client: AsyncClient, school_a) -> None:
    response = await client.get("/api/v1/auth/me", headers=school_a.headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["schoolId"] == str(school_a.school.id)
    assert data["role"] == "Super Admin"


async def test_missing_or_bad_token_is_unauthorized(client: AsyncClient, school_a) -> None:
    response = await client.get("/api/v1/classes")
    assert response.status_code == 401
    assert response.json()["success"] is False

    response = await client.get("/api/v1/classes", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_inactive_school_is_unauthorized(
    client: AsyncClient, db_session: AsyncSession, school_a
) -> None:
    school_a.school.is_active = False
    db_session.add(school_a.school)
    await db_session.commit()

    response = await client.get("/api/v1/auth/me", headers=school_a.headers)
    assert response.status_code == 401
    assert response.json()["error"] == "School is inactive"
