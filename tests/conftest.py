import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from dataclasses import dataclass
from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.dependencies import load_role_permissions
from app.auth.models import Role, User
from app.auth.security import create_access_token
from app.auth.services import build_token_subject
from app.core.models import School
from app.db.seed_school import provision_school, seed_permissions
from app.db.session import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_PASSWORD = "StrongPass123"


@dataclass
class SchoolContext:
    school: School
    role: Role
    user: User
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test; StaticPool keeps the single connection alive."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app; each request gets its own session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _school(db: AsyncSession, code: str, name: str, email: str) -> SchoolContext:
    await seed_permissions(db)
    school, role, user = await provision_school(db, code=code, name=name, admin_email=email, admin_password=ADMIN_PASSWORD)
    permissions = await load_role_permissions(db, role.id)
    token = create_access_token(subject=build_token_subject(user, school, role, permissions))
    return SchoolContext(school=school, role=role, user=user, token=token)


@pytest.fixture()
async def school_a(db_session: AsyncSession) -> SchoolContext:
    return await _school(db_session, "GVS", "Green Valley School", "admin@greenvalley.edu")


@pytest.fixture()
async def school_b(db_session: AsyncSession) -> SchoolContext:
    return await _school(db_session, "RHS", "River High School", "admin@riverhigh.edu")


class Api:
    """Thin JSON helper bound to one school's token."""

    def __init__(self, client: AsyncClient, ctx: SchoolContext) -> None:
        self.client = client
        self.ctx = ctx

    async def request(self, method: str, path: str, expected: int = 200, **kwargs):
        response = await self.client.request(method, path, headers=self.ctx.headers, **kwargs)
        assert response.status_code == expected, response.text
        return response.json()

    async def get(self, path: str, expected: int = 200, **kwargs):
        return await self.request("GET", path, expected, **kwargs)

    async def post(self, path: str, json=None, expected: int = 201, **kwargs):
        return await self.request("POST", path, expected, json=json, **kwargs)

    async def put(self, path: str, json=None, expected: int = 200, **kwargs):
        return await self.request("PUT", path, expected, json=json, **kwargs)

    async def patch(self, path: str, json=None, expected: int = 200, **kwargs):
        return await self.request("PATCH", path, expected, json=json, **kwargs)

    async def delete(self, path: str, expected: int = 200, **kwargs):
        return await self.request("DELETE", path, expected, **kwargs)

    async def academic_setup(self, class_name: str = "Grade 1", section_name: str = "A") -> Dict[str, str]:
        """Active session plus one class with one section; returns their ids."""
        session = (await self.post("/api/v1/sessions", {"name": "2025-26", "isActive": True}))["data"]
        section = (await self.post("/api/v1/sections", {"name": section_name}))["data"]
        klass = (await self.post("/api/v1/classes", {"name": class_name, "sectionIds": [section["id"]]}))["data"]
        return {"session_id": session["id"], "class_id": klass["id"], "section_id": section["id"]}

    async def admit(self, setup: Dict[str, str], first_name: str, **extra) -> dict:
        payload = {"firstName": first_name, "classId": setup["class_id"], "sectionId": setup["section_id"], **extra}
        return (await self.post("/api/v1/students", payload))["data"]


@pytest.fixture()
def api_a(client: AsyncClient, school_a: SchoolContext) -> Api:
    return Api(client, school_a)


@pytest.fixture()
def api_b(client: AsyncClient, school_b: SchoolContext) -> Api:
    return Api(client, school_b)
