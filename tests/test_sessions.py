from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import AcademicSession


async def _active_count(db: AsyncSession, school_id) -> int:
    stmt = select(func.count(AcademicSession.id)).where(
        AcademicSession.school_id == school_id, AcademicSession.is_active.is_(True)
    )
    return (await db.execute(stmt)).scalar()


async def test_no_active_session_returns_null(api_a) -> None:
    body = await api_a.get("/api/v1/sessions/active")
    assert body["success"] is True
    assert body["data"] is None


async def test_activate_keeps_exactly_one_active(api_a, db_session: AsyncSession) -> None:
    school_id = api_a.ctx.school.id
    ids = []
    for name in ("2023-24", "2024-25", "2025-26"):
        ids.append((await api_a.post("/api/v1/sessions", {"name": name}))["data"]["id"])
    assert await _active_count(db_session, school_id) == 0

    for session_id in (ids[0], ids[2], ids[1], ids[1]):
        await api_a.post(f"/api/v1/sessions/{session_id}/activate", expected=200)
        assert await _active_count(db_session, school_id) == 1
        active = (await api_a.get("/api/v1/sessions/active"))["data"]
        assert active["id"] == session_id


async def test_creating_active_session_deactivates_previous(api_a, db_session: AsyncSession) -> None:
    first = (await api_a.post("/api/v1/sessions", {"name": "2024-25", "isActive": True}))["data"]
    second = (await api_a.post("/api/v1/sessions", {"name": "2025-26", "isActive": True}))["data"]

    assert await _active_count(db_session, api_a.ctx.school.id) == 1
    refreshed = (await api_a.get(f"/api/v1/sessions/{first['id']}"))["data"]
    assert refreshed["isActive"] is False
    assert (await api_a.get("/api/v1/sessions/active"))["data"]["id"] == second["id"]


async def test_activation_does_not_touch_other_school(api_a, api_b, db_session: AsyncSession) -> None:
    a = (await api_a.post("/api/v1/sessions", {"name": "2025-26", "isActive": True}))["data"]
    b = (await api_b.post("/api/v1/sessions", {"name": "2025-26"}))["data"]

    await api_b.post(f"/api/v1/sessions/{b['id']}/activate", expected=200)

    assert (await api_a.get("/api/v1/sessions/active"))["data"]["id"] == a["id"]
    await api_b.post(f"/api/v1/sessions/{a['id']}/activate", expected=404)


async def test_active_session_cannot_be_deleted(api_a) -> None:
    session = (await api_a.post("/api/v1/sessions", {"name": "2025-26", "isActive": True}))["data"]

    body = await api_a.delete(f"/api/v1/sessions/{session['id']}", expected=400)
    assert body["error"] == "Cannot delete active session"


async def test_duplicate_session_name_conflicts(api_a) -> None:
    await api_a.post("/api/v1/sessions", {"name": "2025-26"})
    body = await api_a.post("/api/v1/sessions", {"name": "2025-26"}, expected=400)
    assert body["success"] is False
