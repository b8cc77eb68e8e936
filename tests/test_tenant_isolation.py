"""Rows of one school are invisible to every other school."""


async def test_class_of_other_school_is_not_found(api_a, api_b) -> None:
    klass = (await api_a.post("/api/v1/classes", {"name": "Grade 5"}))["data"]

    listed = (await api_b.get("/api/v1/classes"))["data"]
    assert all(c["id"] != klass["id"] for c in listed)

    body = await api_b.get(f"/api/v1/classes/{klass['id']}", expected=404)
    assert body == {"success": False, "error": "Class not found"}
    await api_b.put(f"/api/v1/classes/{klass['id']}", {"name": "Hijacked"}, expected=404)
    await api_b.delete(f"/api/v1/classes/{klass['id']}", expected=404)

    still_there = (await api_a.get(f"/api/v1/classes/{klass['id']}"))["data"]
    assert still_there["name"] == "Grade 5"


async def test_same_names_are_allowed_across_schools(api_a, api_b) -> None:
    await api_a.post("/api/v1/subjects", {"name": "Mathematics", "code": "math"})
    other = (await api_b.post("/api/v1/subjects", {"name": "Mathematics", "code": "MATH"}))["data"]
    assert other["code"] == "MATH"

    listed = (await api_b.get("/api/v1/subjects"))
    assert listed["pagination"]["total"] == 1


async def test_cannot_reference_other_school_rows(api_a, api_b) -> None:
    section_a = (await api_a.post("/api/v1/sections", {"name": "A"}))["data"]

    body = await api_b.post("/api/v1/classes", {"name": "Grade 1", "sectionIds": [section_a["id"]]}, expected=400)
    assert body["error"] == "Invalid section"


async def test_library_and_fees_are_scoped(api_a, api_b) -> None:
    book = (await api_a.post("/api/v1/library/books", {"title": "Dune", "quantity": 2}))["data"]
    fee_type = (await api_a.post("/api/v1/fees/types", {"name": "Tuition", "code": "TUI"}))["data"]

    await api_b.get(f"/api/v1/library/books/{book['id']}", expected=404)
    await api_b.delete(f"/api/v1/fees/types/{fee_type['id']}", expected=404)
    assert (await api_b.get("/api/v1/library/books"))["data"] == []
