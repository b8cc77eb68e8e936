async def test_class_sort_order_defaults_to_next(api_a) -> None:
    first = (await api_a.post("/api/v1/classes", {"name": "Grade 1", "sortOrder": 4}))["data"]
    second = (await api_a.post("/api/v1/classes", {"name": "Grade 2"}))["data"]
    assert first["sortOrder"] == 4
    assert second["sortOrder"] == 5


async def test_class_with_sections_expansion(api_a) -> None:
    a = (await api_a.post("/api/v1/sections", {"name": "A"}))["data"]
    b = (await api_a.post("/api/v1/sections", {"name": "B"}))["data"]
    klass = (await api_a.post("/api/v1/classes", {"name": "Grade 1", "sectionIds": [a["id"], b["id"]]}))["data"]

    listed = (await api_a.get("/api/v1/classes", params={"withSections": "true"}))["data"]
    assert len(listed) == 1
    assert sorted(s["name"] for s in listed[0]["sections"]) == ["A", "B"]

    updated = (await api_a.put(f"/api/v1/classes/{klass['id']}", {"sectionIds": [b["id"]]}))["data"]
    assert [s["name"] for s in updated["sections"]] == ["B"]

    sections = {s["name"]: s for s in (await api_a.get("/api/v1/sections"))["data"]}
    assert sections["A"]["classCount"] == 0
    assert sections["B"]["classCount"] == 1


async def test_duplicate_class_name_conflicts(api_a) -> None:
    await api_a.post("/api/v1/classes", {"name": "Grade 1"})
    body = await api_a.post("/api/v1/classes", {"name": "Grade 1"}, expected=400)
    assert body == {"success": False, "error": "Class name already exists"}


async def test_class_with_students_cannot_be_deleted(api_a) -> None:
    setup = await api_a.academic_setup()
    await api_a.admit(setup, "Asha")

    body = await api_a.delete(f"/api/v1/classes/{setup['class_id']}", expected=400)
    assert body["error"] == "Cannot delete class with assigned students"

    body = await api_a.put(f"/api/v1/classes/{setup['class_id']}", {"sectionIds": []}, expected=400)
    assert body["error"] == "Cannot remove section with assigned students"


async def test_empty_class_can_be_deleted(api_a) -> None:
    setup = await api_a.academic_setup()

    await api_a.delete(f"/api/v1/classes/{setup['class_id']}")
    await api_a.get(f"/api/v1/classes/{setup['class_id']}", expected=404)
    # the section is free again
    await api_a.delete(f"/api/v1/sections/{setup['section_id']}")


async def test_section_assigned_to_class_cannot_be_deleted(api_a) -> None:
    setup = await api_a.academic_setup()

    body = await api_a.delete(f"/api/v1/sections/{setup['section_id']}", expected=400)
    assert body["error"] == "Cannot delete section assigned to classes"


async def test_subject_code_is_uppercased_and_unique(api_a) -> None:
    subject = (await api_a.post("/api/v1/subjects", {"name": "Physics", "code": "phy", "type": "practical"}))["data"]
    assert subject["code"] == "PHY"
    assert subject["type"] == "practical"

    body = await api_a.post("/api/v1/subjects", {"name": "Physics II", "code": "PHY"}, expected=400)
    assert body["error"] == "Subject code already exists"

    dropdown = (await api_a.get("/api/v1/subjects/dropdown"))["data"]
    assert [s["id"] for s in dropdown] == [subject["id"]]
