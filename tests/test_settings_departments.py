async def test_school_settings_update(api_a) -> None:
    settings = (await api_a.get("/api/v1/settings/school"))["data"]
    assert settings["code"] == "GVS"

    updated = (
        await api_a.put("/api/v1/settings/school", {"name": " Green Valley Public School ", "currencySymbol": "Rs", "timezone": None})
    )["data"]
    assert updated["name"] == "Green Valley Public School"
    assert updated["currencySymbol"] == "Rs"
    assert updated["timezone"] == settings["timezone"]
    assert updated["code"] == "GVS"


async def test_department_delete_guard(api_a) -> None:
    department = (await api_a.post("/api/v1/departments", {"name": "Science"}))["data"]
    designation = (await api_a.post("/api/v1/designations", {"name": "Lab Assistant"}))["data"]
    await api_a.post(
        "/api/v1/staff",
        {"firstName": "Meera", "departmentId": department["id"], "designationId": designation["id"]},
    )

    assert (await api_a.get(f"/api/v1/departments/{department['id']}"))["data"]["staffCount"] == 1

    body = await api_a.delete(f"/api/v1/departments/{department['id']}", expected=400)
    assert body["error"] == "Cannot delete department with assigned staff"
    body = await api_a.delete(f"/api/v1/designations/{designation['id']}", expected=400)
    assert body["error"] == "Cannot delete designation with assigned staff"

    body = await api_a.post("/api/v1/departments", {"name": "Science"}, expected=400)
    assert body["error"] == "Department name already exists"


async def test_departments_are_per_school(api_a, api_b) -> None:
    await api_a.post("/api/v1/departments", {"name": "Science"})
    await api_b.post("/api/v1/departments", {"name": "Science"})
    listed = (await api_b.get("/api/v1/departments"))["data"]
    assert [d["name"] for d in listed] == ["Science"]
