async def test_category_assignment_and_delete_guard(api_a) -> None:
    setup = await api_a.academic_setup()
    category = (await api_a.post("/api/v1/students/categories", {"name": " General "}))["data"]
    assert category["name"] == "General"

    student = await api_a.admit(setup, "Asha", categoryId=category["id"])
    assert student["categoryId"] == category["id"]
    await api_a.admit(setup, "Bilal")

    listed = await api_a.get("/api/v1/students", params={"categoryId": category["id"]})
    assert [s["firstName"] for s in listed["data"]] == ["Asha"]
    assert (await api_a.get(f"/api/v1/students/categories/{category['id']}"))["data"]["studentCount"] == 1

    body = await api_a.delete(f"/api/v1/students/categories/{category['id']}", expected=400)
    assert body["error"] == "Cannot delete category assigned to students"

    await api_a.put(f"/api/v1/students/{student['id']}", {"categoryId": None})
    await api_a.delete(f"/api/v1/students/categories/{category['id']}")


async def test_duplicate_category_name(api_a) -> None:
    await api_a.post("/api/v1/students/categories", {"name": "OBC"})
    body = await api_a.post("/api/v1/students/categories", {"name": "OBC"}, expected=400)
    assert body["error"] == "Category name already exists"


async def test_school_house_assignment(api_a) -> None:
    setup = await api_a.academic_setup()
    red = (await api_a.post("/api/v1/settings/school-houses", {"name": "Red House"}))["data"]
    blue = (await api_a.post("/api/v1/settings/school-houses", {"name": "Blue House"}))["data"]

    student = await api_a.admit(setup, "Asha", schoolHouseId=red["id"])
    moved = (await api_a.put(f"/api/v1/students/{student['id']}", {"schoolHouseId": blue["id"]}))["data"]
    assert moved["schoolHouseId"] == blue["id"]

    houses = (await api_a.get("/api/v1/settings/school-houses"))["data"]
    assert [(h["name"], h["studentCount"]) for h in houses] == [("Blue House", 1), ("Red House", 0)]

    body = await api_a.delete(f"/api/v1/settings/school-houses/{blue['id']}", expected=400)
    assert body["error"] == "Cannot delete house assigned to students"
    await api_a.delete(f"/api/v1/settings/school-houses/{red['id']}")


async def test_groupings_of_other_school_are_rejected(api_a, api_b) -> None:
    setup = await api_b.academic_setup()
    category = (await api_a.post("/api/v1/students/categories", {"name": "General"}))["data"]
    house = (await api_a.post("/api/v1/settings/school-houses", {"name": "Red House"}))["data"]

    body = await api_b.post(
        "/api/v1/students",
        {"firstName": "Chen", "classId": setup["class_id"], "sectionId": setup["section_id"], "categoryId": category["id"]},
        expected=400,
    )
    assert body["error"] == "Invalid student category"

    body = await api_b.post(
        "/api/v1/students",
        {"firstName": "Chen", "classId": setup["class_id"], "sectionId": setup["section_id"], "schoolHouseId": house["id"]},
        expected=400,
    )
    assert body["error"] == "Invalid school house"

    await api_b.get(f"/api/v1/settings/school-houses/{house['id']}", expected=404)
