async def _two_exams(api) -> list:
    await api.academic_setup()
    return [(await api.post("/api/v1/exams", {"name": name}))["data"] for name in ("Unit Test 1", "Unit Test 2")]


async def test_exam_group_membership_and_type_filter(api_a) -> None:
    first, second = await _two_exams(api_a)
    group = (
        await api_a.post(
            "/api/v1/exams/groups",
            {"name": "Term 1", "examType": "unit", "examIds": [first["id"], second["id"]]},
        )
    )["data"]
    assert group["examType"] == "unit"
    assert [e["name"] for e in group["exams"]] == ["Unit Test 1", "Unit Test 2"]

    await api_a.post("/api/v1/exams/groups", {"name": "Finals"})

    listed = await api_a.get("/api/v1/exams/groups", params={"examType": "unit"})
    assert [g["name"] for g in listed["data"]] == ["Term 1"]
    assert listed["pagination"]["total"] == 1

    updated = (await api_a.put(f"/api/v1/exams/groups/{group['id']}", {"examIds": [second["id"]]}))["data"]
    assert [e["examId"] for e in updated["exams"]] == [second["id"]]


async def test_exam_group_rejects_duplicates_and_foreign_exams(api_a, api_b) -> None:
    first, _second = await _two_exams(api_a)
    body = await api_a.post(
        "/api/v1/exams/groups", {"name": "Twice", "examIds": [first["id"], first["id"]]}, expected=400
    )
    assert body["error"] == "An exam can appear only once in a group"

    await api_a.post("/api/v1/exams/groups", {"name": "Term 1"})
    body = await api_a.post("/api/v1/exams/groups", {"name": "Term 1"}, expected=400)
    assert body["error"] == "Exam group name already exists"

    body = await api_b.post("/api/v1/exams/groups", {"name": "Borrowed", "examIds": [first["id"]]}, expected=400)
    assert body["error"] == "Invalid exam"


async def test_deleting_group_keeps_exams(api_a) -> None:
    first, _second = await _two_exams(api_a)
    group = (await api_a.post("/api/v1/exams/groups", {"name": "Term 1", "examIds": [first["id"]]}))["data"]

    await api_a.delete(f"/api/v1/exams/groups/{group['id']}")
    body = await api_a.get(f"/api/v1/exams/groups/{group['id']}", expected=404)
    assert body["error"] == "Exam group not found"
    assert (await api_a.get(f"/api/v1/exams/{first['id']}"))["data"]["name"] == "Unit Test 1"


async def test_deleted_exam_leaves_its_groups(api_a) -> None:
    first, second = await _two_exams(api_a)
    group = (
        await api_a.post("/api/v1/exams/groups", {"name": "Term 1", "examIds": [first["id"], second["id"]]})
    )["data"]

    await api_a.delete(f"/api/v1/exams/{first['id']}")
    fetched = (await api_a.get(f"/api/v1/exams/groups/{group['id']}"))["data"]
    assert [e["examId"] for e in fetched["exams"]] == [second["id"]]
