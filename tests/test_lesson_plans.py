from datetime import date


async def _plan_setup(api) -> dict:
    setup = await api.academic_setup()
    subject = (await api.post("/api/v1/subjects", {"name": "Science", "code": "SCI"}))["data"]
    staff = (await api.post("/api/v1/staff", {"firstName": "Meera", "lastName": "Rao"}))["data"]
    return {**setup, "subject_id": subject["id"], "staff_id": staff["id"]}


async def test_lesson_plan_lifecycle(api_a) -> None:
    ctx = await _plan_setup(api_a)
    plan = (
        await api_a.post(
            "/api/v1/academics/lesson-plans",
            {
                "subjectId": ctx["subject_id"],
                "staffId": ctx["staff_id"],
                "classId": ctx["class_id"],
                "sectionId": ctx["section_id"],
                "lessonName": " Photosynthesis ",
                "lessonDate": "2025-07-10",
                "subTopic": "Chlorophyll",
            },
        )
    )["data"]
    assert plan["lessonName"] == "Photosynthesis"
    assert plan["status"] == "pending"
    assert plan["className"] == "Grade 1"
    assert plan["sectionName"] == "A"
    assert plan["subjectName"] == "Science"
    assert plan["staffName"] == "Meera Rao"

    await api_a.post(
        "/api/v1/academics/lesson-plans",
        {"subjectId": ctx["subject_id"], "lessonName": "Respiration", "lessonDate": "2025-08-01"},
    )

    july = await api_a.get(
        "/api/v1/academics/lesson-plans", params={"startDate": "2025-07-01", "endDate": "2025-07-31"}
    )
    assert [p["lessonName"] for p in july["data"]] == ["Photosynthesis"]
    found = await api_a.get("/api/v1/academics/lesson-plans", params={"search": "chloro"})
    assert found["pagination"]["total"] == 1

    done = (await api_a.put(f"/api/v1/academics/lesson-plans/{plan['id']}", {"status": "completed"}))["data"]
    assert done["status"] == "completed"
    assert done["lessonDate"] == date(2025, 7, 10).isoformat()

    body = await api_a.delete(f"/api/v1/subjects/{ctx['subject_id']}", expected=400)
    assert body["error"] == "Cannot delete subject used in lesson plans"

    await api_a.delete(f"/api/v1/academics/lesson-plans/{plan['id']}")
    body = await api_a.get(f"/api/v1/academics/lesson-plans/{plan['id']}", expected=404)
    assert body["error"] == "Lesson plan not found"


async def test_lesson_plan_validation(api_a, api_b) -> None:
    ctx = await _plan_setup(api_a)
    body = await api_a.post(
        "/api/v1/academics/lesson-plans",
        {"subjectId": ctx["subject_id"], "classId": ctx["class_id"], "lessonName": "Cells", "lessonDate": "2025-07-10"},
        expected=400,
    )
    assert "classId and sectionId must be given together" in body["error"]

    await api_b.academic_setup()
    body = await api_b.post(
        "/api/v1/academics/lesson-plans",
        {"subjectId": ctx["subject_id"], "lessonName": "Cells", "lessonDate": "2025-07-10"},
        expected=400,
    )
    assert body["error"] == "Invalid subject"
