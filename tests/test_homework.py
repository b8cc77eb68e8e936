from datetime import date, timedelta


async def _homework(api, setup) -> dict:
    today = date.today()
    payload = {
        "classId": setup["class_id"],
        "sectionId": setup["section_id"],
        "title": "Fractions worksheet",
        "homeworkDate": today.isoformat(),
        "submissionDate": (today + timedelta(days=3)).isoformat(),
    }
    return (await api.post("/api/v1/homework", payload))["data"]


async def test_evaluation_happens_once(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    hw = await _homework(api_a, setup)

    submission = (
        await api_a.post(
            "/api/v1/homework/submissions",
            {"homeworkId": hw["id"], "studentId": student["id"], "message": "Done"},
        )
    )["data"]
    assert submission["status"] == "pending"

    evaluated = (
        await api_a.patch(
            f"/api/v1/homework/submissions/{submission['id']}",
            {"status": "accepted", "marks": 9, "feedback": "Neat work"},
        )
    )["data"]
    assert evaluated["status"] == "accepted"
    assert float(evaluated["marks"]) == 9

    body = await api_a.patch(
        f"/api/v1/homework/submissions/{submission['id']}", {"status": "rejected"}, expected=400
    )
    assert body == {"success": False, "error": "Submission already evaluated"}

    body = await api_a.post(
        "/api/v1/homework/submissions",
        {"homeworkId": hw["id"], "studentId": student["id"], "message": "Again"},
        expected=400,
    )
    assert body["error"] == "Submission already evaluated"


async def test_pending_submission_can_be_replaced(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    hw = await _homework(api_a, setup)

    first = (
        await api_a.post(
            "/api/v1/homework/submissions",
            {"homeworkId": hw["id"], "studentId": student["id"], "message": "Draft"},
        )
    )["data"]
    body = await api_a.post(
        "/api/v1/homework/submissions",
        {"homeworkId": hw["id"], "studentId": student["id"], "message": "Final"},
        expected=200,
    )
    assert body["message"] == "Homework re-submitted successfully"
    assert body["data"]["id"] == first["id"]
    assert body["data"]["message"] == "Final"

    listed = (await api_a.get("/api/v1/homework/submissions", params={"homeworkId": hw["id"]}))["data"]
    assert len(listed) == 1
    assert (await api_a.get(f"/api/v1/homework/{hw['id']}"))["data"]["submissionCount"] == 1


async def test_submission_date_before_homework_date_is_rejected(api_a) -> None:
    setup = await api_a.academic_setup()
    today = date.today()
    body = await api_a.post(
        "/api/v1/homework",
        {
            "classId": setup["class_id"],
            "title": "Essay",
            "homeworkDate": today.isoformat(),
            "submissionDate": (today - timedelta(days=1)).isoformat(),
        },
        expected=400,
    )
    assert "Submission date cannot be before homework date" in body["error"]


async def test_homework_is_scoped_to_school(api_a, api_b) -> None:
    setup = await api_a.academic_setup()
    hw = await _homework(api_a, setup)
    body = await api_b.get(f"/api/v1/homework/{hw['id']}", expected=404)
    assert body["error"] == "Homework not found"
