async def _exam(api, setup) -> dict:
    subject = (await api.post("/api/v1/subjects", {"name": "Mathematics", "code": "MATH"}))["data"]
    exam = (
        await api.post(
            "/api/v1/exams",
            {"name": "Mid Term", "subjects": [{"subjectId": subject["id"], "maxMarks": 50, "minMarks": 20}]},
        )
    )["data"]
    assert exam["sessionId"] == setup["session_id"]
    assert exam["subjects"][0]["subjectCode"] == "MATH"
    return {"exam": exam, "subject": subject, "paper": exam["subjects"][0]}


async def test_results_upsert_and_pass_flags(api_a) -> None:
    setup = await api_a.academic_setup()
    asha = await api_a.admit(setup, "Asha")
    bilal = await api_a.admit(setup, "Bilal")
    ctx = await _exam(api_a, setup)
    paper_id = ctx["paper"]["id"]

    saved = (
        await api_a.post(
            "/api/v1/exams/results",
            {
                "examSubjectId": paper_id,
                "results": [
                    {"studentSessionId": asha["studentSessionId"], "marksObtained": 42},
                    {"studentSessionId": bilal["studentSessionId"], "marksObtained": 10},
                ],
            },
            expected=200,
        )
    )["data"]
    assert saved == {"created": 2, "updated": 0}

    saved = (
        await api_a.post(
            "/api/v1/exams/results",
            {"examSubjectId": paper_id, "results": [{"studentSessionId": bilal["studentSessionId"], "isAbsent": True}]},
            expected=200,
        )
    )["data"]
    assert saved == {"created": 0, "updated": 1}

    sheet = (
        await api_a.get(
            "/api/v1/exams/results",
            params={"examSubjectId": paper_id, "classId": setup["class_id"], "sectionId": setup["section_id"]},
        )
    )["data"]
    rows = {r["studentName"]: r for r in sheet["records"]}
    assert rows["Asha"]["passed"] is True
    assert rows["Bilal"]["isAbsent"] is True
    assert rows["Bilal"]["marksObtained"] is None
    assert rows["Bilal"]["passed"] is False


async def test_marks_above_maximum_are_rejected(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    ctx = await _exam(api_a, setup)
    body = await api_a.post(
        "/api/v1/exams/results",
        {
            "examSubjectId": ctx["paper"]["id"],
            "results": [{"studentSessionId": student["studentSessionId"], "marksObtained": 51}],
        },
        expected=400,
    )
    assert body["error"].startswith("Marks cannot exceed maximum marks")


async def test_exam_with_results_cannot_be_deleted(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    ctx = await _exam(api_a, setup)
    await api_a.post(
        "/api/v1/exams/results",
        {
            "examSubjectId": ctx["paper"]["id"],
            "results": [{"studentSessionId": student["studentSessionId"], "marksObtained": 30}],
        },
        expected=200,
    )
    body = await api_a.delete(f"/api/v1/exams/{ctx['exam']['id']}", expected=400)
    assert body["error"] == "Cannot delete exam with results"

    body = await api_a.put(f"/api/v1/exams/{ctx['exam']['id']}", {"subjects": []}, expected=400)
    assert body["error"] == "Cannot remove exam subject with results"


async def test_subject_appears_once_per_exam(api_a) -> None:
    await api_a.academic_setup()
    subject = (await api_a.post("/api/v1/subjects", {"name": "Science"}))["data"]
    body = await api_a.post(
        "/api/v1/exams",
        {"name": "Unit Test", "subjects": [{"subjectId": subject["id"]}, {"subjectId": subject["id"]}]},
        expected=400,
    )
    assert body["error"] == "A subject can appear only once in an exam"


async def test_empty_exam_delete(api_a) -> None:
    await api_a.academic_setup()
    exam = (await api_a.post("/api/v1/exams", {"name": "Quiz"}))["data"]
    await api_a.delete(f"/api/v1/exams/{exam['id']}")
    body = await api_a.get(f"/api/v1/exams/{exam['id']}", expected=404)
    assert body["error"] == "Exam not found"
