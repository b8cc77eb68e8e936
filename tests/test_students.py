import re
from datetime import datetime


async def test_admission_numbers_are_distinct_and_increasing(api_a) -> None:
    setup = await api_a.academic_setup()
    year = datetime.utcnow().year

    numbers = []
    for name in ("Asha", "Bilal", "Chen", "Dara"):
        preview = (await api_a.get("/api/v1/students/generate-admission-no"))["data"]
        student = await api_a.admit(setup, name)
        assert student["admissionNo"] == preview
        numbers.append(student["admissionNo"])

    assert len(set(numbers)) == len(numbers)
    seqs = []
    for number in numbers:
        match = re.fullmatch(rf"{year}(\d+)", number)
        assert match, number
        seqs.append(int(match.group(1)))
    assert seqs == sorted(seqs)
    assert seqs[0] == 1


async def test_sequence_continues_after_manual_number(api_a) -> None:
    setup = await api_a.academic_setup()
    year = datetime.utcnow().year
    await api_a.admit(setup, "Asha", admissionNo=f"{year}0041")

    generated = await api_a.admit(setup, "Bilal")
    assert generated["admissionNo"] == f"{year}0042"

    body = await api_a.post(
        "/api/v1/students",
        {"firstName": "Copy", "classId": setup["class_id"], "sectionId": setup["section_id"], "admissionNo": f"{year}0041"},
        expected=400,
    )
    assert body["error"] == "Admission number already exists"


async def test_admission_creates_enrollment_in_active_session(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha", rollNo="7")

    assert student["sessionId"] == setup["session_id"]
    assert student["classId"] == setup["class_id"]
    assert student["sectionId"] == setup["section_id"]
    assert student["className"] == "Grade 1"
    assert student["rollNo"] == "7"

    listed = await api_a.get("/api/v1/students", params={"classId": setup["class_id"]})
    assert listed["pagination"]["total"] == 1


async def test_section_must_belong_to_class(api_a) -> None:
    setup = await api_a.academic_setup()
    other = (await api_a.post("/api/v1/sections", {"name": "Z"}))["data"]

    body = await api_a.post(
        "/api/v1/students",
        {"firstName": "Asha", "classId": setup["class_id"], "sectionId": other["id"]},
        expected=400,
    )
    assert body["error"] == "Section is not assigned to this class"


async def test_admission_requires_active_session(api_a) -> None:
    section = (await api_a.post("/api/v1/sections", {"name": "A"}))["data"]
    klass = (await api_a.post("/api/v1/classes", {"name": "Grade 1", "sectionIds": [section["id"]]}))["data"]

    body = await api_a.post(
        "/api/v1/students",
        {"firstName": "Asha", "classId": klass["id"], "sectionId": section["id"]},
        expected=400,
    )
    assert body["error"] == "No active session found"


async def test_disable_and_delete_student(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")

    disabled = (await api_a.put(f"/api/v1/students/{student['id']}", {"isActive": False}))["data"]
    assert disabled["isActive"] is False

    await api_a.delete(f"/api/v1/students/{student['id']}")
    await api_a.get(f"/api/v1/students/{student['id']}", expected=404)


async def test_parent_linked_to_student_cannot_be_deleted(api_a) -> None:
    setup = await api_a.academic_setup()
    parent = (await api_a.post("/api/v1/parents", {"guardianName": "Ravi Kumar", "phone": "555-0101"}))["data"]
    await api_a.admit(setup, "Asha", parentId=parent["id"])

    body = await api_a.delete(f"/api/v1/parents/{parent['id']}", expected=400)
    assert body["error"] == "Cannot delete parent linked to students"


async def test_employee_ids_use_school_code(api_a) -> None:
    yy = datetime.utcnow().year % 100
    first = (await api_a.post("/api/v1/staff", {"firstName": "Meera"}))["data"]
    second = (await api_a.post("/api/v1/staff", {"firstName": "Tom"}))["data"]

    assert first["employeeId"] == f"GVS-{yy:02d}-0001"
    assert second["employeeId"] == f"GVS-{yy:02d}-0002"
    preview = (await api_a.get("/api/v1/staff/generate-id"))["data"]
    assert preview == f"GVS-{yy:02d}-0003"
