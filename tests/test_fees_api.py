from datetime import date, timedelta


AS_OF = date(2025, 6, 15)


async def _fee_setup(api):
    setup = await api.academic_setup()
    student = await api.admit(setup, "Asha")
    fee_type = (await api.post("/api/v1/fees/types", {"name": "Tuition", "code": "tuition"}))["data"]
    assert fee_type["code"] == "TUITION"
    group = (
        await api.post(
            "/api/v1/fees/groups",
            {
                "name": "Term 1",
                "lines": [
                    {
                        "feeTypeId": fee_type["id"],
                        "amount": 5000,
                        "dueDate": (AS_OF - timedelta(days=1)).isoformat(),
                        "fineType": "percentage",
                        "finePercent": 10,
                    }
                ],
            },
        )
    )["data"]
    assert float(group["totalAmount"]) == 5000
    return setup, student, group


async def test_assign_collect_and_due_report(api_a) -> None:
    setup, student, group = await _fee_setup(api_a)

    assigned = (
        await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)
    )["data"]
    assert assigned["studentsAssigned"] == 1
    assert assigned["feesMaster"]["studentCount"] == 1

    # assigning again creates nothing new
    again = (
        await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)
    )["data"]
    assert again["studentsAssigned"] == 0
    assert again["feesMaster"]["id"] == assigned["feesMaster"]["id"]

    report = (
        await api_a.get("/api/v1/fees/due", params={"studentId": student["id"], "asOf": AS_OF.isoformat()})
    )["data"]
    sfm_id = report["students"][0]["sessions"][0]["feeGroups"][0]["studentFeesMasterId"]

    payment = (
        await api_a.post(
            "/api/v1/fees/collect",
            {"studentId": student["id"], "studentFeesMasterId": sfm_id, "amount": 2000},
        )
    )["data"]
    assert float(payment["amount"]) == 2000
    assert payment["feeGroupName"] == "Term 1"

    report = (
        await api_a.get("/api/v1/fees/due", params={"studentId": student["id"], "asOf": AS_OF.isoformat()})
    )["data"]
    summary = report["students"][0]["summary"]
    assert float(summary["totalAssigned"]) == 5000
    assert float(summary["totalPaid"]) == 2000
    assert float(summary["totalDue"]) == 3000
    assert float(summary["totalFine"]) == 500
    assert float(summary["grandTotal"]) == 3500
    assert float(report["summary"]["totalDueAmount"]) == 3500

    # on the due date itself no fine applies
    on_due_date = (
        await api_a.get(
            "/api/v1/fees/due",
            params={"studentId": student["id"], "asOf": (AS_OF - timedelta(days=1)).isoformat()},
        )
    )["data"]
    assert float(on_due_date["students"][0]["summary"]["totalFine"]) == 0


async def test_fully_paid_student_is_excluded_from_only_due(api_a) -> None:
    setup, student, group = await _fee_setup(api_a)
    await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)
    report = (await api_a.get("/api/v1/fees/due", params={"asOf": AS_OF.isoformat()}))["data"]
    sfm_id = report["students"][0]["sessions"][0]["feeGroups"][0]["studentFeesMasterId"]

    await api_a.post("/api/v1/fees/collect", {"studentId": student["id"], "studentFeesMasterId": sfm_id, "amount": 5500})

    only_due = (await api_a.get("/api/v1/fees/due", params={"onlyDue": "true", "asOf": AS_OF.isoformat()}))["data"]
    assert only_due["students"] == []
    assert only_due["summary"]["totalStudents"] == 0


async def test_payment_against_other_students_assignment_is_rejected(api_a) -> None:
    setup, student, group = await _fee_setup(api_a)
    other = await api_a.admit(setup, "Bilal")
    await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)
    report = (await api_a.get("/api/v1/fees/due", params={"studentId": student["id"]}))["data"]
    sfm_id = report["students"][0]["sessions"][0]["feeGroups"][0]["studentFeesMasterId"]

    body = await api_a.post(
        "/api/v1/fees/collect",
        {"studentId": other["id"], "studentFeesMasterId": sfm_id, "amount": 100},
        expected=400,
    )
    assert body == {"success": False, "error": "Fee assignment does not belong to this student"}


async def test_fee_group_and_type_delete_guards(api_a) -> None:
    setup, _student, group = await _fee_setup(api_a)
    master = (
        await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)
    )["data"]["feesMaster"]

    body = await api_a.delete(f"/api/v1/fees/groups/{group['id']}", expected=400)
    assert body["error"] == "Cannot delete fee group assigned to classes"

    await api_a.delete("/api/v1/fees/assign", params={"feesMasterId": master["id"]})
    await api_a.delete(f"/api/v1/fees/groups/{group['id']}")


async def test_duplicate_fee_type_code(api_a) -> None:
    await api_a.post("/api/v1/fees/types", {"name": "Bus", "code": "BUS"})
    body = await api_a.post("/api/v1/fees/types", {"name": "Bus fee", "code": "bus"}, expected=400)
    assert body["error"] == "Fee type code already exists"


async def test_offsetting_payment_corrects_over_collection(api_a) -> None:
    setup, student, group = await _fee_setup(api_a)
    await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)
    params = {"studentId": student["id"], "asOf": AS_OF.isoformat()}
    report = (await api_a.get("/api/v1/fees/due", params=params))["data"]
    sfm_id = report["students"][0]["sessions"][0]["feeGroups"][0]["studentFeesMasterId"]

    await api_a.post("/api/v1/fees/collect", {"studentId": student["id"], "studentFeesMasterId": sfm_id, "amount": 500})
    correction = (
        await api_a.post(
            "/api/v1/fees/collect",
            {"studentId": student["id"], "studentFeesMasterId": sfm_id, "amount": -500, "note": "entered twice"},
        )
    )["data"]
    assert float(correction["amount"]) == -500

    summary = (await api_a.get("/api/v1/fees/due", params=params))["data"]["students"][0]["summary"]
    assert float(summary["totalPaid"]) == 0
    assert float(summary["totalDue"]) == 5000

    body = await api_a.post(
        "/api/v1/fees/collect",
        {"studentId": student["id"], "studentFeesMasterId": sfm_id, "amount": 0},
        expected=400,
    )
    assert "Amount cannot be zero" in body["error"]

    body = await api_a.post(
        "/api/v1/fees/collect",
        {"studentId": student["id"], "studentFeesMasterId": sfm_id, "amount": 100, "discount": -5},
        expected=400,
    )
    assert body["error"].startswith("discount")


async def test_due_report_lists_fee_lines(api_a) -> None:
    setup, student, group = await _fee_setup(api_a)
    await api_a.post("/api/v1/fees/assign", {"classId": setup["class_id"], "feeGroupId": group["id"]}, expected=200)

    report = (
        await api_a.get("/api/v1/fees/due", params={"studentId": student["id"], "asOf": AS_OF.isoformat()})
    )["data"]
    fee_group = report["students"][0]["sessions"][0]["feeGroups"][0]
    assert fee_group["feeGroupName"] == "Term 1"
    assert len(fee_group["lines"]) == 1
    line = fee_group["lines"][0]
    assert line["feeTypeName"] == "Tuition"
    assert line["feeTypeCode"] == "TUITION"
    assert float(line["amount"]) == 5000
    assert line["dueDate"] == (AS_OF - timedelta(days=1)).isoformat()
    assert line["fineType"] == "percentage"
    assert float(line["finePercent"]) == 10
    assert line["isOverdue"] is True
    assert float(line["fine"]) == 500
    assert line["feeGroupTypeId"] == group["lines"][0]["id"]


async def test_fee_group_update_replaces_lines(api_a) -> None:
    _setup, _student, group = await _fee_setup(api_a)
    fee_type_id = group["lines"][0]["feeTypeId"]

    updated = (
        await api_a.put(
            f"/api/v1/fees/groups/{group['id']}",
            {"lines": [{"feeTypeId": fee_type_id, "amount": 250}]},
        )
    )["data"]
    assert len(updated["lines"]) == 1
    assert float(updated["lines"][0]["amount"]) == 250
    assert updated["lines"][0]["fineType"] == "none"
    assert float(updated["totalAmount"]) == 250

    fetched = (await api_a.get(f"/api/v1/fees/groups/{group['id']}"))["data"]
    assert [float(line["amount"]) for line in fetched["lines"]] == [250]
