async def _route(api) -> dict:
    vehicle = (await api.post("/api/v1/transport/vehicles", {"vehicleNo": "ka-01-ab-1234", "driverName": "Ramesh"}))[
        "data"
    ]
    assert vehicle["vehicleNo"] == "KA-01-AB-1234"
    route = (
        await api.post(
            "/api/v1/transport/routes",
            {
                "title": "North Loop",
                "fare": 800,
                "vehicleIds": [vehicle["id"]],
                "pickupPoints": [
                    {"name": "Lake Gate", "stopOrder": 1, "fare": 600},
                    {"name": "Market Square", "stopOrder": 2},
                ],
            },
        )
    )["data"]
    assert [v["vehicleNo"] for v in route["vehicles"]] == ["KA-01-AB-1234"]
    return {"vehicle": vehicle, "route": route, "points": {p["name"]: p for p in route["pickupPoints"]}}


async def test_assign_student_to_pickup_point(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    transport = await _route(api_a)
    point = transport["points"]["Lake Gate"]

    assignment = (
        await api_a.post(
            "/api/v1/transport/assign", {"studentId": student["id"], "pickupPointId": point["id"]}, expected=200
        )
    )["data"]
    assert assignment["routeTitle"] == "North Loop"
    assert assignment["pickupPointName"] == "Lake Gate"

    listed = (await api_a.get("/api/v1/transport/assign", params={"routeId": transport["route"]["id"]}))["data"]
    assert [a["studentId"] for a in listed] == [student["id"]]

    body = await api_a.delete(f"/api/v1/transport/routes/{transport['route']['id']}", expected=400)
    assert body["error"] == "Cannot delete route with assigned students"

    body = await api_a.put(
        f"/api/v1/transport/routes/{transport['route']['id']}",
        {"pickupPoints": [{"id": transport["points"]["Market Square"]["id"], "name": "Market Square", "stopOrder": 1}]},
        expected=400,
    )
    assert body["error"] == "Cannot remove pickup point with assigned students"

    await api_a.delete("/api/v1/transport/assign", params={"studentId": student["id"]})
    body = await api_a.delete("/api/v1/transport/assign", params={"studentId": student["id"]}, expected=404)
    assert body["error"] == "Transport assignment not found"

    await api_a.delete(f"/api/v1/transport/routes/{transport['route']['id']}")
    await api_a.delete(f"/api/v1/transport/vehicles/{transport['vehicle']['id']}")


async def test_vehicle_on_route_cannot_be_deleted(api_a) -> None:
    transport = await _route(api_a)
    body = await api_a.delete(f"/api/v1/transport/vehicles/{transport['vehicle']['id']}", expected=400)
    assert body == {"success": False, "error": "Cannot delete vehicle assigned to a route"}

    body = await api_a.post("/api/v1/transport/vehicles", {"vehicleNo": "KA-01-AB-1234"}, expected=400)
    assert body["error"] == "Vehicle number already exists"


async def test_pickup_points_sync_keeps_ids(api_a) -> None:
    transport = await _route(api_a)
    kept = transport["points"]["Lake Gate"]
    route = (
        await api_a.put(
            f"/api/v1/transport/routes/{transport['route']['id']}",
            {
                "pickupPoints": [
                    {"id": kept["id"], "name": "Lake Gate North", "stopOrder": 1},
                    {"name": "Temple Road", "stopOrder": 2},
                ]
            },
        )
    )["data"]
    points = {p["name"]: p for p in route["pickupPoints"]}
    assert set(points) == {"Lake Gate North", "Temple Road"}
    assert points["Lake Gate North"]["id"] == kept["id"]


async def test_other_schools_pickup_point_is_invalid(api_a, api_b) -> None:
    setup = await api_b.academic_setup()
    student = await api_b.admit(setup, "Bilal")
    transport = await _route(api_a)
    body = await api_b.post(
        "/api/v1/transport/assign",
        {"studentId": student["id"], "pickupPointId": transport["points"]["Lake Gate"]["id"]},
        expected=400,
    )
    assert body["error"] == "Invalid pickup point"
