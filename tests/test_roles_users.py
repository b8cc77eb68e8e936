async def _login(client, email: str, password: str, school_code: str) -> dict:
    response = await client.post(
        "/api/v1/auth/login", json={"email": email, "password": password, "schoolCode": school_code}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}


async def _limited_user(api_a, client, permission_names) -> dict:
    permissions = (await api_a.get("/api/v1/permissions"))["data"]
    ids = [p["id"] for p in permissions if p["name"] in permission_names]
    assert len(ids) == len(permission_names)
    role = (await api_a.post("/api/v1/roles", {"name": "Librarian", "permissionIds": ids}))["data"]
    assert role["slug"] == "librarian"
    assert sorted(role["permissions"]) == sorted(permission_names)

    await api_a.post(
        "/api/v1/users",
        {"username": "librarian", "email": "books@greenvalley.edu", "password": "Shelf12345", "roleId": role["id"]},
    )
    headers = await _login(client, "books@greenvalley.edu", "Shelf12345", "GVS")
    return {"role": role, "headers": headers}


async def test_role_permissions_gate_endpoints(api_a, client) -> None:
    limited = await _limited_user(api_a, client, ["library.view", "library.create"])

    allowed = await client.get("/api/v1/library/books", headers=limited["headers"])
    assert allowed.status_code == 200

    denied = await client.get("/api/v1/fees/types", headers=limited["headers"])
    assert denied.status_code == 403
    assert denied.json() == {"success": False, "error": "Insufficient permissions"}

    denied = await client.delete(
        "/api/v1/library/books/00000000-0000-0000-0000-000000000000", headers=limited["headers"]
    )
    assert denied.status_code == 403


async def test_role_delete_guards(api_a, client) -> None:
    limited = await _limited_user(api_a, client, ["library.view"])

    body = await api_a.delete(f"/api/v1/roles/{api_a.ctx.role.id}", expected=400)
    assert body["error"] == "Cannot delete system role"

    body = await api_a.delete(f"/api/v1/roles/{limited['role']['id']}", expected=400)
    assert body["error"] == "Cannot delete role with assigned users"


async def test_system_role_cannot_be_modified(api_a) -> None:
    body = await api_a.put(f"/api/v1/roles/{api_a.ctx.role.id}", {"name": "Owner"}, expected=400)
    assert body["error"] == "Cannot modify system role"


async def test_user_cannot_delete_own_account(api_a) -> None:
    body = await api_a.delete(f"/api/v1/users/{api_a.ctx.user.id}", expected=400)
    assert body == {"success": False, "error": "Cannot delete your own account"}


async def test_duplicate_user_email(api_a) -> None:
    body = await api_a.post(
        "/api/v1/users",
        {"username": "another", "email": "ADMIN@greenvalley.edu", "password": "Secret123"},
        expected=400,
    )
    assert body["error"] == "Email already exists"


async def test_unknown_permission_id_is_rejected(api_a) -> None:
    body = await api_a.post(
        "/api/v1/roles",
        {"name": "Clerk", "permissionIds": ["00000000-0000-0000-0000-000000000001"]},
        expected=400,
    )
    assert body["error"].startswith("Unknown permission id(s)")
