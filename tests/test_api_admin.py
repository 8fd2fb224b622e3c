from tests.helpers import PASSWORD, auth_headers, login


# ---------------- list / get ----------------
async def test_admin_routes_require_authentication(client):
    assert (await client.get("/admin")).status_code == 401
    assert (await client.post("/admin", json={"email": "x@example.com"})).status_code == 401


async def test_list_admins_with_role_filter(client, superadmin, admin, super_headers):
    everyone = await client.get("/admin", headers=super_headers)
    assert everyone.status_code == 200
    assert {a["email"] for a in everyone.json()} == {superadmin.email, admin.email}

    supers = await client.get("/admin", params={"role": "superadmin"}, headers=super_headers)
    assert [a["email"] for a in supers.json()] == [superadmin.email]

    bad = await client.get("/admin", params={"role": "owner"}, headers=super_headers)
    assert bad.status_code == 400


async def test_get_admin_by_id(client, admin, admin_headers):
    res = await client.get(f"/admin/{admin.id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["email"] == admin.email
    assert "password_hash" not in res.json()

    assert (await client.get("/admin/9999", headers=admin_headers)).status_code == 404

    bad = await client.get("/admin/abc", headers=admin_headers)
    assert bad.status_code == 400
    assert bad.json()["details"][0]["field"] == "admin_id"


# ---------------- create / invite ----------------
async def test_create_admin_with_password(client, admin_headers):
    res = await client.post(
        "/admin",
        json={"email": "new@example.com", "password": PASSWORD},
        headers=admin_headers,
    )

    assert res.status_code == 201
    assert res.json()["data"]["is_active"] is True
    await login(client, "new@example.com")


async def test_create_duplicate_admin(client, admin, admin_headers):
    res = await client.post(
        "/admin",
        json={"email": admin.email.upper(), "password": PASSWORD},
        headers=admin_headers,
    )
    assert res.status_code == 409
    assert res.json()["error"] == "Email already exists"


async def test_only_superadmin_creates_superadmin(client, admin_headers, super_headers):
    body = {"email": "boss@example.com", "password": PASSWORD, "role": "superadmin"}

    assert (await client.post("/admin", json=body, headers=admin_headers)).status_code == 403

    res = await client.post("/admin", json=body, headers=super_headers)
    assert res.status_code == 201
    assert res.json()["data"]["role"] == "superadmin"


async def test_invite_sends_set_password_link(client, admin_headers, email_service):
    res = await client.post("/admin", json={"email": "invitee@example.com"}, headers=admin_headers)

    assert res.status_code == 201
    body = res.json()
    assert body["inviteSent"] is True
    assert body["data"]["is_active"] is False

    assert len(email_service.sent) == 1
    mail = email_service.sent[0]
    assert mail["to"] == ["invitee@example.com"]
    assert "http://front.test/set-password?token=" in mail["html"]

    token = mail["text"].split("token=")[1].split()[0]
    res = await client.post(
        "/auth/set-password",
        json={"token": token, "password": "chosen-pass1", "confirmPassword": "chosen-pass1"},
    )
    assert res.status_code == 200
    await login(client, "invitee@example.com", "chosen-pass1")


async def test_invite_survives_mail_failure(client, admin_headers, super_headers, email_service):
    email_service.fail = True

    res = await client.post("/admin", json={"email": "unlucky@example.com"}, headers=admin_headers)

    assert res.status_code == 201
    assert res.json()["inviteSent"] is False
    listed = await client.get("/admin", headers=super_headers)
    assert "unlucky@example.com" in {a["email"] for a in listed.json()}


async def test_create_admin_validation(client, admin_headers):
    res = await client.post(
        "/admin",
        json={"email": "nope", "password": "short"},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert {d["field"] for d in res.json()["details"]} == {"email", "password"}


# ---------------- update ----------------
async def test_deactivate_admin(client, create_admin, admin_headers):
    target = await create_admin("target@example.com")

    res = await client.patch(f"/admin/{target.id}", json={"is_active": False}, headers=admin_headers)

    assert res.status_code == 200
    assert res.json()["is_active"] is False
    login_res = await client.post("/auth/login", json={"email": "target@example.com", "password": PASSWORD})
    assert login_res.status_code == 403


async def test_update_rejects_email_password_and_empty_bodies(client, create_admin, admin_headers):
    target = await create_admin("target@example.com")

    for body in ({"email": "x@example.com"}, {"password": "whatever123"}, {}, {"nickname": "x"}):
        res = await client.patch(f"/admin/{target.id}", json=body, headers=admin_headers)
        assert res.status_code == 400, body


async def test_update_requires_boolean_status(client, create_admin, admin_headers):
    target = await create_admin("target@example.com")
    res = await client.patch(f"/admin/{target.id}", json={"is_active": "no"}, headers=admin_headers)
    assert res.status_code == 400


async def test_update_missing_admin(client, admin_headers):
    res = await client.patch("/admin/9999", json={"is_active": False}, headers=admin_headers)
    assert res.status_code == 404


async def test_superadmin_cannot_be_modified(client, superadmin, admin_headers, super_headers):
    for headers in (admin_headers, super_headers):
        res = await client.patch(f"/admin/{superadmin.id}", json={"is_active": False}, headers=headers)
        assert res.status_code == 403


async def test_admin_cannot_deactivate_self(client, admin, admin_headers):
    res = await client.patch(f"/admin/{admin.id}", json={"is_active": False}, headers=admin_headers)
    assert res.status_code == 403
    assert res.json()["error"] == "You cannot deactivate your own account"


async def test_role_promotion_needs_superadmin(client, create_admin, admin_headers, super_headers):
    target = await create_admin("target@example.com")

    denied = await client.patch(f"/admin/{target.id}", json={"role": "superadmin"}, headers=admin_headers)
    assert denied.status_code == 403

    granted = await client.patch(f"/admin/{target.id}", json={"role": "superadmin"}, headers=super_headers)
    assert granted.status_code == 200
    assert granted.json()["role"] == "superadmin"


# ---------------- delete ----------------
async def test_delete_admin(client, create_admin, admin_headers):
    target = await create_admin("target@example.com")

    res = await client.delete(f"/admin/{target.id}", headers=admin_headers)

    assert res.status_code == 200
    assert res.json()["message"] == "Admin deleted successfully"
    assert (await client.get(f"/admin/{target.id}", headers=admin_headers)).status_code == 404
    assert (await client.delete(f"/admin/{target.id}", headers=admin_headers)).status_code == 404


async def test_cannot_delete_self_or_superadmin(client, admin, superadmin, admin_headers, super_headers):
    assert (await client.delete(f"/admin/{admin.id}", headers=admin_headers)).status_code == 403
    assert (await client.delete(f"/admin/{superadmin.id}", headers=admin_headers)).status_code == 403
    assert (await client.delete(f"/admin/{superadmin.id}", headers=super_headers)).status_code == 403


async def test_deleted_admin_token_stops_working(client, create_admin, admin_headers):
    target = await create_admin("target@example.com")
    target_headers = await auth_headers(client, target.email)

    await client.delete(f"/admin/{target.id}", headers=admin_headers)

    res = await client.get("/content", headers=target_headers)
    assert res.status_code == 401


# ---------------- activity ----------------
async def test_admin_activity(client, admin, superadmin, admin_headers, super_headers):
    await client.put("/content", json={"data": {"by": "editor"}}, headers=admin_headers)
    await client.put("/content", json={"data": {"by": "root"}}, headers=super_headers)

    res = await client.get(f"/admin/{admin.id}/activity", headers=super_headers)

    assert res.status_code == 200
    entries = res.json()
    assert [e["content"] for e in entries] == [{"by": "editor"}]
    assert entries[0]["email"] == admin.email

    assert (await client.get("/admin/9999/activity", headers=super_headers)).status_code == 404
