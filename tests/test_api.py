from __future__ import annotations

import io

import pytest

OFFICE = {"latitude": 12.9716, "longitude": 77.5946}
FAR_AWAY = {"latitude": 12.9850, "longitude": 77.5946}


def _register(client, username="acme", gst="29ABCDE1234F1Z5", plan="FREE"):
    resp = client.post(
        "/api/tenants/register",
        json={
            "tenantName": "Acme Pvt Ltd",
            "gst": gst,
            "address": "MG Road, Bengaluru",
            "username": username,
            "password": "s3cret-pass",
            "planType": plan,
            **OFFICE,
        },
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def _auth(tokens):
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


def _create_employee(client, tokens, name="Asha"):
    resp = client.post(
        "/api/employees",
        headers=_auth(tokens),
        json={
            "name": name,
            "photoUrl": f"https://bucket/employees/{name}.jpg",
            "embedding": [0.1, 0.2, 0.3],
            "salary": 42000,
            "emergencyContactNumber": "9000000001",
            "contactNumber": "9000000002",
        },
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "OK"}


def test_register_login_profile(client):
    data = _register(client)
    assert data["tenant"]["planType"] == "FREE"
    assert "passwordHash" not in data["tenant"]

    resp = client.post("/api/tenants/login", json={"username": "acme", "password": "s3cret-pass"})
    assert resp.status_code == 200

    resp = client.get("/api/tenants/profile", headers=_auth(resp.get_json()["data"]))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "acme"


def test_errors_render_as_json(client):
    _register(client)

    dup = client.post(
        "/api/tenants/register",
        json={"tenantName": "X", "gst": "OTHER", "address": "Y", "username": "acme", "password": "s3cret-pass", **OFFICE},
    )
    assert dup.status_code == 409
    assert dup.get_json() == {"success": False, "message": "Username already exists"}

    bad = client.post("/api/tenants/login", json={"username": "acme", "password": "nope"})
    assert bad.status_code == 401

    assert client.get("/api/tenants/profile").status_code == 401
    assert client.get("/api/tenants/profile", headers={"Authorization": "Bearer junk"}).status_code == 401
    assert client.post("/api/tenants/login", data="not json").status_code == 400
    assert client.get("/no-such-route").status_code == 404


def test_refresh_rotation_over_http(client):
    tokens = _register(client)

    first = client.post("/api/tenants/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert first.status_code == 200

    replay = client.post("/api/tenants/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert replay.status_code == 401

    new_tokens = first.get_json()["data"]
    resp = client.post("/api/tenants/logout", headers=_auth(new_tokens), json={"refreshToken": new_tokens["refreshToken"]})
    assert resp.status_code == 200
    assert client.post("/api/tenants/refresh-token", json={"refreshToken": new_tokens["refreshToken"]}).status_code == 401


def test_employee_crud_is_tenant_isolated(client):
    mine = _register(client)
    theirs = _register(client, username="other", gst="29ZZZZZ9999Z1Z5")
    employee = _create_employee(client, mine)

    listing = client.get("/api/employees?page=1&limit=5", headers=_auth(mine)).get_json()["data"]
    assert listing["pagination"] == {"total": 1, "page": 1, "limit": 5, "totalPages": 1}

    url = f"/api/employees/{employee['id']}"
    assert client.get(url, headers=_auth(theirs)).status_code == 403
    assert client.patch(url, headers=_auth(theirs), json={"name": "X"}).status_code == 403
    assert client.delete(url, headers=_auth(theirs)).status_code == 403

    updated = client.patch(url, headers=_auth(mine), json={"contactNumber": "9111111111"})
    assert updated.get_json()["data"]["contactNumber"] == "9111111111"

    detail = client.get(url, headers=_auth(mine)).get_json()["data"]
    assert detail["attendances"] == []

    assert client.delete(url, headers=_auth(mine)).status_code == 200
    assert client.get(url, headers=_auth(mine)).status_code == 404


def test_two_phase_check_in_over_http(client):
    tokens = _register(client)
    employee = _create_employee(client, tokens)

    inside = client.post("/api/attendance/location-check", json={"employeeId": employee["id"], **OFFICE})
    assert inside.status_code == 200
    assert inside.get_json()["data"]["success"] is False

    outside = client.post("/api/attendance/location-check", json={"employeeId": employee["id"], **FAR_AWAY})
    proof = outside.get_json()["data"]["locationToken"]

    payload = {
        "employeeId": employee["id"],
        "photoUrl": "https://bucket/attendance/selfie.jpg",
        "embedding": [0.1, 0.2, 0.3],
        "locationToken": proof,
    }
    first = client.post("/api/attendance/check-in", json=payload)
    assert first.status_code == 201
    assert first.get_json()["data"]["matchConfidence"] is None

    again = client.post("/api/attendance/check-in", json=payload)
    assert again.status_code == 409

    history = client.get(f"/api/attendance/employee/{employee['id']}", headers=_auth(tokens)).get_json()["data"]
    assert history["pagination"]["total"] == 1

    report = client.get(
        "/api/attendance/report?startDate=2026-03-01&endDate=2026-03-31", headers=_auth(tokens)
    ).get_json()["data"]
    assert report["total"] == 1
    assert report["report"][0]["employee"]["name"] == "Asha"


@pytest.mark.parametrize("token", ["", "garbage"])
def test_check_in_without_valid_proof_is_401(client, token):
    tokens = _register(client)
    employee = _create_employee(client, tokens)

    resp = client.post(
        "/api/attendance/check-in",
        json={"employeeId": employee["id"], "photoUrl": "https://x", "embedding": [0.1], "locationToken": token},
    )

    assert resp.status_code == 401


def test_report_requires_dates(client):
    tokens = _register(client)

    assert client.get("/api/attendance/report", headers=_auth(tokens)).status_code == 400
    bad = client.get("/api/attendance/report?startDate=03/01/2026&endDate=2026-03-31", headers=_auth(tokens))
    assert bad.status_code == 400


def test_photo_uploads(client, object_store):
    tokens = _register(client)

    resp = client.post(
        "/api/photos/employee",
        headers=_auth(tokens),
        data={"photo": (io.BytesIO(b"jpeg-bytes"), "face.jpg", "image/jpeg")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["photoUrl"].startswith("https://")

    missing = client.post("/api/photos/employee", headers=_auth(tokens), data={}, content_type="multipart/form-data")
    assert missing.status_code == 400

    no_proof = client.post(
        "/api/photos/attendance",
        data={"photo": (io.BytesIO(b"jpeg-bytes"), "face.jpg", "image/jpeg"), "locationToken": "junk"},
        content_type="multipart/form-data",
    )
    assert no_proof.status_code == 401
    assert len(object_store.objects) == 1


def test_unexpected_errors_are_generic_500(client, container, monkeypatch):
    tokens = _register(client)

    def boom(*args, **kwargs):
        raise RuntimeError("db exploded")

    monkeypatch.setattr(container.profile_service, "get_profile", boom)
    resp = client.get("/api/tenants/profile", headers=_auth(tokens))

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Internal server error"}


def test_patch_with_id_keys_is_400(client):
    tokens = _register(client)
    employee = _create_employee(client, tokens)

    resp = client.patch(f"/api/employees/{employee['id']}", headers=_auth(tokens), json={"tenant_id": "x"})
    assert resp.status_code == 400
    resp = client.patch(f"/api/employees/{employee['id']}", headers=_auth(tokens), json={"employee_id": "x"})
    assert resp.status_code == 400
    resp = client.patch("/api/tenants/profile", headers=_auth(tokens), json={"tenant_id": "x"})
    assert resp.status_code == 400
