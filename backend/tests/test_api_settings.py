from builders import PASSWORD, register_and_login


def test_settings_show_account(client, auth_headers):
    resp = client.get("/settings", headers=auth_headers)
    assert resp.json() == {"username": "owner", "view_password_enabled": True}


def test_change_username_requires_password(client, auth_headers):
    resp = client.patch("/settings/username", json={"new_username": "boss", "password": "nope-nope"}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.patch("/settings/username", json={"new_username": "boss", "password": PASSWORD}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == "boss"
    assert client.get("/auth/me", headers=auth_headers).json()["username"] == "boss"


def test_change_username_to_taken_name_conflicts(client, auth_headers):
    register_and_login(client, username="taken")

    resp = client.patch("/settings/username", json={"new_username": "taken", "password": PASSWORD}, headers=auth_headers)
    assert resp.status_code == 409


def test_change_password(client, auth_headers):
    resp = client.patch(
        "/settings/password",
        json={"current_password": PASSWORD, "new_password": "brand-new-pass"},
        headers=auth_headers,
    )
    assert resp.status_code == 200

    assert client.post("/auth/login", json={"username": "owner", "password": PASSWORD}).status_code == 401
    assert client.post("/auth/login", json={"username": "owner", "password": "brand-new-pass"}).status_code == 200


def test_change_password_enforces_length(client, auth_headers):
    resp = client.patch(
        "/settings/password",
        json={"current_password": PASSWORD, "new_password": "tiny"},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_disabling_view_password_needs_password(client, auth_headers):
    resp = client.patch("/settings/view-password", json={"enabled": False}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.patch("/settings/view-password", json={"enabled": False, "password": PASSWORD}, headers=auth_headers)
    assert resp.json()["view_password_enabled"] is False

    resp = client.patch("/settings/view-password", json={"enabled": True}, headers=auth_headers)
    assert resp.json()["view_password_enabled"] is True


def test_verify_password(client, auth_headers):
    assert client.post("/settings/verify-password", json={"password": PASSWORD}, headers=auth_headers).json() == {"valid": True}
    assert client.post("/settings/verify-password", json={"password": "nope"}, headers=auth_headers).status_code == 400


def test_clear_data_keeps_account(client, auth_headers):
    voucher = {
        "date": "2024-01-15", "name": "PVC Resin", "code": "RM-PVC",
        "quantity": 60, "quantity_type": "KG", "price_per_unit": 12,
    }
    client.post("/vouchers", json=voucher, headers=auth_headers)
    client.post("/processes", json={
        "date": "2024-01-15", "process_name": "Batch 1", "total_process_output": 60, "output_unit": "KG",
        "raw_materials": [{"name": "PVC Resin", "code": "RM-PVC", "quantity_type": "KG", "quantity": 60}],
    }, headers=auth_headers)

    resp = client.delete("/settings/data", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["deleted"] == {"vouchers": 2, "sales": 0, "outputs": 0, "processes": 1}

    assert client.get("/vouchers", headers=auth_headers).json() == []
    assert client.get("/processes", headers=auth_headers).json() == []
    assert client.get("/auth/me", headers=auth_headers).status_code == 200
