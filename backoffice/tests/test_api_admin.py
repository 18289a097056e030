from datetime import date
from hashlib import sha256

from backoffice.app.db.models.core_types import Role
from backoffice.app.db.models.models_v1 import User


def _headers(user):
    return {"X-User-Id": str(user.id)}


def test_user_management_requires_admin(client, db_session, admin):
    basic = User(email="jean@test.local", role=Role.user)
    db_session.add(basic)
    db_session.flush()

    payload = {"email": "Marie@Test.local", "full_name": "Marie", "role": "moderator"}
    assert client.post("/v1/users", json=payload).status_code == 401
    assert client.post("/v1/users", json=payload, headers=_headers(basic)).status_code == 403
    assert client.post("/v1/users", json=payload, headers={"X-User-Id": "999999"}).status_code == 401

    r = client.post("/v1/users", json=payload, headers=_headers(admin))
    assert r.status_code == 200
    created = r.json()
    assert created["email"] == "marie@test.local"
    assert created["role"] == "moderator"
    assert client.post("/v1/users", json=payload, headers=_headers(admin)).status_code == 409

    r = client.patch(f"/v1/users/{created['id']}", json={"department": "Achats"}, headers=_headers(admin))
    assert r.json()["department"] == "Achats"
    assert client.patch(f"/v1/users/{admin.id}", json={"role": "user"}, headers=_headers(admin)).status_code == 409

    r = client.post(f"/v1/users/{basic.id}/disable", headers=_headers(admin))
    assert r.json()["active"] is False
    assert client.get("/v1/users/me", headers=_headers(basic)).status_code == 401

    me = client.get("/v1/users/me", headers=_headers(admin)).json()
    assert me["role"] == "admin"
    assert {u["email"] for u in client.get("/v1/users").json()} == {
        "admin@test.local",
        "jean@test.local",
        "marie@test.local",
    }


def test_trash_via_api(client, admin):
    supplier = client.post("/v1/suppliers", json={"name": "Temu Pro"}).json()

    r = client.delete(f"/v1/suppliers/{supplier['id']}", params={"reason": "plus actif"}, headers=_headers(admin))
    assert r.status_code == 200
    trash_id = r.json()["trash_id"]
    assert client.get(f"/v1/suppliers/{supplier['id']}").status_code == 404

    items = client.get("/v1/trash").json()
    assert len(items) == 1
    assert items[0]["table_name"] == "suppliers"
    assert items[0]["reason"] == "plus actif"
    assert items[0]["deleted_by"] == admin.id
    assert items[0]["days_left"] == 45

    r = client.post(f"/v1/trash/{trash_id}/restore")
    assert r.json() == {"table_name": "suppliers", "item_id": supplier["id"]}
    assert client.get(f"/v1/suppliers/{supplier['id']}").json()["name"] == "Temu Pro"
    assert client.post(f"/v1/trash/{trash_id}/restore").status_code == 404

    r = client.post("/v1/trash", json={"table_name": "suppliers", "item_id": supplier["id"]})
    trash_id = r.json()["trash_id"]
    assert client.delete(f"/v1/trash/{trash_id}").status_code == 200
    assert client.get("/v1/trash").json() == []

    assert client.post("/v1/trash", json={"table_name": "users", "item_id": admin.id}).status_code == 400
    assert client.post("/v1/trash/cleanup").json()["deleted_count"] == 0


def test_referenced_supplier_cannot_be_deleted(client):
    supplier = client.post("/v1/suppliers", json={"name": "Lié"}).json()
    client.post("/v1/orders", json={"supplier_id": supplier["id"]})

    r = client.delete(f"/v1/suppliers/{supplier['id']}")
    assert r.status_code == 409
    assert "orders" in r.json()["detail"]


def test_documents(client, admin):
    r = client.post(
        "/v1/documents",
        files={"file": ("BL mars 2026.pdf", b"contenu du BL", "application/pdf")},
        data={"entity_type": "orders", "entity_id": "12"},
        headers=_headers(admin),
    )
    assert r.status_code == 200
    doc = r.json()
    assert doc["filename"] == "BL mars 2026.pdf"
    assert doc["size"] == len(b"contenu du BL")
    assert doc["sha256"] == sha256(b"contenu du BL").hexdigest()
    assert doc["uploaded_by"] == admin.id

    listed = client.get("/v1/documents", params={"entity_type": "orders", "entity_id": 12}).json()
    assert [d["id"] for d in listed] == [doc["id"]]
    assert client.get("/v1/documents", params={"entity_type": "clients"}).json() == []

    r = client.get(f"/v1/documents/{doc['id']}/download")
    assert r.status_code == 200
    assert r.content == b"contenu du BL"

    assert client.delete(f"/v1/documents/{doc['id']}").status_code == 200
    assert client.get(f"/v1/documents/{doc['id']}/download").status_code == 404


def test_numbers_and_dashboard(client):
    year = date.today().year
    assert client.post("/v1/numbers", json={"entity_type": "reservation"}).json() == {"number": f"RES-{year}-0001"}
    assert client.post("/v1/numbers", json={"entity_type": "reservation"}).json() == {"number": f"RES-{year}-0002"}
    r = client.post("/v1/numbers", json={"entity_type": "invoice"})
    assert r.status_code == 400

    supplier = client.post("/v1/suppliers", json={"name": "Dash"}).json()
    client.post("/v1/orders", json={"supplier_id": supplier["id"]})

    summary = client.get("/v1/dashboard/summary").json()
    assert summary["suppliers"] == 1
    assert summary["orders"] == 1
    assert summary["orders_by_workflow"] == {"request": 1}


def test_trash_move_records_the_caller(client, admin):
    supplier = client.post("/v1/suppliers", json={"name": "Alibaba Pro"}).json()

    r = client.post(
        "/v1/trash",
        json={"table_name": "suppliers", "item_id": supplier["id"], "deleted_by": 424242},
        headers=_headers(admin),
    )
    assert r.status_code == 200
    assert client.get("/v1/trash").json()[0]["deleted_by"] == admin.id


def test_workflow_advance_requires_permission(client, db_session, admin):
    member = User(email="membre@test.local", role=Role.user)
    manager = User(email="chef@test.local", role=Role.moderator)
    db_session.add_all([member, manager])
    db_session.flush()

    supplier = client.post("/v1/suppliers", json={"name": "Guangzhou Deco"}).json()
    order = client.post("/v1/orders", json={"supplier_id": supplier["id"]}).json()
    url = f"/v1/orders/{order['id']}/workflow/advance"

    assert client.post(url, json={"status": "approve"}).status_code == 401
    assert client.post(url, json={"status": "approve"}, headers=_headers(member)).status_code == 403
    r = client.post(url, json={"status": "approve"}, headers=_headers(manager))
    assert r.status_code == 200
    assert r.json()["approvals"][0]["approved_by"] == manager.id

    perm_url = f"/v1/users/{manager.id}/permissions"
    revoke = {"module": "orders", "action": "procure", "granted": False}
    assert client.put(perm_url, json=revoke, headers=_headers(member)).status_code == 403
    assert client.put(perm_url, json=revoke, headers=_headers(admin)).status_code == 200
    assert client.post(url, json={"status": "procure"}, headers=_headers(manager)).status_code == 403

    perms = client.get(perm_url).json()
    procure = next(p for p in perms if (p["module"], p["action"]) == ("orders", "procure"))
    assert procure == {"module": "orders", "action": "procure", "granted": False, "source": "user"}
    unknown = {"module": "orders", "action": "fly", "granted": True}
    assert client.put(perm_url, json=unknown, headers=_headers(admin)).status_code == 400

    assert client.delete(f"{perm_url}/orders/procure", headers=_headers(admin)).status_code == 200
    assert client.delete(f"{perm_url}/orders/procure", headers=_headers(admin)).status_code == 404
    assert client.post(url, json={"status": "procure"}, headers=_headers(manager)).status_code == 200

    assert client.delete(f"/v1/orders/{order['id']}", headers=_headers(manager)).status_code == 403
    assert client.delete(f"/v1/orders/{order['id']}", headers=_headers(admin)).status_code == 200


def test_user_patch_rejects_null(client, admin):
    assert client.patch(f"/v1/users/{admin.id}", json={"active": None}, headers=_headers(admin)).status_code == 400
    assert client.patch(f"/v1/users/{admin.id}", json={"role": None}, headers=_headers(admin)).status_code == 400
    assert client.patch(f"/v1/users/{admin.id}", json={"phone": None}, headers=_headers(admin)).status_code == 200
