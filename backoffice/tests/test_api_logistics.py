from datetime import date


def _order(client, transitaire_id, supplier_id, product_id, quantity=40):
    return client.post(
        "/v1/orders",
        json={
            "supplier_id": supplier_id,
            "transitaire_id": transitaire_id,
            "lines": [{"product_id": product_id, "quantity": quantity, "unit_price": 1}],
        },
    ).json()


def _setup(client):
    t1 = client.post("/v1/transitaires", json={"name": "CMA CGM Log"}).json()
    t2 = client.post("/v1/transitaires", json={"name": "Geodis"}).json()
    supplier = client.post("/v1/suppliers", json={"name": "Yiwu Market"}).json()
    product = client.post("/v1/products", json={"sku": "BOX-1", "name": "Boîte"}).json()
    return t1, t2, supplier, product


def test_container_presets_and_assignment(client):
    t1, t2, supplier, product = _setup(client)

    r = client.post("/v1/containers", json={"number": "MSCU1234567", "type": "20_feet", "transitaire_id": t1["id"]})
    assert r.status_code == 200
    created = r.json()
    assert created["reservation_number"] == f"RES-{date.today().year}-0001"
    assert client.post(
        "/v1/containers", json={"number": "MSCU1234567", "type": "20_feet", "transitaire_id": t1["id"]}
    ).status_code == 409
    assert client.post(
        "/v1/containers", json={"number": "MSCU0000001", "type": "40_feet", "transitaire_id": 999999}
    ).status_code == 400

    container = client.get(f"/v1/containers/{created['id']}").json()
    assert container["type"] == "20_feet"
    assert (container["max_pallets"], container["max_weight"], container["max_volume"]) == (11, 21000.0, 33.0)

    mine = _order(client, t1["id"], supplier["id"], product["id"])
    other = _order(client, t2["id"], supplier["id"], product["id"])

    eligible = client.get(f"/v1/containers/{created['id']}/eligible-orders").json()
    assert [(o["id"], o["can_add"], o["pallets"]) for o in eligible] == [(mine["id"], True, 2)]

    r = client.post(f"/v1/containers/{created['id']}/orders", json={"order_id": other["id"]})
    assert r.status_code == 400
    assert r.json()["detail"] == "Transitaire différent"

    assert client.post(f"/v1/containers/{created['id']}/orders", json={"order_id": mine["id"]}).status_code == 200
    plan = client.get(f"/v1/containers/{created['id']}/plan").json()
    assert [o["id"] for o in plan["orders"]] == [mine["id"]]
    assert plan["totals"]["total_pallets"] == 2.0
    assert plan["totals"]["total_value"] == 48.0

    r = client.delete(f"/v1/containers/{created['id']}/orders/{mine['id']}")
    assert r.json() == {"order_id": mine["id"], "container_id": None}
    assert client.delete(f"/v1/containers/{created['id']}/orders/{mine['id']}").status_code == 404


def test_groupage_booking_flow(client):
    t1, t2, supplier, product = _setup(client)
    container = client.post(
        "/v1/containers", json={"number": "GRP0000001", "type": "groupage", "transitaire_id": t1["id"]}
    ).json()

    g = client.post("/v1/groupages", json={"container_id": container["id"], "cost_per_palette": 50}).json()
    assert g["transitaire_id"] == t1["id"]
    groupage = client.get(f"/v1/groupages/{g['id']}").json()
    assert groupage["status"] == "available"
    assert groupage["available_space_pallets"] == groupage["max_space_pallets"] == 33

    order = _order(client, t1["id"], supplier["id"], product["id"])
    r = client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": order["id"]})
    assert r.status_code == 200
    booking = r.json()
    assert booking["palettes_booked"] == 2
    assert booking["cost_calculated"] == 100.0
    assert booking["booking_status"] == "pending"

    assert client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": order["id"]}).status_code == 409

    foreign = _order(client, t2["id"], supplier["id"], product["id"])
    r = client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": foreign["id"]})
    assert r.status_code == 400
    assert r.json()["detail"] == "Transitaire différent"

    r = client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": order["id"], "palettes": 40})
    assert r.status_code == 409

    plan = client.get(f"/v1/groupages/{g['id']}/plan").json()
    assert plan["available_space_pallets"] == 31
    assert plan["totals"]["total_pallets"] == 2.0
    assert [b["order_id"] for b in plan["bookings"]] == [order["id"]]

    r = client.post(f"/v1/groupages/{g['id']}/bookings/{booking['id']}/decision", json={"confirm": False})
    assert r.json()["booking_status"] == "cancelled"
    assert client.get(f"/v1/groupages/{g['id']}").json()["available_space_pallets"] == 33

    eligible = client.get(f"/v1/groupages/{g['id']}/eligible-orders").json()
    assert [o["id"] for o in eligible] == [order["id"]]

    big = _order(client, t1["id"], supplier["id"], product["id"], quantity=2000)
    r = client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": big["id"]})
    assert r.status_code == 400
    assert r.json()["detail"] == "Capacité insuffisante"

    assert client.post("/v1/groupages/999999/bookings", json={"order_id": order["id"]}).status_code == 404


def test_remove_booking(client):
    t1, _, supplier, product = _setup(client)
    container = client.post(
        "/v1/containers", json={"number": "GRP0000002", "type": "groupage", "transitaire_id": t1["id"]}
    ).json()
    g = client.post("/v1/groupages", json={"container_id": container["id"], "max_space_pallets": 2}).json()
    order = _order(client, t1["id"], supplier["id"], product["id"])

    booking = client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": order["id"]}).json()
    assert client.get(f"/v1/groupages/{g['id']}").json()["status"] == "full"

    assert client.delete(f"/v1/groupages/{g['id']}/bookings/{booking['id']}").status_code == 200
    groupage = client.get(f"/v1/groupages/{g['id']}").json()
    assert groupage["status"] == "available"
    assert groupage["available_space_pallets"] == 2
    assert client.get(f"/v1/groupages/{g['id']}/bookings").json() == []


def test_imdg_endpoints(client):
    rules = client.get("/v1/imdg/rules").json()
    assert len(rules) == 15
    assert rules[0]["imdg_class"] == "Classe 1"

    r = client.post("/v1/imdg/check", json={"classes": ["Classe 3", "Classe 5.1", None]}).json()
    assert r["compatible"] is False
    assert r["conflicts"][0]["class1"] == "Classe 3"

    assert client.post("/v1/imdg/check", json={"classes": ["Classe 3", "Classe 9"]}).json()["compatible"] is True


def test_capacity_updates_cannot_undercut_loaded_goods(client):
    t1, _, supplier, product = _setup(client)
    container = client.post(
        "/v1/containers", json={"number": "MSCU2222222", "type": "20_feet", "transitaire_id": t1["id"]}
    ).json()
    order = _order(client, t1["id"], supplier["id"], product["id"])
    assert client.post(f"/v1/containers/{container['id']}/orders", json={"order_id": order["id"]}).status_code == 200

    r = client.patch(f"/v1/containers/{container['id']}", json={"max_pallets": 1})
    assert r.status_code == 409
    assert r.json()["detail"] == "2 pallets already loaded"
    assert client.patch(f"/v1/containers/{container['id']}", json={"max_pallets": 2}).json()["max_pallets"] == 2
    assert client.patch(f"/v1/containers/{container['id']}", json={"status": None}).status_code == 400

    grp = client.post(
        "/v1/containers", json={"number": "GRP0000003", "type": "groupage", "transitaire_id": t1["id"]}
    ).json()
    g = client.post("/v1/groupages", json={"container_id": grp["id"], "max_space_pallets": 2}).json()
    booked = _order(client, t1["id"], supplier["id"], product["id"])
    client.post(f"/v1/groupages/{g['id']}/bookings", json={"order_id": booked["id"]})
    assert client.get(f"/v1/groupages/{g['id']}").json()["status"] == "full"

    assert client.patch(f"/v1/groupages/{g['id']}", json={"status": "available"}).status_code == 409
    assert client.patch(f"/v1/groupages/{g['id']}", json={"status": None}).status_code == 400
    assert client.patch(f"/v1/groupages/{g['id']}", json={"status": "departed"}).json()["status"] == "departed"
