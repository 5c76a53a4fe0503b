import pytest

from core.notifications import Subscription

ALICE = {"x-username": "alice"}


def _create(client, body, headers=ALICE):
    return client.post("/api/inventory", json=body, headers=headers)


def test_create_then_list(client, widget):
    res = _create(client, widget)
    assert res.status_code == 200
    assert res.json() == {"id": 1}

    res = client.get("/api/inventory")
    assert res.status_code == 200
    body = res.json()
    (item,) = body["items"]
    assert item["part_number"] == "A1"
    assert item["quantity"] == 10
    assert item["description"] == ""
    assert item["last_stock_count"] is None
    assert body["pagination"] == {"currentPage": 1, "itemsPerPage": 25, "totalItems": 1, "totalPages": 1}


def test_update_and_delete_flow(client, widget):
    _create(client, widget)

    res = client.put("/api/inventory/1", json={**widget, "quantity": 7}, headers=ALICE)
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert client.get("/api/inventory").json()["items"][0]["quantity"] == 7

    res = client.delete("/api/inventory/1", headers={"x-username": "bob"})
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert client.get("/api/inventory").json()["items"] == []

    logs = client.get("/api/audit-logs").json()["logs"]
    assert [(log["action"], log["username"]) for log in logs] == [
        ("DELETE", "bob"),
        ("UPDATE", "alice"),
        ("CREATE", "alice"),
    ]


def test_update_with_now_sets_stock_count(client, widget):
    _create(client, widget)
    client.put("/api/inventory/1", json={**widget, "last_stock_count": "now"}, headers=ALICE)

    item = client.get("/api/inventory").json()["items"][0]
    assert item["last_stock_count"] is not None
    assert item["last_stock_count"] == item["last_modified"]


def test_missing_username_is_rejected_without_writing(client, widget):
    res = _create(client, widget, headers={})
    assert res.status_code == 400
    assert res.json() == {"detail": "Username is required"}

    assert client.get("/api/inventory").json()["pagination"]["totalItems"] == 0
    assert client.get("/api/audit-logs").json()["logs"] == []


def test_blank_username_is_rejected(client, widget):
    _create(client, widget)
    res = client.delete("/api/inventory/1", headers={"x-username": "  "})
    assert res.status_code == 400
    assert client.get("/api/inventory").json()["pagination"]["totalItems"] == 1


def test_unknown_id_is_not_found(client, widget):
    res = client.put("/api/inventory/999", json=widget, headers=ALICE)
    assert res.status_code == 404
    assert res.json() == {"detail": "Item not found"}

    res = client.delete("/api/inventory/999", headers=ALICE)
    assert res.status_code == 404
    assert client.get("/api/audit-logs").json()["logs"] == []


@pytest.mark.parametrize("raw_id", ["abc", "1.5", "0", "-3"])
def test_malformed_id_is_a_bad_request(client, widget, raw_id):
    res = client.put(f"/api/inventory/{raw_id}", json=widget, headers=ALICE)
    assert res.status_code == 400
    assert res.json() == {"detail": ["Invalid ID format"]}

    res = client.delete(f"/api/inventory/{raw_id}", headers=ALICE)
    assert res.status_code == 400


def test_field_errors_are_listed(client, widget):
    res = _create(client, {**widget, "purchase_price": "2.5", "quantity": 1.5}, headers=ALICE)
    assert res.status_code == 400
    assert res.json() == {"detail": ["Invalid purchase_price", "Invalid quantity"]}


def test_non_object_body_is_a_bad_request(client):
    res = client.post("/api/inventory", json=[1, 2, 3], headers=ALICE)
    assert res.status_code == 400
    assert isinstance(res.json()["detail"], list)

    res = client.post(
        "/api/inventory",
        content=b"{not json",
        headers={**ALICE, "content-type": "application/json"},
    )
    assert res.status_code == 400


def test_invalid_sort_column(client):
    res = client.get("/api/inventory", params={"sortBy": "password"})
    assert res.status_code == 400
    assert res.json() == {"detail": ["Invalid sort column"]}


def test_search_sort_and_paging_params(client, widget):
    for i, name in enumerate(["Gasket", "Bolt", "Bolt washer"]):
        _create(client, {**widget, "part_number": f"P{i}", "name": name, "quantity": i})

    res = client.get(
        "/api/inventory",
        params={"searchQuery": "BOLT", "sortBy": "quantity", "sortOrder": "desc", "itemsPerPage": "1", "page": "2"},
    )
    body = res.json()
    assert [it["name"] for it in body["items"]] == ["Bolt"]
    assert body["pagination"] == {"currentPage": 2, "itemsPerPage": 1, "totalItems": 2, "totalPages": 2}


def test_bad_paging_values_fall_back(client, widget):
    _create(client, widget)
    body = client.get("/api/inventory", params={"page": "zero", "itemsPerPage": "-5"}).json()
    assert body["pagination"]["currentPage"] == 1
    assert body["pagination"]["itemsPerPage"] == 25
    assert len(body["items"]) == 1


def test_audit_log_entries_carry_item_details(client, widget):
    _create(client, widget)
    client.put("/api/inventory/1", json={**widget, "name": "Widget v2"}, headers=ALICE)

    logs = client.get("/api/audit-logs", params={"itemsPerPage": 1}).json()
    (entry,) = logs["logs"]
    assert entry["action"] == "UPDATE"
    assert entry["item_name"] == "Widget v2"
    assert entry["item_part_number"] == "A1"
    assert entry["old_value"]["name"] == "Widget"
    assert entry["new_value"]["name"] == "Widget v2"
    assert logs["pagination"]["totalItems"] == 2
    assert logs["pagination"]["totalPages"] == 2


def test_mutations_notify_subscribers(client, bus, widget):
    sub = Subscription(id=1)
    bus._subscribers.append(sub)

    _create(client, widget)
    client.put("/api/inventory/1", json=widget, headers=ALICE)
    _create(client, {**widget, "part_number": "A2"}, headers={})

    events = []
    while not sub.queue.empty():
        events.append(sub.queue.get_nowait())
    assert events == [{"type": "update", "count": 1}, {"type": "update", "count": 1}]


def test_out_of_range_numbers_are_client_errors(client, widget):
    res = _create(client, {**widget, "quantity": 2**70})
    assert res.status_code == 400
    assert res.json() == {"detail": ["Invalid quantity"]}
    assert client.get("/api/inventory").json()["pagination"]["totalItems"] == 0

    huge = "10000000000000000000"
    assert client.get("/api/inventory", params={"page": huge}).status_code == 200
    res = client.get("/api/audit-logs", params={"itemsPerPage": huge})
    assert res.status_code == 200
    assert res.json()["pagination"]["itemsPerPage"] == 25

    res = client.delete(f"/api/inventory/{huge}", headers=ALICE)
    assert res.status_code == 400
