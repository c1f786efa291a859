"""HTTP tests for sales, withdrawals and health endpoints."""


def _sale_body(created_at_ms=1000, qty=2):
    return {
        "items": [
            {"product_id": 1, "product_name_snapshot": "Coffee",
             "unit_price_snapshot_cents": 250, "qty": qty},
        ],
        "created_at_ms": created_at_ms,
    }


def test_create_and_list_sales(client, db_session):
    res = client.post("/api/sales", json=_sale_body())
    assert res.status_code == 201
    body = res.get_json()
    assert body["sale"]["total_cents"] == 500
    assert body["items"][0]["line_total_cents"] == 500

    listed = client.get("/api/sales?start_ms=0&end_ms=5000").get_json()["sales"]
    assert len(listed) == 1
    assert listed[0]["items_summary"] == "Coffee x2"

    assert client.get("/api/sales/sum?start_ms=0&end_ms=5000").get_json() == {"total_cents": 500}
    assert client.get("/api/sales/products-sold?start_ms=0&end_ms=5000").get_json() == {
        "products": [{"product_name": "Coffee", "total_qty": 2}]
    }


def test_sales_range_required(client, db_session):
    assert client.get("/api/sales").status_code == 400
    assert client.get("/api/sales/sum?start_ms=1").status_code == 400


def test_create_sale_bad_input(client, db_session):
    assert client.post("/api/sales", json={}).status_code == 400
    assert client.post("/api/sales", json=_sale_body(qty=-1)).status_code == 400


def test_edit_and_delete_sale(client, db_session):
    created = client.post("/api/sales", json=_sale_body()).get_json()
    sale_id = created["sale"]["id"]
    item_id = created["items"][0]["id"]

    res = client.post(f"/api/sales/{sale_id}/edits", json={"edits": [
        {"type": "update", "item_id": item_id, "qty": 4},
    ]})
    assert res.status_code == 200
    assert res.get_json()["sale"]["total_cents"] == 1000

    assert client.get(f"/api/sales/{sale_id}/items").status_code == 200
    assert client.delete(f"/api/sales/{sale_id}").status_code == 200
    assert client.get(f"/api/sales/{sale_id}/items").status_code == 404
    assert client.delete(f"/api/sales/{sale_id}").status_code == 404


def test_removing_last_line_deletes_sale(client, db_session):
    created = client.post("/api/sales", json=_sale_body()).get_json()
    sale_id = created["sale"]["id"]

    res = client.post(f"/api/sales/{sale_id}/edits", json={"edits": [
        {"type": "delete", "item_id": created["items"][0]["id"]},
    ]})

    assert res.get_json() == {"sale": None, "deleted": True}


def test_sale_draft_total_route(client, db_session):
    assert client.get("/api/sales/draft-total").get_json() == {"total_cents": 0}
    assert client.put("/api/sales/draft-total", json={"total_cents": 750}).get_json() == {"total_cents": 750}
    assert client.put("/api/sales/draft-total", json={"total_cents": "x"}).status_code == 400


def test_withdrawal_from_typed_amount(client, db_session):
    res = client.post("/api/withdrawals", json={"amount": "$1,250.50", "reason": "Supplier"})

    assert res.status_code == 201
    assert res.get_json()["withdrawal"]["amount_cents"] == 125050


def test_withdrawal_rejects_zero_and_missing_amount(client, db_session):
    assert client.post("/api/withdrawals", json={"amount": "abc"}).status_code == 400
    assert client.post("/api/withdrawals", json={}).status_code == 400


def test_withdrawal_list_sum_delete(client, db_session):
    w = client.post("/api/withdrawals", json={"amount_cents": 300, "created_at_ms": 100}).get_json()
    client.post("/api/withdrawals", json={"amount_cents": 200, "created_at_ms": 200})

    listed = client.get("/api/withdrawals?start_ms=0&end_ms=1000").get_json()["withdrawals"]
    assert [x["amount_cents"] for x in listed] == [200, 300]
    assert client.get("/api/withdrawals/sum?start_ms=0&end_ms=150").get_json() == {"total_cents": 300}

    withdrawal_id = w["withdrawal"]["id"]
    assert client.delete(f"/api/withdrawals/{withdrawal_id}").status_code == 200
    assert client.delete(f"/api/withdrawals/{withdrawal_id}").status_code == 404


def test_health(client, db_session):
    res = client.get("/health")

    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["details"]["cash_state_initialized"] is True
