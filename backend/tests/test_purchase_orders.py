# Overview: Pytest coverage for purchase orders and stock receipt.

import pytest

from shopnexus.models import StockLog, PurchaseOrder
from shopnexus.services.stock_service import reference_suffix


def _po(product, quantity=5, status="ORDERED", **extra):
    body = {
        "supplier_name": "Parts Unlimited",
        "status": status,
        "total_amount_cents": quantity * 200,
        "items": [
            {
                "product_id": product.id,
                "product_name": product.name,
                "quantity": quantity,
                "unit_cost_cents": 200,
                "total_cost_cents": quantity * 200,
            }
        ],
    }
    body.update(extra)
    return body


class TestCreatePurchaseOrder:

    def test_create_has_no_stock_effect(self, client, db_session, headers_a, product_a):
        resp = client.post("/api/purchase-orders", json=_po(product_a), headers=headers_a)
        assert resp.status_code == 201
        assert resp.get_json()["status"] == "ORDERED"
        assert len(resp.get_json()["items"]) == 1

        db_session.refresh(product_a)
        assert product_a.stock == 10
        assert db_session.query(StockLog).count() == 0

    def test_created_as_received_does_not_move_stock(self, client, db_session, headers_a, product_a):
        client.post("/api/purchase-orders", json=_po(product_a, status="RECEIVED"), headers=headers_a)
        db_session.refresh(product_a)
        assert product_a.stock == 10

    def test_default_status_is_draft(self, client, headers_a, product_a):
        body = _po(product_a)
        del body["status"]
        assert client.post("/api/purchase-orders", json=body, headers=headers_a).get_json()["status"] == "DRAFT"

    def test_free_form_lines_allowed(self, client, headers_a):
        body = {"items": [{"product_name": "Shelf brackets", "quantity": 0}]}
        resp = client.post("/api/purchase-orders", json=body, headers=headers_a)
        assert resp.status_code == 201

    @pytest.mark.parametrize("patch", [{"status": "SHIPPED"}, {"total_amount_cents": -1}])
    def test_invalid_header(self, client, db_session, headers_a, product_a, patch):
        resp = client.post("/api/purchase-orders", json=_po(product_a, **patch), headers=headers_a)
        assert resp.status_code == 400
        assert db_session.query(PurchaseOrder).count() == 0

    def test_negative_line_quantity(self, client, headers_a, product_a):
        resp = client.post("/api/purchase-orders", json=_po(product_a, quantity=-2), headers=headers_a)
        assert resp.status_code == 400

    def test_list_newest_first(self, client, headers_a, product_a):
        first = client.post("/api/purchase-orders", json=_po(product_a), headers=headers_a).get_json()
        second = client.post("/api/purchase-orders", json=_po(product_a), headers=headers_a).get_json()

        body = client.get("/api/purchase-orders", headers=headers_a).get_json()
        assert [po["id"] for po in body["items"]] == [second["id"], first["id"]]


class TestReceive:

    def test_receive_adds_stock(self, client, db_session, headers_a, admin_a, product_a):
        po = client.post("/api/purchase-orders", json=_po(product_a, quantity=5), headers=headers_a).get_json()

        resp = client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "RECEIVED"

        db_session.refresh(product_a)
        assert product_a.stock == 15

        log = db_session.query(StockLog).one()
        assert log.type == "IN"
        assert log.change_amount == 5
        assert log.final_stock == 15
        assert log.reason == f"PO Received #{reference_suffix(po['id'])}"
        assert log.performed_by == admin_a.name

    def test_draft_can_be_received_directly(self, client, db_session, headers_a, product_a):
        po = client.post("/api/purchase-orders", json=_po(product_a, status="DRAFT"), headers=headers_a).get_json()
        client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a)

        db_session.refresh(product_a)
        assert product_a.stock == 15

    def test_receiving_twice_counts_once(self, client, db_session, headers_a, product_a):
        po = client.post("/api/purchase-orders", json=_po(product_a), headers=headers_a).get_json()
        for _ in range(2):
            client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a)

        db_session.refresh(product_a)
        assert product_a.stock == 15

    def test_leaving_received_does_not_reverse(self, client, db_session, headers_a, product_a):
        po = client.post("/api/purchase-orders", json=_po(product_a), headers=headers_a).get_json()
        client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a)
        client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "CANCELLED"}, headers=headers_a)

        db_session.refresh(product_a)
        assert product_a.stock == 15
        assert db_session.query(StockLog).count() == 1

    def test_lines_without_known_product_skipped(self, client, db_session, headers_a, product_a, product_b):
        body = _po(product_a)
        body["items"].append({"product_name": "Free-form", "quantity": 3})
        body["items"].append({"product_id": product_b.id, "quantity": 4})
        po = client.post("/api/purchase-orders", json=body, headers=headers_a).get_json()

        client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a)

        db_session.refresh(product_a)
        db_session.refresh(product_b)
        assert product_a.stock == 15
        assert product_b.stock == 20
        assert db_session.query(StockLog).count() == 1

    def test_missing_purchase_order(self, client, headers_a):
        resp = client.put("/api/purchase-orders/99999/status", json={"status": "RECEIVED"}, headers=headers_a)
        assert resp.status_code == 404

    def test_invalid_status(self, client, headers_a, product_a):
        po = client.post("/api/purchase-orders", json=_po(product_a), headers=headers_a).get_json()
        resp = client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "LOST"}, headers=headers_a)
        assert resp.status_code == 400

    def test_strict_transitions(self, app, client, db_session, headers_a, product_a, monkeypatch):
        monkeypatch.setitem(app.config, "ENFORCE_STATUS_TRANSITIONS", True)
        po = client.post("/api/purchase-orders", json=_po(product_a, status="DRAFT"), headers=headers_a).get_json()

        skip = client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a)
        assert skip.status_code == 400

        assert client.put(
            f"/api/purchase-orders/{po['id']}/status", json={"status": "ORDERED"}, headers=headers_a
        ).status_code == 200
        assert client.put(
            f"/api/purchase-orders/{po['id']}/status", json={"status": "RECEIVED"}, headers=headers_a
        ).status_code == 200

        cancel = client.put(f"/api/purchase-orders/{po['id']}/status", json={"status": "CANCELLED"}, headers=headers_a)
        assert cancel.status_code == 400

        db_session.refresh(product_a)
        assert product_a.stock == 15
