# Overview: Pytest coverage for customers, suppliers and expenses.

from shopnexus.models import Customer, Supplier, Expense


class TestCustomers:

    def test_customer_crud(self, client, db_session, headers_a, tenant_a):
        created = client.post(
            "/api/customers",
            json={"name": "Dana", "email": "dana@example.test", "phone": "555-0101"},
            headers=headers_a,
        )
        assert created.status_code == 201
        customer = created.get_json()
        assert customer["tenant_id"] == tenant_a.id
        assert customer["total_spent_cents"] == 0

        updated = client.put(
            f"/api/customers/{customer['id']}", json={"address": "1 Main St"}, headers=headers_a
        )
        assert updated.status_code == 200
        assert updated.get_json()["address"] == "1 Main St"
        assert updated.get_json()["name"] == "Dana"

        assert client.get("/api/customers", headers=headers_a).get_json()["count"] == 1

        assert client.delete(f"/api/customers/{customer['id']}", headers=headers_a).status_code == 200
        assert db_session.query(Customer).count() == 0

    def test_total_spent_is_not_client_writable(self, client, db_session, headers_a, customer_a):
        resp = client.put(
            f"/api/customers/{customer_a.id}",
            json={"name": "Carol C.", "total_spent_cents": 999999},
            headers=headers_a,
        )
        assert resp.status_code == 200
        db_session.refresh(customer_a)
        assert customer_a.total_spent_cents == 0

    def test_name_required(self, client, headers_a):
        resp = client.post("/api/customers", json={"email": "x@example.test"}, headers=headers_a)
        assert resp.status_code == 400

    def test_delete_missing_customer(self, client, headers_a):
        assert client.delete("/api/customers/4040", headers=headers_a).status_code == 404


class TestSuppliers:

    def test_supplier_crud(self, client, db_session, headers_a):
        created = client.post(
            "/api/suppliers",
            json={"name": "Parts Unlimited", "contact_person": "Sam"},
            headers=headers_a,
        ).get_json()
        assert created["contact_person"] == "Sam"

        listing = client.get("/api/suppliers", headers=headers_a).get_json()
        assert [s["name"] for s in listing["items"]] == ["Parts Unlimited"]

        assert client.delete(f"/api/suppliers/{created['id']}", headers=headers_a).status_code == 200
        assert db_session.query(Supplier).count() == 0

    def test_unknown_field_rejected(self, client, headers_a):
        resp = client.post("/api/suppliers", json={"name": "X", "rating": 5}, headers=headers_a)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Field not allowed: rating"

    def test_delete_missing_supplier(self, client, headers_a):
        assert client.delete("/api/suppliers/4040", headers=headers_a).status_code == 404


class TestExpenses:

    def test_expenses_newest_date_first(self, client, headers_a):
        for date in ("2024-01-05T10:00:00Z", "2024-03-01T09:00:00Z", "2024-02-10T12:00:00Z"):
            resp = client.post(
                "/api/expenses",
                json={"category": "Rent", "amount_cents": 100000, "date": date},
                headers=headers_a,
            )
            assert resp.status_code == 201

        body = client.get("/api/expenses", headers=headers_a).get_json()
        assert [e["date"][:10] for e in body["items"]] == ["2024-03-01", "2024-02-10", "2024-01-05"]

    def test_defaults(self, client, headers_a, admin_a):
        expense = client.post("/api/expenses", json={"amount_cents": 1250}, headers=headers_a).get_json()
        assert expense["recorded_by"] == admin_a.name
        assert expense["date"] is not None

    def test_invalid_amount(self, client, headers_a):
        assert client.post("/api/expenses", json={"amount_cents": -10}, headers=headers_a).status_code == 400
        assert client.post("/api/expenses", json={"amount_cents": "ten"}, headers=headers_a).status_code == 400

    def test_invalid_date(self, client, headers_a):
        resp = client.post("/api/expenses", json={"amount_cents": 10, "date": "yesterday"}, headers=headers_a)
        assert resp.status_code == 400

    def test_delete_expense(self, client, db_session, headers_a):
        expense = client.post("/api/expenses", json={"amount_cents": 500}, headers=headers_a).get_json()
        assert client.delete(f"/api/expenses/{expense['id']}", headers=headers_a).status_code == 200
        assert db_session.query(Expense).count() == 0
        assert client.delete(f"/api/expenses/{expense['id']}", headers=headers_a).status_code == 404
