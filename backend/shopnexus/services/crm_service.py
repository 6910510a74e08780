"""
CRM / Finance Service

Plain tenant-scoped CRUD for customers, suppliers and expenses. Callers pass
patches already validated against the policies below.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Customer, Supplier, Expense
from ..validation import ModelValidationPolicy, SERVER_OWNED_FIELDS
from ..time_utils import utcnow
from .tenant_service import TenantScope


CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "address"},
    required_on_create={"name"},
    # maintained by order_service, never by clients
    ignored_fields=SERVER_OWNED_FIELDS | {"total_spent_cents", "last_order_date"},
)

SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "contact_person", "email", "phone", "address"},
    required_on_create={"name"},
)

EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"category", "description", "amount_cents", "date", "recorded_by"},
    required_on_create={"amount_cents"},
)


def _listing(rows) -> dict:
    return {"items": [r.to_dict() for r in rows], "count": len(rows)}


# Customers

def list_customers(scope: TenantScope) -> dict:
    return _listing(scope.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all())


def create_customer(scope: TenantScope, *, patch: dict) -> dict:
    c = Customer(total_spent_cents=0, **patch)
    scope.add(c)
    db.session.commit()
    return c.to_dict()


def update_customer(scope: TenantScope, *, customer_id: int, patch: dict) -> dict:
    c = scope.get_or_404(Customer, customer_id, "Customer")
    for k, v in patch.items():
        setattr(c, k, v)
    db.session.commit()
    return c.to_dict()


def delete_customer(scope: TenantScope, *, customer_id: int) -> None:
    c = scope.get_or_404(Customer, customer_id, "Customer")
    db.session.delete(c)
    db.session.commit()


# Suppliers

def list_suppliers(scope: TenantScope) -> dict:
    return _listing(scope.query(Supplier).order_by(Supplier.name.asc(), Supplier.id.asc()).all())


def create_supplier(scope: TenantScope, *, patch: dict) -> dict:
    s = Supplier(**patch)
    scope.add(s)
    db.session.commit()
    return s.to_dict()


def delete_supplier(scope: TenantScope, *, supplier_id: int) -> None:
    s = scope.get_or_404(Supplier, supplier_id, "Supplier")
    db.session.delete(s)
    db.session.commit()


# Expenses

def list_expenses(scope: TenantScope) -> dict:
    """Newest expense date first; undated expenses last."""
    rows = (
        scope.query(Expense)
        .order_by(Expense.date.is_(None), Expense.date.desc(), Expense.id.desc())
        .all()
    )
    return _listing(rows)


def create_expense(scope: TenantScope, *, patch: dict, recorded_by: str | None = None) -> dict:
    if not patch.get("recorded_by"):
        patch["recorded_by"] = recorded_by
    if patch.get("date") is None:
        patch["date"] = utcnow()
    e = Expense(**patch)
    scope.add(e)
    db.session.commit()
    return e.to_dict()


def delete_expense(scope: TenantScope, *, expense_id: int) -> None:
    e = scope.get_or_404(Expense, expense_id, "Expense")
    db.session.delete(e)
    db.session.commit()
