# Overview: Flask API routes for customers, suppliers and expenses.

from flask import Blueprint, request, g

from ..services import crm_service
from ..services.crm_service import CUSTOMER_POLICY, SUPPLIER_POLICY, EXPENSE_POLICY
from ..models import Customer, Supplier, Expense
from ..validation import validate_payload, enforce_amounts
from ..decorators import require_auth


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")
suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")
expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@customers_bp.get("")
@require_auth
def list_customers():
    return crm_service.list_customers(g.scope)


@customers_bp.post("")
@require_auth
def create_customer_route():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    return crm_service.create_customer(g.scope, patch=patch), 201


@customers_bp.put("/<int:customer_id>")
@require_auth
def update_customer_route(customer_id: int):
    """Contact details only; total_spent_cents is maintained by orders."""
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    return crm_service.update_customer(g.scope, customer_id=customer_id, patch=patch)


@customers_bp.delete("/<int:customer_id>")
@require_auth
def delete_customer_route(customer_id: int):
    crm_service.delete_customer(g.scope, customer_id=customer_id)
    return {"message": "Customer removed"}


@suppliers_bp.get("")
@require_auth
def list_suppliers():
    return crm_service.list_suppliers(g.scope)


@suppliers_bp.post("")
@require_auth
def create_supplier_route():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=False)
    return crm_service.create_supplier(g.scope, patch=patch), 201


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
def delete_supplier_route(supplier_id: int):
    crm_service.delete_supplier(g.scope, supplier_id=supplier_id)
    return {"message": "Supplier removed"}


@expenses_bp.get("")
@require_auth
def list_expenses():
    """Newest expense date first."""
    return crm_service.list_expenses(g.scope)


@expenses_bp.post("")
@require_auth
def create_expense_route():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
    enforce_amounts(patch, "amount_cents")
    created = crm_service.create_expense(g.scope, patch=patch, recorded_by=g.current_user.name)
    return created, 201


@expenses_bp.delete("/<int:expense_id>")
@require_auth
def delete_expense_route(expense_id: int):
    crm_service.delete_expense(g.scope, expense_id=expense_id)
    return {"message": "Expense removed"}
