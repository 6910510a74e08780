# Overview: Service-layer operations for purchase orders (supplier replenishment).

from __future__ import annotations

from ..extensions import db
from ..models import PurchaseOrder, PurchaseOrderItem, Product, User
from ..models.purchasing import PURCHASE_ORDER_STATUSES
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    validate_payload,
    validate_line_items,
    require_choice,
    enforce_amounts,
)
from .lifecycle_service import require_transition
from .stock_service import apply_stock_change, reference_suffix
from .tenant_service import TenantScope


PURCHASE_ORDER_POLICY = ModelValidationPolicy(
    writable_fields={"supplier_id", "supplier_name", "status", "total_amount_cents", "expected_date"},
)

PURCHASE_ORDER_ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"product_id", "product_name", "quantity", "unit_cost_cents", "total_cost_cents"},
)


def list_purchase_orders(scope: TenantScope) -> list[PurchaseOrder]:
    return (
        scope.query(PurchaseOrder)
        .order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())
        .all()
    )


def create_purchase_order(scope: TenantScope, payload: dict) -> dict:
    """
    Plain creation: whatever the initial status, no stock moves here.
    Only a later status change into RECEIVED adds stock.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    header = {k: v for k, v in payload.items() if k != "items"}
    patch = validate_payload(model=PurchaseOrder, payload=header, policy=PURCHASE_ORDER_POLICY, partial=False)
    patch["status"] = require_choice(patch.get("status") or "DRAFT", PURCHASE_ORDER_STATUSES, "status")
    enforce_amounts(patch, "total_amount_cents")

    lines = validate_line_items(
        model=PurchaseOrderItem,
        items=payload.get("items"),
        policy=PURCHASE_ORDER_ITEM_POLICY,
        require_positive_quantity=False,
    )
    for index, line in enumerate(lines):
        if (line.get("quantity") or 0) < 0:
            raise ValidationError(f"items[{index}]: quantity must be >= 0")
        enforce_amounts(line, "unit_cost_cents", "total_cost_cents")

    po = PurchaseOrder(**patch)
    po.items = [PurchaseOrderItem(**line) for line in lines]
    scope.add(po)
    db.session.commit()
    return po.to_dict()


def update_purchase_order_status(scope: TenantScope, user: User, *, po_id: int, status) -> dict:
    """
    Change a purchase order's status.

    Entering RECEIVED from any other status books every line with a known
    product into stock (ledger type IN). Leaving RECEIVED does not reverse it.

    Raises:
        NotFoundError: no such purchase order in the tenant
        ValidationError / LifecycleError: bad target status or transition
    """
    po = scope.get_or_404(PurchaseOrder, po_id, "Purchase Order")
    previous = po.status
    require_transition("purchase_order", previous, status)

    po.status = status

    if status == "RECEIVED" and previous != "RECEIVED":
        ref = reference_suffix(po.id)
        for item in po.items:
            if item.product_id is None:
                continue
            product = scope.find(Product, item.product_id)
            if product is None:
                continue
            apply_stock_change(
                scope,
                product,
                item.quantity,
                log_type="IN",
                reason=f"PO Received #{ref}",
                performed_by=user.name,
            )

    db.session.commit()
    return po.to_dict()
