"""
Sales Order Service

WHY: Orders drive two side effects, stock (through the stock ledger) and the
customer's spend aggregate. Both happen inside the request transaction.

STOCK RULES:
- On creation with status COMPLETED or PROCESSING, every line moves stock:
  SALE lines take quantity out (ledger type SALE), RETURN lines put it back
  (ledger type RETURN).
- Moving from COMPLETED/PROCESSING to CANCELLED or RETURNED puts SALE lines
  back (ledger type ADJUSTMENT or RETURN). RETURN lines are not reversed.
- No other creation status or transition touches stock.
- Lines whose product is not found in the tenant are skipped.

CUSTOMER RULES:
- A resolvable customer_id adds total_amount_cents to total_spent_cents on
  creation, whatever the status or line types.
- Nothing ever subtracts from total_spent_cents.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Order, OrderItem, Product, Customer, User
from ..models.sales import ORDER_STATUSES, ORDER_ITEM_TYPES, DISCOUNT_TYPES
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    validate_payload,
    validate_line_items,
    require_choice,
    enforce_amounts,
)
from ..time_utils import utcnow
from .lifecycle_service import require_transition
from .stock_service import apply_stock_change, reference_suffix
from .tenant_service import TenantScope


ORDER_POLICY = ModelValidationPolicy(
    writable_fields={
        "status", "customer_id", "customer_name", "salesperson_id", "salesperson_name",
        "total_amount_cents", "discount_amount_cents", "discount_type", "is_return",
    },
    required_on_create={"total_amount_cents"},
)

ORDER_ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "product_id", "product_name", "quantity", "price_at_time_cents", "cost_at_time_cents", "type",
    },
    required_on_create={"product_id", "quantity", "price_at_time_cents"},
)

# Statuses in which an order's lines count as having left the shelf
STOCK_HOLDING_STATUSES = frozenset({"COMPLETED", "PROCESSING"})
RESTOCKING_STATUSES = frozenset({"CANCELLED", "RETURNED"})

ORDER_FEED_LIMIT = 200


def list_orders(scope: TenantScope, *, limit: int = ORDER_FEED_LIMIT) -> list[Order]:
    return (
        scope.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )


def _build_items(scope: TenantScope, lines: list[dict]) -> list[OrderItem]:
    items = []
    for index, line in enumerate(lines):
        line["type"] = require_choice(line.get("type") or "SALE", ORDER_ITEM_TYPES, f"items[{index}].type")
        enforce_amounts(line, "price_at_time_cents", "cost_at_time_cents")
        if not line.get("product_name"):
            product = scope.find(Product, line["product_id"])
            if product is None:
                raise ValidationError(f"items[{index}]: product_name is required")
            line["product_name"] = product.name
        items.append(OrderItem(**line))
    return items


def create_order(scope: TenantScope, user: User, payload: dict) -> dict:
    """
    Create an order and apply its stock and customer side effects.

    Raises:
        ValidationError: malformed order or line items
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    header = {k: v for k, v in payload.items() if k != "items"}
    patch = validate_payload(model=Order, payload=header, policy=ORDER_POLICY, partial=False)
    patch["status"] = require_choice(patch.get("status") or "PENDING", ORDER_STATUSES, "status")
    if patch.get("discount_type") is not None:
        require_choice(patch["discount_type"], DISCOUNT_TYPES, "discount_type")
    enforce_amounts(patch, "total_amount_cents", "discount_amount_cents")

    lines = validate_line_items(model=OrderItem, items=payload.get("items"), policy=ORDER_ITEM_POLICY)

    order = Order(user_id=user.id, **patch)
    order.items = _build_items(scope, lines)
    scope.add(order)
    db.session.flush()

    if order.status in STOCK_HOLDING_STATUSES:
        ref = reference_suffix(order.id)
        for item in order.items:
            product = scope.find(Product, item.product_id)
            if product is None:
                continue
            is_return = item.type == "RETURN"
            apply_stock_change(
                scope,
                product,
                item.quantity if is_return else -item.quantity,
                log_type="RETURN" if is_return else "SALE",
                reason=f"Order #{ref}",
                performed_by=user.name,
            )

    if order.customer_id is not None:
        customer = scope.find(Customer, order.customer_id)
        if customer is not None:
            customer.total_spent_cents = (customer.total_spent_cents or 0) + order.total_amount_cents
            customer.last_order_date = utcnow()

    db.session.commit()
    return order.to_dict()


def update_order_status(scope: TenantScope, user: User, *, order_id: int, status) -> dict:
    """
    Change an order's status, restocking SALE lines when a stock-holding
    order is cancelled or returned.

    Raises:
        NotFoundError: no such order in the tenant
        ValidationError / LifecycleError: bad target status or transition
    """
    order = scope.get_or_404(Order, order_id, "Order")
    previous = order.status
    require_transition("order", previous, status)

    order.status = status

    if previous in STOCK_HOLDING_STATUSES and status in RESTOCKING_STATUSES:
        ref = reference_suffix(order.id)
        log_type = "RETURN" if status == "RETURNED" else "ADJUSTMENT"
        for item in order.items:
            if item.type != "SALE":
                continue
            product = scope.find(Product, item.product_id)
            if product is None:
                continue
            apply_stock_change(
                scope,
                product,
                item.quantity,
                log_type=log_type,
                reason=f"Order {status} #{ref}",
                performed_by=user.name,
            )

    db.session.commit()
    return order.to_dict()
