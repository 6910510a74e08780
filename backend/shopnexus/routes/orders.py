# Overview: Flask API routes for sales orders.

from flask import Blueprint, request, g

from ..services import order_service
from ..decorators import require_auth


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
def list_orders():
    """Newest 200 orders of the tenant, newest first."""
    orders = order_service.list_orders(g.scope)
    return {"items": [o.to_dict() for o in orders], "count": len(orders)}


@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Create an order.

    COMPLETED / PROCESSING orders move stock immediately; a known customer's
    total spend grows by the order total.
    """
    payload = request.get_json(silent=True) or {}
    created = order_service.create_order(g.scope, g.current_user, payload)
    return created, 201


@orders_bp.put("/<int:order_id>/status")
@require_auth
def update_order_status_route(order_id: int):
    payload = request.get_json(silent=True) or {}
    return order_service.update_order_status(
        g.scope,
        g.current_user,
        order_id=order_id,
        status=payload.get("status"),
    )
