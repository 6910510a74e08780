# Overview: Flask API routes for purchase orders (supplier replenishment).

from flask import Blueprint, request, g

from ..services import purchase_order_service
from ..decorators import require_auth


purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


@purchase_orders_bp.get("")
@require_auth
def list_purchase_orders():
    pos = purchase_order_service.list_purchase_orders(g.scope)
    return {"items": [po.to_dict() for po in pos], "count": len(pos)}


@purchase_orders_bp.post("")
@require_auth
def create_purchase_order_route():
    payload = request.get_json(silent=True) or {}
    return purchase_order_service.create_purchase_order(g.scope, payload), 201


@purchase_orders_bp.put("/<int:po_id>/status")
@require_auth
def update_purchase_order_status_route(po_id: int):
    """Receiving a purchase order books its lines into stock (ledger type IN)."""
    payload = request.get_json(silent=True) or {}
    return purchase_order_service.update_purchase_order_status(
        g.scope,
        g.current_user,
        po_id=po_id,
        status=payload.get("status"),
    )
