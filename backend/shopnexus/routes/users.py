# Overview: Flask API routes for tenant user administration.

"""
User administration routes.

SECURITY: Every route requires an ADMIN or SUPER_ADMIN of the caller's
tenant, and only ever touches users of that tenant.
"""

from flask import Blueprint, request, g

from ..services import user_service
from ..decorators import require_auth, require_admin


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_admin
def list_users():
    return user_service.list_users(g.scope)


@users_bp.post("")
@users_bp.post("/invite")
@require_auth
@require_admin
def invite_user_route():
    """
    Create a user in the caller's tenant.

    Body: name, email, password, role (default CASHIER), permissions (default []).
    """
    payload = request.get_json(silent=True) or {}
    return user_service.invite_user(g.scope, payload), 201


@users_bp.delete("/<int:user_id>")
@require_auth
@require_admin
def delete_user_route(user_id: int):
    user_service.delete_user(g.scope, g.current_user, user_id=user_id)
    return {"message": "User removed"}


@users_bp.put("/<int:user_id>/role")
@require_auth
@require_admin
def update_user_role_route(user_id: int):
    payload = request.get_json(silent=True) or {}
    return user_service.update_user_role(g.scope, user_id=user_id, payload=payload)


@users_bp.put("/<int:user_id>/pin")
@require_auth
@require_admin
def update_user_pin_route(user_id: int):
    payload = request.get_json(silent=True) or {}
    user_service.set_user_pin(g.scope, user_id=user_id, pin=payload.get("pin"))
    return {"message": "PIN updated"}
