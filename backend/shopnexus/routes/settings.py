from __future__ import annotations

from flask import Blueprint, request, g

from ..decorators import require_auth, require_admin
from ..services import settings_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api")


@settings_bp.get("/settings")
@require_auth
def get_settings():
    return settings_service.get_settings(g.scope).to_dict()


@settings_bp.put("/settings")
@require_auth
@require_admin
def update_settings():
    payload = request.get_json(silent=True) or {}
    return settings_service.update_settings(g.scope, payload)


@settings_bp.post("/settings/barcode")
@require_auth
def issue_barcode():
    """Body (optional): product_name, category; used for NAME / CATEGORY prefixes."""
    payload = request.get_json(silent=True) or {}
    return settings_service.issue_barcode(g.scope, payload), 201


@settings_bp.put("/tenant")
@require_auth
@require_admin
def update_tenant_profile():
    payload = request.get_json(silent=True) or {}
    return settings_service.update_tenant_profile(g.scope, payload)


@settings_bp.get("/stats")
@require_auth
def get_dashboard_stats():
    return settings_service.get_dashboard_stats(g.scope)
