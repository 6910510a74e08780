# Overview: Flask API routes for auth operations; signup, login and caller identity.

"""
Authentication API routes

- POST /api/auth/signup creates a tenant with its first ADMIN user
- POST /api/auth/login exchanges email + password for a session token
- Tokens go in the Authorization header: "Bearer <token>"
"""

from flask import Blueprint, request, g

from ..services import auth_service
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/signup")
def signup_route():
    """
    Register a new company.

    Body: company_name, admin_name, email, password.
    Returns user, tenant and token.
    """
    data = request.get_json(silent=True) or {}
    return auth_service.signup(data), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue a session token.

    SECURITY:
    - Same 401 message for unknown email and wrong password
    - Users of a suspended tenant get 403 even with the right password
    """
    data = request.get_json(silent=True) or {}
    return auth_service.login(data.get("email"), data.get("password"))


@auth_bp.get("/me")
@require_auth
def me_route():
    return {
        "user": g.current_user.to_dict(),
        "tenant": g.tenant.to_dict(),
    }


@auth_bp.post("/verify-pin")
@require_auth
def verify_pin_route():
    """Check the caller's POS PIN."""
    data = request.get_json(silent=True) or {}
    return {"valid": auth_service.verify_pin(g.current_user, data.get("pin"))}
