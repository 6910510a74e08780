# Overview: Request decorators for API routes (authentication and role gating).

from functools import wraps
from flask import request, g

from .services import session_service
from .services.auth_service import AuthError, require_admin as require_admin_role


def require_auth(f):
    """
    Require a bearer token and establish tenant context.

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.tenant: The user's Tenant (never SUSPENDED)
    - g.scope: TenantScope bound to that tenant; services only query through it

    Raises AuthError (401) for a missing/invalid/expired token or deleted
    user, ForbiddenError (403) for a suspended tenant.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            raise AuthError("Not authorized, no token")

        token = auth_header.split(" ", 1)[1].strip()
        context = session_service.authenticate_token(token)

        g.current_user = context.user
        g.tenant = context.tenant
        g.scope = context.scope

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require ADMIN or SUPER_ADMIN. Must be stacked under @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not hasattr(g, "current_user"):
            raise AuthError("Not authorized, no token")
        require_admin_role(g.current_user)
        return f(*args, **kwargs)
    return decorated_function
