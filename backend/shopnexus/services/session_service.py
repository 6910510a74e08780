# Overview: Service-layer operations for session tokens; issue and verify signed bearer tokens.

"""
Session Token Service

Tokens are signed with the application SECRET_KEY and carry only the user id.
Verification is stateless: there is no token table and no revocation list.
A token stops working when it expires (SESSION_TOKEN_MAX_AGE_DAYS after
issue, 30 by default) or when the user it names has been deleted.

MULTI-TENANT: The tenant is NOT taken from the token. It is resolved from the
user row on every request, so a suspended tenant is blocked immediately.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..extensions import db
from ..models import Tenant, User
from .auth_service import AuthError, ForbiddenError
from .tenant_service import TenantScope


TOKEN_SALT = "shopnexus.session"


@dataclass
class SessionContext:
    """Resolved identity for one authenticated request."""
    user: User
    tenant: Tenant
    scope: TenantScope


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def _max_age_seconds() -> int:
    return int(current_app.config.get("SESSION_TOKEN_MAX_AGE_DAYS", 30)) * 24 * 60 * 60


def issue_token(user: User) -> str:
    """Sign a new session token for the user."""
    return _serializer().dumps({"uid": user.id})


def decode_token(token: str) -> int:
    """
    Verify signature and age, return the user id.

    Raises AuthError for malformed, tampered or expired tokens.
    """
    if not token:
        raise AuthError("Not authorized, no token")
    try:
        data = _serializer().loads(token, max_age=_max_age_seconds())
    except SignatureExpired:
        raise AuthError("Not authorized, token expired")
    except BadSignature:
        raise AuthError("Not authorized, token failed")

    user_id = data.get("uid") if isinstance(data, dict) else None
    if not isinstance(user_id, int):
        raise AuthError("Not authorized, token failed")
    return user_id


def authenticate_token(token: str) -> SessionContext:
    """
    Resolve a bearer token to (user, tenant, scope).

    Raises:
        AuthError: token missing/invalid/expired, or user no longer exists
        ForbiddenError: tenant missing or SUSPENDED
    """
    user_id = decode_token(token)

    user = db.session.query(User).filter_by(id=user_id).first()
    if user is None:
        raise AuthError("Not authorized, user not found")

    tenant = db.session.query(Tenant).filter_by(id=user.tenant_id).first()
    if tenant is None or tenant.is_suspended:
        current_app.logger.warning(
            "Blocked request for user %s: tenant %s suspended or missing", user.id, user.tenant_id
        )
        raise ForbiddenError("Tenant access suspended or invalid")

    return SessionContext(user=user, tenant=tenant, scope=TenantScope(tenant.id))
