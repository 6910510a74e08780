# Overview: Service-layer operations for tenant user administration.

from __future__ import annotations

from urllib.parse import quote

from flask import current_app

from ..extensions import db
from ..models import User
from ..models.auth import ROLES, PERMISSIONS
from ..validation import ValidationError, ConflictError, require_fields, require_choice
from .auth_service import hash_password, hash_pin, email_taken
from .tenant_service import TenantScope


DEFAULT_INVITE_ROLE = "CASHIER"
AVATAR_URL_TEMPLATE = "https://ui-avatars.com/api/?name={name}&background=random"


def avatar_url_for(name: str) -> str:
    return AVATAR_URL_TEMPLATE.format(name=quote(name, safe=""))


def _clean_permissions(value) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ValidationError("permissions must be a list of strings")
    unknown = sorted(set(value) - set(PERMISSIONS))
    if unknown:
        raise ValidationError(f"Unknown permissions: {', '.join(unknown)}")
    # de-dupe, keep client order
    return list(dict.fromkeys(value))


def list_users(scope: TenantScope) -> dict:
    users = scope.query(User).order_by(User.id.asc()).all()
    return {
        "items": [u.to_dict() for u in users],
        "count": len(users),
    }


def invite_user(scope: TenantScope, payload: dict) -> dict:
    """
    Create a user inside the caller's tenant.

    Raises:
        ValidationError: missing name/email/password, bad role or permissions
        ConflictError: email already registered in any tenant
    """
    require_fields(payload, ("name", "email", "password"))

    name = str(payload["name"]).strip()
    email = str(payload["email"]).strip()
    role = require_choice(payload.get("role") or DEFAULT_INVITE_ROLE, ROLES, "role")
    permissions = _clean_permissions(payload.get("permissions"))

    if email_taken(email):
        raise ConflictError("User already exists")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(str(payload["password"])),
        role=role,
        permissions=permissions,
        avatar_url=avatar_url_for(name),
    )
    scope.add(user)
    db.session.commit()

    current_app.logger.info("User %s invited to tenant %s as %s", user.id, scope.tenant_id, role)
    return user.to_dict()


def delete_user(scope: TenantScope, acting_user: User, *, user_id: int) -> None:
    user = scope.get_or_404(User, user_id, "User")
    if user.id == acting_user.id:
        raise ValidationError("You cannot delete your own account")
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("User %s removed from tenant %s", user_id, scope.tenant_id)


def update_user_role(scope: TenantScope, *, user_id: int, payload: dict) -> dict:
    """Set the role, the permission list, or both."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    if "role" not in payload and "permissions" not in payload:
        raise ValidationError("Provide role or permissions")
    user = scope.get_or_404(User, user_id, "User")

    if "role" in payload:
        user.role = require_choice(payload.get("role"), ROLES, "role")
    if "permissions" in payload:
        user.permissions = _clean_permissions(payload.get("permissions"))

    db.session.commit()
    return user.to_dict()


def set_user_pin(scope: TenantScope, *, user_id: int, pin) -> None:
    user = scope.get_or_404(User, user_id, "User")
    user.pin_hash = hash_pin(pin)
    db.session.commit()
