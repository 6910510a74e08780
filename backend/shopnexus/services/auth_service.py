# Overview: Service-layer operations for auth; tenant signup, login and credential hashing.

"""
Authentication Service with Multi-Tenant Support

MULTI-TENANT: Every user belongs to exactly one tenant, but email is unique
across all tenants because login is by email alone.

SECURITY NOTES:
- Passwords and PINs hashed with bcrypt (random salt per hash)
- Login failures use one message for unknown email and wrong password
- Users of a SUSPENDED tenant cannot log in even with a correct password
- Session tokens are issued by session_service
"""

import re

import bcrypt
from sqlalchemy.exc import IntegrityError
from flask import current_app

from ..extensions import db
from ..models import User, Tenant, TenantSettings
from ..validation import ValidationError, ConflictError, require_fields
from ..time_utils import utcnow


DEFAULT_ADMIN_PERMISSIONS = [
    "VIEW_DASHBOARD",
    "MANAGE_PRODUCTS",
    "MANAGE_ORDERS",
    "MANAGE_USERS",
    "MANAGE_SETTINGS",
]

PIN_PATTERN = re.compile(r"[0-9]{4,6}")


class AuthError(Exception):
    """401: bad credentials or missing/invalid token."""


class ForbiddenError(Exception):
    """403: suspended tenant or insufficient role."""


def _rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Hash password using bcrypt with a freshly generated salt."""
    salt = bcrypt.gensalt(rounds=_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A malformed stored hash counts as a
    mismatch rather than an error, and so does a non-string password.
    """
    if not isinstance(password, str) or not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def hash_pin(pin: str) -> str:
    if not isinstance(pin, str) or not PIN_PATTERN.fullmatch(pin):
        raise ValidationError("PIN must be 4 to 6 digits")
    return hash_password(pin)


def slugify(company_name: str) -> str:
    """
    URL-safe slug: lowercase, spaces to hyphens, then drop anything that is
    not an ASCII word character or a hyphen.
    """
    slug = company_name.lower().replace(" ", "-")
    return re.sub(r"[^\w-]+", "", slug, flags=re.ASCII)


def email_taken(email: str) -> bool:
    return db.session.query(User.id).filter(User.email == email).first() is not None


def _flush_or_conflict(message: str) -> None:
    """A concurrent signup can still win the unique email/slug race."""
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(message)


def require_admin(user: User) -> None:
    """Role gate: ADMIN or SUPER_ADMIN only."""
    if user is None or not user.is_admin:
        raise ForbiddenError("Not authorized as an admin")


def signup(payload: dict) -> dict:
    """
    Create a tenant, its admin user and default settings.

    Returns {"user", "tenant", "token"}.

    Raises:
        ValidationError: a field is missing or the company name has no usable characters
        ConflictError: email already registered (any tenant) or slug taken

    The three rows are written in one transaction: a failure after the
    tenant insert leaves nothing behind.
    """
    from .session_service import issue_token

    require_fields(payload, ("company_name", "admin_name", "email", "password"))

    company_name = str(payload["company_name"]).strip()
    admin_name = str(payload["admin_name"]).strip()
    email = str(payload["email"]).strip()
    password = str(payload["password"])

    if email_taken(email):
        raise ConflictError("User already exists")

    slug = slugify(company_name)
    if not slug:
        raise ValidationError("Company name must contain letters or digits")
    if db.session.query(Tenant.id).filter(Tenant.slug == slug).first() is not None:
        raise ConflictError("A company with this name already exists")

    tenant = Tenant(
        name=company_name,
        slug=slug,
        subscription_tier="FREE",
        subscription_status="ACTIVE",
        status="ACTIVE",
        last_activity_at=utcnow(),
    )
    db.session.add(tenant)
    _flush_or_conflict("A company with this name already exists")

    user = User(
        tenant_id=tenant.id,
        name=admin_name,
        email=email,
        password_hash=hash_password(password),
        role="ADMIN",
        permissions=list(DEFAULT_ADMIN_PERMISSIONS),
    )
    db.session.add(user)
    db.session.add(TenantSettings(tenant_id=tenant.id))
    _flush_or_conflict("User already exists")
    db.session.commit()

    current_app.logger.info("Tenant %s (%s) signed up with admin user %s", tenant.id, tenant.slug, user.id)

    return {
        "user": user.to_dict(),
        "tenant": tenant.to_dict(),
        "token": issue_token(user),
    }


def login(email: str | None, password: str | None) -> dict:
    """
    Authenticate by email + password.

    Returns {"user", "tenant", "token"} and touches tenant.last_activity_at.

    Raises:
        AuthError: unknown email or wrong password (same message for both)
        ForbiddenError: the user's tenant is SUSPENDED
    """
    from .session_service import issue_token

    user = None
    if email:
        user = db.session.query(User).filter(User.email == str(email).strip()).first()

    if user is None or not verify_password(password or "", user.password_hash):
        current_app.logger.warning("Failed login for %r", email)
        raise AuthError("Invalid credentials")

    tenant = db.session.query(Tenant).filter_by(id=user.tenant_id).first()
    if tenant is None or tenant.is_suspended:
        current_app.logger.warning("Login refused for user %s: tenant suspended", user.id)
        raise ForbiddenError("Tenant access suspended or invalid")

    tenant.last_activity_at = utcnow()
    db.session.commit()

    current_app.logger.info("User %s logged in to tenant %s", user.id, tenant.id)

    return {
        "user": user.to_dict(),
        "tenant": tenant.to_dict(),
        "token": issue_token(user),
    }


def verify_pin(user: User, pin: str | None) -> bool:
    """Check a POS PIN against the user's stored hash; no PIN set means False."""
    if not pin or user.pin_hash is None:
        return False
    return verify_password(str(pin), user.pin_hash)
