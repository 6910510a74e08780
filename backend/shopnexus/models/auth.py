from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


ROLES = ("SUPER_ADMIN", "ADMIN", "MANAGER", "CASHIER", "SALESMAN", "USER")
ADMIN_ROLES = frozenset({"SUPER_ADMIN", "ADMIN"})

PERMISSIONS = (
    "VIEW_DASHBOARD",
    "POS_ACCESS",
    "MANAGE_PRODUCTS",
    "MANAGE_ORDERS",
    "MANAGE_USERS",
    "MANAGE_SETTINGS",
    "VIEW_REPORTS",
    "MANAGE_SUPPLIERS",
    "MANAGE_EXPENSES",
    "MANAGE_CUSTOMERS",
)


class User(db.Model):
    """
    User accounts for authentication and attribution.

    MULTI-TENANT: Users belong to exactly one tenant (tenant_id), but email
    is unique across ALL tenants, because login is by email alone.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_tenant_id", "tenant_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="USER")
    permissions = db.Column(db.JSON, nullable=False, default=list)
    avatar_url = db.Column(db.String(512), nullable=True)

    # Optional POS PIN (bcrypt hashed)
    pin_hash = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    tenant = db.relationship("Tenant", backref=db.backref("users", lazy=True))

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        # Never expose password_hash or pin_hash
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "permissions": list(self.permissions or []),
            "avatar_url": self.avatar_url,
            "has_pin": self.pin_hash is not None,
            "created_at": to_utc_z(self.created_at),
        }
