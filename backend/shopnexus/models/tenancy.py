from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


TENANT_STATUSES = ("ACTIVE", "PENDING", "SUSPENDED")
SUBSCRIPTION_TIERS = ("FREE", "PRO_MONTHLY", "PRO_QUARTERLY", "PRO_YEARLY", "ENTERPRISE")
SUBSCRIPTION_STATUSES = ("ACTIVE", "EXPIRED", "PENDING_APPROVAL")


class Tenant(db.Model):
    """
    Multi-tenant root: every company that signs up is a Tenant.

    All users, catalog, orders and finance records belong to exactly one
    tenant and are never visible to another one. A SUSPENDED tenant cannot
    authenticate at all.
    """
    __tablename__ = "tenants"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    # URL-safe, derived from the company name at signup
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    logo_url = db.Column(db.String(512), nullable=True)

    subscription_tier = db.Column(db.String(32), nullable=False, default="FREE")
    subscription_status = db.Column(db.String(32), nullable=False, default="ACTIVE")
    subscription_expiry = db.Column(db.DateTime(timezone=True), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="ACTIVE", index=True)

    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    address = db.Column(db.String(512), nullable=True)
    website = db.Column(db.String(255), nullable=True)

    last_activity_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def is_suspended(self) -> bool:
        return self.status == "SUSPENDED"

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} slug={self.slug!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "logo_url": self.logo_url,
            "subscription_tier": self.subscription_tier,
            "subscription_status": self.subscription_status,
            "subscription_expiry": to_utc_z(self.subscription_expiry),
            "status": self.status,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "website": self.website,
            "last_activity_at": to_utc_z(self.last_activity_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class TenantSettings(db.Model):
    """
    Per-tenant configuration: currency, tax, receipt layout and barcode policy.

    One row per tenant (unique tenant_id). Created at signup or lazily on
    first read. barcode_next_sequence only moves forward and is advanced
    with an atomic SQL increment (see settings_service.issue_barcode).
    """
    __tablename__ = "tenant_settings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, unique=True, index=True)

    currency = db.Column(db.String(8), nullable=False, default="USD")
    timezone = db.Column(db.String(64), nullable=False, default="UTC")
    theme = db.Column(db.String(16), nullable=False, default="light")
    tax_rate_bps = db.Column(db.Integer, nullable=False, default=0)  # Basis points (e.g., 825 = 8.25%)

    # Receipt layout
    receipt_header = db.Column(db.Text, nullable=True)
    receipt_footer = db.Column(db.Text, nullable=True)
    show_logo_on_receipt = db.Column(db.Boolean, nullable=False, default=True)
    show_cashier_on_receipt = db.Column(db.Boolean, nullable=False, default=True)
    show_customer_on_receipt = db.Column(db.Boolean, nullable=False, default=True)
    show_tax_breakdown = db.Column(db.Boolean, nullable=False, default=True)
    show_barcode = db.Column(db.Boolean, nullable=False, default=True)
    receipt_width = db.Column(db.String(8), nullable=False, default="80mm")
    receipt_template = db.Column(db.String(16), nullable=False, default="modern")

    # Barcode policy
    barcode_format = db.Column(db.String(16), nullable=False, default="CODE128")
    barcode_generation_strategy = db.Column(db.String(16), nullable=False, default="SEQUENTIAL")
    barcode_prefix_type = db.Column(db.String(16), nullable=False, default="NONE")
    barcode_custom_prefix = db.Column(db.String(16), nullable=True)
    barcode_next_sequence = db.Column(db.Integer, nullable=False, default=1000)
    barcode_label_format = db.Column(db.String(16), nullable=False, default="A4_30")
    barcode_show_price = db.Column(db.Boolean, nullable=False, default=True)
    barcode_show_name = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    tenant = db.relationship("Tenant", backref=db.backref("settings", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "currency": self.currency,
            "timezone": self.timezone,
            "theme": self.theme,
            "tax_rate_bps": self.tax_rate_bps,
            "receipt_header": self.receipt_header,
            "receipt_footer": self.receipt_footer,
            "show_logo_on_receipt": self.show_logo_on_receipt,
            "show_cashier_on_receipt": self.show_cashier_on_receipt,
            "show_customer_on_receipt": self.show_customer_on_receipt,
            "show_tax_breakdown": self.show_tax_breakdown,
            "show_barcode": self.show_barcode,
            "receipt_width": self.receipt_width,
            "receipt_template": self.receipt_template,
            "barcode_format": self.barcode_format,
            "barcode_generation_strategy": self.barcode_generation_strategy,
            "barcode_prefix_type": self.barcode_prefix_type,
            "barcode_custom_prefix": self.barcode_custom_prefix,
            "barcode_next_sequence": self.barcode_next_sequence,
            "barcode_label_format": self.barcode_label_format,
            "barcode_show_price": self.barcode_show_price,
            "barcode_show_name": self.barcode_show_name,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
