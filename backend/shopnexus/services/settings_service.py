# Overview: Service-layer operations for tenant settings, tenant profile, barcode issuance and dashboard stats.

from __future__ import annotations

import re
import secrets

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Tenant, TenantSettings, Order, Product, Customer
from ..validation import (
    ModelValidationPolicy,
    SERVER_OWNED_FIELDS,
    ValidationError,
    validate_payload,
    require_choice,
)
from ..time_utils import utcnow
from .tenant_service import TenantScope


RECEIPT_WIDTHS = ("58mm", "80mm", "A4")
RECEIPT_TEMPLATES = ("classic", "modern", "minimal", "bold")
THEMES = ("light", "dark")
BARCODE_FORMATS = ("CODE128", "CODE39")
BARCODE_STRATEGIES = ("SEQUENTIAL", "RANDOM", "COMPOSITE")
BARCODE_PREFIX_TYPES = ("NONE", "CATEGORY", "NAME", "CUSTOM")
BARCODE_LABEL_FORMATS = ("A4_30", "THERMAL_50x30", "THERMAL_40x20")

# Fields checked against a fixed set of choices on update
SETTINGS_CHOICES = {
    "theme": THEMES,
    "receipt_width": RECEIPT_WIDTHS,
    "receipt_template": RECEIPT_TEMPLATES,
    "barcode_format": BARCODE_FORMATS,
    "barcode_generation_strategy": BARCODE_STRATEGIES,
    "barcode_prefix_type": BARCODE_PREFIX_TYPES,
    "barcode_label_format": BARCODE_LABEL_FORMATS,
}

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields={
        "currency", "timezone", "theme", "tax_rate_bps",
        "receipt_header", "receipt_footer",
        "show_logo_on_receipt", "show_cashier_on_receipt", "show_customer_on_receipt",
        "show_tax_breakdown", "show_barcode", "receipt_width", "receipt_template",
        "barcode_format", "barcode_generation_strategy", "barcode_prefix_type",
        "barcode_custom_prefix", "barcode_label_format", "barcode_show_price", "barcode_show_name",
    },
    # The barcode sequence only moves through issue_barcode; echoed values are dropped
    ignored_fields=SERVER_OWNED_FIELDS | {"barcode_next_sequence"},
)

TENANT_PROFILE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "logo_url", "email", "phone", "address", "website"},
    ignored_fields=SERVER_OWNED_FIELDS | {
        "slug", "status", "subscription_tier", "subscription_status",
        "subscription_expiry", "last_activity_at",
    },
)

# Maximum tax rate: 100.00%
MAX_TAX_RATE_BPS = 10_000

RECENT_ORDERS_LIMIT = 10


def get_settings(scope: TenantScope) -> TenantSettings:
    """Return the tenant's settings row, creating it with defaults on first read."""
    settings = scope.query(TenantSettings).first()
    if settings is None:
        settings = TenantSettings()
        scope.add(settings)
        db.session.commit()
    return settings


def update_settings(scope: TenantScope, payload: dict) -> dict:
    """
    Full-document upsert of the tenant's settings.

    Raises:
        ValidationError: unknown field, bad type, or value outside its choices
    """
    patch = validate_payload(model=TenantSettings, payload=payload, policy=SETTINGS_POLICY, partial=True)

    for field_name, choices in SETTINGS_CHOICES.items():
        if field_name in patch:
            require_choice(patch[field_name], choices, field_name)
    if "tax_rate_bps" in patch:
        if not 0 <= patch["tax_rate_bps"] <= MAX_TAX_RATE_BPS:
            raise ValidationError(f"tax_rate_bps must be between 0 and {MAX_TAX_RATE_BPS}")

    settings = get_settings(scope)
    for k, v in patch.items():
        setattr(settings, k, v)
    db.session.commit()
    return settings.to_dict()


def update_tenant_profile(scope: TenantScope, payload: dict) -> dict:
    patch = validate_payload(model=Tenant, payload=payload, policy=TENANT_PROFILE_POLICY, partial=True)
    tenant = scope.tenant()
    for k, v in patch.items():
        setattr(tenant, k, v)
    db.session.commit()
    current_app.logger.info("Tenant %s profile updated: %s", tenant.id, ", ".join(sorted(patch)) or "no changes")
    return tenant.to_dict()


def _prefix_source(value) -> str:
    """First three ASCII letters/digits of a name, uppercased."""
    if not value:
        return ""
    return re.sub(r"[^A-Za-z0-9]", "", str(value))[:3].upper()


def barcode_prefix(settings: TenantSettings, *, product_name=None, category=None) -> str:
    prefix_type = settings.barcode_prefix_type
    if prefix_type == "CUSTOM":
        return settings.barcode_custom_prefix or ""
    if prefix_type == "CATEGORY":
        return _prefix_source(category)
    if prefix_type == "NAME":
        return _prefix_source(product_name)
    return ""


def _take_sequence(scope: TenantScope, settings: TenantSettings) -> int:
    """
    Atomically claim the current barcode_next_sequence and advance it by one.

    The UPDATE runs first, so two concurrent callers never read the same value.
    """
    (
        scope.query(TenantSettings)
        .filter(TenantSettings.id == settings.id)
        .update(
            {TenantSettings.barcode_next_sequence: TenantSettings.barcode_next_sequence + 1},
            synchronize_session=False,
        )
    )
    db.session.refresh(settings)
    return settings.barcode_next_sequence - 1


def issue_barcode(scope: TenantScope, payload: dict | None = None) -> dict:
    """
    Issue the next barcode for a product according to the tenant's settings.

    SEQUENTIAL:  prefix + sequence
    COMPOSITE:   prefix + YYMM + sequence zero-padded to 5
    RANDOM:      prefix + 6 random digits (sequence untouched)
    """
    payload = payload or {}
    settings = get_settings(scope)
    prefix = barcode_prefix(
        settings,
        product_name=payload.get("product_name"),
        category=payload.get("category"),
    )

    strategy = settings.barcode_generation_strategy
    sequence = None
    if strategy == "RANDOM":
        barcode = f"{prefix}{secrets.randbelow(900_000) + 100_000}"
    else:
        sequence = _take_sequence(scope, settings)
        if strategy == "COMPOSITE":
            barcode = f"{prefix}{utcnow():%y%m}{sequence:05d}"
        else:
            barcode = f"{prefix}{sequence}"

    db.session.commit()
    return {
        "barcode": barcode,
        "format": settings.barcode_format,
        "strategy": strategy,
        "sequence": sequence,
    }


def get_dashboard_stats(scope: TenantScope) -> dict:
    """
    Read-side aggregation for the dashboard.

    Revenue ignores CANCELLED and RETURNED orders; recent_orders is the ten
    most recently created orders, newest first.
    """
    product_count = scope.query(Product).count()
    order_count = scope.query(Order).count()
    customer_count = scope.query(Customer).count()

    revenue = (
        scope.query(Order)
        .filter(Order.status.notin_(("CANCELLED", "RETURNED")))
        .with_entities(func.coalesce(func.sum(Order.total_amount_cents), 0))
        .scalar()
    )

    recent = (
        scope.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS_LIMIT)
        .all()
    )

    return {
        "product_count": product_count,
        "order_count": order_count,
        "customer_count": customer_count,
        "total_revenue_cents": int(revenue or 0),
        "recent_orders": [o.to_dict(include_items=False) for o in recent],
    }
