# backend/shopnexus/services/products_service.py
"""
Catalog Service with Multi-Tenant Support

MULTI-TENANT: All product and category operations go through the caller's
TenantScope.
- SKU uniqueness is per tenant
- update/delete of a product outside the tenant is reported as not found
- stock is never written directly; a changed stock on update becomes an
  ADJUSTMENT through the stock ledger
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Product, Category
from ..validation import ConflictError
from .stock_service import apply_stock_change
from .tenant_service import TenantScope

PRODUCT_MUTABLE_FIELDS = {
    "sku", "name", "description", "price_cents", "cost_price_cents",
    "low_stock_threshold", "category", "category_id", "supplier_id", "image_url",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _sku_taken(scope: TenantScope, sku: str, exclude_id: int | None = None) -> bool:
    q = scope.query(Product).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    return q.first() is not None


def _flush_or_conflict() -> None:
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("SKU already exists for this tenant.")


def list_products(scope: TenantScope) -> dict:
    products = scope.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def create_product(scope: TenantScope, *, patch: dict) -> dict:
    """
    Create product using a validated patch dict.

    The initial stock becomes opening_stock, the base of the ledger replay;
    no ledger row is written for it.

    Raises:
        ConflictError: If SKU already exists in the tenant
    """
    sku = patch.get("sku")
    if _sku_taken(scope, sku):
        raise ConflictError("SKU already exists for this tenant.")

    opening = patch.get("stock") or 0
    p = Product(stock=opening, opening_stock=opening)
    apply_product_patch(p, patch)
    scope.add(p)
    _flush_or_conflict()

    db.session.commit()
    return p.to_dict()


def update_product(scope: TenantScope, *, product_id: int, patch: dict, performed_by: str | None = None) -> dict:
    """
    Update a product of the tenant.

    Raises:
        NotFoundError: no product with this id in the tenant
        ConflictError: new SKU collides with another product of the tenant
    """
    p = scope.get_or_404(Product, product_id, "Product")

    if "sku" in patch and patch["sku"] != p.sku and _sku_taken(scope, patch["sku"], exclude_id=p.id):
        raise ConflictError("SKU already exists for this tenant.")

    apply_product_patch(p, patch)
    _flush_or_conflict()

    new_stock = patch.get("stock")
    if new_stock is not None and new_stock != p.stock:
        apply_stock_change(
            scope,
            p,
            new_stock - p.stock,
            log_type="ADJUSTMENT",
            reason="Manual stock update",
            performed_by=performed_by,
        )

    db.session.commit()
    return p.to_dict()


def delete_product(scope: TenantScope, *, product_id: int) -> None:
    """
    Delete a product of the tenant. Its ledger rows are kept.

    Raises:
        NotFoundError: no product with this id in the tenant
    """
    p = scope.get_or_404(Product, product_id, "Product")
    db.session.delete(p)
    db.session.commit()


def list_categories(scope: TenantScope) -> dict:
    categories = scope.query(Category).order_by(Category.name.asc(), Category.id.asc()).all()
    return {
        "items": [c.to_dict() for c in categories],
        "count": len(categories),
    }


def create_category(scope: TenantScope, *, patch: dict) -> dict:
    c = Category(**patch)
    scope.add(c)
    db.session.commit()
    return c.to_dict()


def delete_category(scope: TenantScope, *, category_id: int) -> None:
    """Delete a category; products that reference it are left as they are."""
    c = scope.get_or_404(Category, category_id, "Category")
    db.session.delete(c)
    db.session.commit()
