# Overview: Flask API routes for catalog operations (products, categories, stock logs).

"""
Catalog routes with multi-tenant support.

MULTI-TENANT: Every route runs through @require_auth and reaches data only via
g.scope, so a product of another tenant answers exactly like a missing one.
"""
from flask import Blueprint, request, g

from ..services import products_service
from ..services.stock_service import list_stock_logs
from ..models import Product, Category
from ..validation import ModelValidationPolicy, validate_payload, enforce_amounts
from ..decorators import require_auth

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "sku", "name", "description", "price_cents", "cost_price_cents", "stock",
        "low_stock_threshold", "category", "category_id", "supplier_id", "image_url",
    },
    required_on_create={"sku", "name", "price_cents"},
)

# opening_stock is echoed back by clients doing full-document PUTs but is never writable
PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_POLICY.writable_fields,
    ignored_fields=PRODUCT_POLICY.ignored_fields | {"opening_stock"},
)

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")
categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")
stock_logs_bp = Blueprint("stock_logs", __name__, url_prefix="/api/stock-logs")


@products_bp.get("")
@require_auth
def list_products():
    return products_service.list_products(g.scope)


@products_bp.post("")
@require_auth
def create_product_route():
    """
    Create a new product in the caller's tenant.

    The initial `stock` becomes the product's opening_stock.
    """
    payload = request.get_json(silent=True) or {}

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_amounts(patch, "price_cents", "cost_price_cents")

    created = products_service.create_product(g.scope, patch=patch)
    return created, 201


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    """
    Update a product.

    A changed `stock` is booked as an ADJUSTMENT in the stock ledger.
    """
    payload = request.get_json(silent=True) or {}

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
    enforce_amounts(patch, "price_cents", "cost_price_cents")

    return products_service.update_product(
        g.scope,
        product_id=product_id,
        patch=patch,
        performed_by=g.current_user.name,
    )


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    products_service.delete_product(g.scope, product_id=product_id)
    return {"message": "Product removed"}


@categories_bp.get("")
@require_auth
def list_categories():
    return products_service.list_categories(g.scope)


@categories_bp.post("")
@require_auth
def create_category_route():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    return products_service.create_category(g.scope, patch=patch), 201


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    products_service.delete_category(g.scope, category_id=category_id)
    return {"message": "Category removed"}


@stock_logs_bp.get("")
@require_auth
def get_stock_logs():
    """Newest 100 ledger rows of the tenant, newest first."""
    logs = list_stock_logs(g.scope)
    return {"items": [log.to_dict() for log in logs], "count": len(logs)}
