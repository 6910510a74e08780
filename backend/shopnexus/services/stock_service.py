# Overview: Service-layer operations for the stock ledger; the single choke point for stock changes.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Product, StockLog
from ..models.inventory import STOCK_LOG_TYPES
from ..validation import require_choice
from .tenant_service import TenantScope
"""
Stock Ledger Invariants (authoritative)

- Product.stock is the live quantity; StockLog is its append-only history.
- Every stock change goes through apply_stock_change(), which updates the
  product AND appends exactly one StockLog row in the same DB transaction.
- StockLog rows are never updated or deleted.
- final_stock is a snapshot of Product.stock right after the change.
- Replay: Product.opening_stock + SUM(change_amount) == Product.stock.
- Stock may go negative; there is no floor check.

Concurrency:
- The increment is a single SQL UPDATE (stock = stock + delta), so two
  requests touching the same product cannot lose each other's update.
"""


STOCK_LOG_FEED_LIMIT = 100


def reference_suffix(entity_id: int) -> str:
    """Last six digits of an id, zero padded; used in ledger reasons."""
    return f"{entity_id:06d}"[-6:]


def apply_stock_change(
    scope: TenantScope,
    product: Product,
    amount: int,
    *,
    log_type: str,
    reason: str | None = None,
    performed_by: str | None = None,
) -> StockLog:
    """
    Add a signed amount to product.stock and append the ledger row.

    Flushes but does not commit: the caller owns the transaction.
    """
    require_choice(log_type, STOCK_LOG_TYPES, "type")
    if product.tenant_id != scope.tenant_id:
        # Never touch another tenant's product, even if handed one directly
        raise ValueError("product does not belong to tenant")

    db.session.flush()

    (
        scope.query(Product)
        .filter(Product.id == product.id)
        .update({Product.stock: Product.stock + amount}, synchronize_session=False)
    )
    db.session.refresh(product)

    log = StockLog(
        product_id=product.id,
        product_name=product.name,
        sku=product.sku,
        change_amount=amount,
        final_stock=product.stock,
        type=log_type,
        reason=reason,
        performed_by=performed_by,
    )
    scope.add(log)
    db.session.flush()  # ensures log.id is assigned without committing
    return log


def list_stock_logs(scope: TenantScope, *, limit: int = STOCK_LOG_FEED_LIMIT) -> list[StockLog]:
    """Most recent ledger rows of the tenant, newest first."""
    return (
        scope.query(StockLog)
        .order_by(StockLog.created_at.desc(), StockLog.id.desc())
        .limit(limit)
        .all()
    )


def product_stock_logs(scope: TenantScope, product_id: int) -> list[StockLog]:
    """Full ledger for one product in creation order."""
    return (
        scope.query(StockLog)
        .filter(StockLog.product_id == product_id)
        .order_by(StockLog.id.asc())
        .all()
    )


def replay_stock(scope: TenantScope, product: Product) -> int:
    """Recompute stock from opening_stock plus every ledger change."""
    total = (
        db.session.query(func.coalesce(func.sum(StockLog.change_amount), 0))
        .filter(
            StockLog.tenant_id == scope.tenant_id,
            StockLog.product_id == product.id,
        )
        .scalar()
    )
    return product.opening_stock + int(total or 0)


def find_ledger_mismatches(scope: TenantScope) -> list[dict]:
    """
    Products whose live stock disagrees with the replayed ledger.

    Empty list means the tenant's ledger is consistent.
    """
    mismatches = []
    for product in scope.query(Product).order_by(Product.id.asc()).all():
        replayed = replay_stock(scope, product)
        if replayed != product.stock:
            mismatches.append({
                "product_id": product.id,
                "sku": product.sku,
                "stock": product.stock,
                "replayed_stock": replayed,
            })
    return mismatches
