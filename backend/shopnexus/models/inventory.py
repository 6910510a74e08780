from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


STOCK_LOG_TYPES = ("SALE", "RETURN", "IN", "OUT", "ADJUSTMENT")


class Product(db.Model):
    """
    Product master data with its live stock-on-hand.

    MULTI-TENANT: SKUs are unique within a tenant: UniqueConstraint("tenant_id", "sku").
    The same SKU may exist in another tenant.

    STOCK:
    - `stock` is only changed through stock_service.apply_stock_change, which
      appends a StockLog row for every change.
    - `opening_stock` is the stock the product was created with and is the
      base for replaying the ledger:
        opening_stock + SUM(stock_logs.change_amount) == stock
    - Stock may go negative; there is no floor.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "sku", name="uq_products_tenant_sku"),
        db.Index("ix_products_tenant_name", "tenant_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False)
    cost_price_cents = db.Column(db.Integer, nullable=True)

    stock = db.Column(db.Integer, nullable=False, default=0)
    opening_stock = db.Column(db.Integer, nullable=False, default=0)
    # Informational only, nothing enforces it
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=5)

    # Free-text category name plus optional Category row id
    category = db.Column(db.String(255), nullable=True)
    category_id = db.Column(db.Integer, nullable=True)
    supplier_id = db.Column(db.Integer, nullable=True)
    image_url = db.Column(db.String(512), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} stock={self.stock} tenant_id={self.tenant_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "cost_price_cents": self.cost_price_cents,
            "stock": self.stock,
            "opening_stock": self.opening_stock,
            "low_stock_threshold": self.low_stock_threshold,
            "category": self.category,
            "category_id": self.category_id,
            "supplier_id": self.supplier_id,
            "image_url": self.image_url,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Category(db.Model):
    """
    Product category.

    product_count is carried for clients but no write path maintains it;
    deleting a category leaves its products untouched.
    """
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    product_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "product_count": self.product_count,
            "created_at": to_utc_z(self.created_at),
        }


class StockLog(db.Model):
    """
    Append-only stock ledger row.

    Rows are never updated or deleted. product_id deliberately has no
    foreign key: the ledger outlives deleted products, and product_name/sku
    are snapshots taken when the row was written.
    """
    __tablename__ = "stock_logs"
    __table_args__ = (
        db.Index("ix_stock_logs_tenant_created", "tenant_id", "created_at"),
        db.Index("ix_stock_logs_product", "product_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    product_id = db.Column(db.Integer, nullable=False)
    product_name = db.Column(db.String(255), nullable=True)
    sku = db.Column(db.String(64), nullable=True)

    change_amount = db.Column(db.Integer, nullable=False)  # signed
    final_stock = db.Column(db.Integer, nullable=False)  # snapshot after the change
    type = db.Column(db.String(16), nullable=False, index=True)
    reason = db.Column(db.String(255), nullable=True)
    performed_by = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<StockLog id={self.id} product_id={self.product_id} {self.type} {self.change_amount:+d}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "change_amount": self.change_amount,
            "final_stock": self.final_stock,
            "type": self.type,
            "reason": self.reason,
            "performed_by": self.performed_by,
            "created_at": to_utc_z(self.created_at),
        }
