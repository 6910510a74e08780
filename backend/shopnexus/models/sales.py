from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


ORDER_STATUSES = ("PENDING", "PROCESSING", "COMPLETED", "CANCELLED", "RETURNED")
ORDER_ITEM_TYPES = ("SALE", "RETURN")
DISCOUNT_TYPES = ("PERCENT", "FIXED")


class Order(db.Model):
    """
    Sales order (POS ticket or back-office order).

    Stock is only moved on specific status transitions, see order_service.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_tenant_status_created", "tenant_id", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    # Creator of the order (the authenticated user)
    user_id = db.Column(db.Integer, nullable=False)
    salesperson_id = db.Column(db.Integer, nullable=True)
    salesperson_name = db.Column(db.String(255), nullable=True)
    customer_id = db.Column(db.Integer, nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)

    # All amounts in cents
    total_amount_cents = db.Column(db.Integer, nullable=False)
    discount_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_type = db.Column(db.String(8), nullable=True)
    is_return = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status} tenant_id={self.tenant_id}>"

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "user_id": self.user_id,
            "salesperson_id": self.salesperson_id,
            "salesperson_name": self.salesperson_name,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "status": self.status,
            "total_amount_cents": self.total_amount_cents,
            "discount_amount_cents": self.discount_amount_cents,
            "discount_type": self.discount_type,
            "is_return": self.is_return,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    product_id = db.Column(db.Integer, nullable=False)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price_at_time_cents = db.Column(db.Integer, nullable=False)
    cost_at_time_cents = db.Column(db.Integer, nullable=True)
    type = db.Column(db.String(8), nullable=False, default="SALE")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price_at_time_cents": self.price_at_time_cents,
            "cost_at_time_cents": self.cost_at_time_cents,
            "type": self.type,
        }
