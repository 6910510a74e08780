from .tenancy import Tenant, TenantSettings
from .auth import User
from .inventory import Product, Category, StockLog
from .sales import Order, OrderItem
from .purchasing import PurchaseOrder, PurchaseOrderItem
from .customers import Customer, Supplier, Expense

__all__ = [
    'Tenant', 'TenantSettings',
    'User',
    'Product', 'Category', 'StockLog',
    'Order', 'OrderItem',
    'PurchaseOrder', 'PurchaseOrderItem',
    'Customer', 'Supplier', 'Expense',
]
