from .auth import User
from .inventory import Category, Supplier, Product, StockMovement
from .sales import Order, OrderItem
from .financial import Transaction
from .activity import ActivityLog

__all__ = [
    'User',
    'Category', 'Supplier', 'Product', 'StockMovement',
    'Order', 'OrderItem',
    'Transaction',
    'ActivityLog',
]
