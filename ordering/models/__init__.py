from .base import Base
from .order import ORDER_STATUSES, Order
from .order_item import OrderItem
from .payment import PAYMENT_STATUSES, PAYMENT_TYPES, Payment
from .product import Product
from .shipping_info import ShippingInfo

__all__ = [
    "Base",
    "ORDER_STATUSES",
    "Order",
    "OrderItem",
    "PAYMENT_STATUSES",
    "PAYMENT_TYPES",
    "Payment",
    "Product",
    "ShippingInfo",
]
