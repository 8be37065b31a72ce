"""
Export every model
"""
from app.models.store import Store, StoreService
from app.models.user import User, Admin
from app.models.delivery_partner import DeliveryPartner
from app.models.order import Order, OrderItem, OrderStatus, PaymentStatus, PaymentMethod
from app.models.promotion import Promotion, PromotionUsage

__all__ = [
    "Store",
    "StoreService",
    "User",
    "Admin",
    "DeliveryPartner",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "Promotion",
    "PromotionUsage",
]
