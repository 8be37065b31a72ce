"""
Order model - laundry orders and their lifecycle
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class OrderStatus:
    CREATED = "created"
    PENDING = "pending"
    ACCEPTED = "accepted"
    PICKED_UP = "picked_up"
    IN_PROCESS = "in_process"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    ALL = (CREATED, PENDING, ACCEPTED, PICKED_UP, IN_PROCESS, READY, DELIVERED, CANCELLED)
    TERMINAL = (DELIVERED, CANCELLED)
    DELETABLE = (PENDING, CREATED)


class PaymentStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    ALL = (PENDING, COMPLETED, FAILED)


class PaymentMethod:
    CASH = "cash"
    ONLINE = "online"

    ALL = (CASH, ONLINE)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    delivery_personnel_id = Column(Integer, ForeignKey("delivery_partners.id"), nullable=True, index=True)

    status = Column(String(20), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(String(20), default=PaymentStatus.PENDING, nullable=False)
    payment_method = Column(String(20), nullable=False)

    total_amount = Column(Float, nullable=False)

    # {"text_address": str, "geo_location": {"lat": float, "lng": float}}
    pickup_address = Column(JSON, nullable=False)
    delivery_address = Column(JSON, nullable=False)

    pickup_date = Column(DateTime(timezone=True), nullable=False)
    picked_up_at = Column(DateTime(timezone=True), nullable=True)
    delivery_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text)

    # Bumped by every conditional write; never exposed
    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    store = relationship("Store", back_populates="orders")
    user = relationship("User", back_populates="orders")
    delivery_partner = relationship("DeliveryPartner", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    def __repr__(self):
        return f"<Order #{self.id} Store:{self.store_id} Status:{self.status}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    service_id = Column(Integer, nullable=False)
    clothing_type_id = Column(Integer, nullable=False)
    name = Column(String(200))
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
