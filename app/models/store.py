"""
Store model - laundry stores and their services
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(200), nullable=True)
    address = Column(String(300), nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Location
    latitude = Column(Float, nullable=True, index=True)
    longitude = Column(Float, nullable=True, index=True)

    # Estado
    is_suspended = Column(Boolean, default=False, nullable=False)
    is_online = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    services = relationship(
        "StoreService",
        back_populates="store",
        cascade="all, delete-orphan",
        order_by="StoreService.id",
    )
    orders = relationship("Order", back_populates="store")


class StoreService(Base):
    __tablename__ = "store_services"

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    category = Column(String(100), nullable=True)
    image = Column(String(500), nullable=True)
    is_suspended = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    store = relationship("Store", back_populates="services")
