"""
Promotion and PromotionUsage models
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.sql import func
from app.core.database import Base


class Promotion(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    discount_type = Column(String(20), nullable=False)  # 'flat', 'percentage'
    discount_value = Column(Float, nullable=False)

    valid_till = Column(DateTime(timezone=True), nullable=True)  # time-based
    usage_limit = Column(Integer, nullable=True)  # quantity-based
    used_count = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class PromotionUsage(Base):
    __tablename__ = "promotion_usages"
    __table_args__ = (
        UniqueConstraint("user_id", "promotion_id", name="uq_promotion_usage_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id"), nullable=False, index=True)
    used_at = Column(DateTime(timezone=True), server_default=func.now())
