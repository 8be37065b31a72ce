# app/schemas/promotion.py
from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime


class PromotionCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    discount_type: Literal["flat", "percentage"]
    discount_value: float = Field(..., gt=0, allow_inf_nan=False)
    valid_till: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, gt=0)


class PromotionApply(BaseModel):
    promotion_id: int = Field(..., gt=0)


class PromotionResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    discount_type: str
    discount_value: float
    valid_till: Optional[datetime] = None
    usage_limit: Optional[int] = None
    used_count: int
    is_active: bool

    class Config:
        from_attributes = True
