# app/schemas/order.py
from pydantic import BaseModel, Field, validator
from typing import List, Literal, Optional
from datetime import datetime

PaymentMethodLiteral = Literal["cash", "online"]
OrderStatusLiteral = Literal[
    "created", "pending", "accepted", "picked_up", "in_process", "ready", "delivered", "cancelled"
]


class GeoLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Address(BaseModel):
    text_address: str
    geo_location: GeoLocation

    @validator('text_address')
    def text_address_required(cls, v):
        if not v or not v.strip():
            raise ValueError('text_address must not be empty')
        return v.strip()


class OrderItemIn(BaseModel):
    service_id: int = Field(..., gt=0)
    clothing_type_id: int = Field(..., gt=0)
    name: Optional[str] = None
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0, allow_inf_nan=False)


class OrderCreate(BaseModel):
    """
    Draft of a new order. Any client-sent total is dropped: the stored
    total is always recomputed from the items.
    """
    store_id: int = Field(..., gt=0)
    items: List[OrderItemIn] = Field(..., min_length=1)
    pickup_address: Address
    delivery_address: Address
    pickup_date: datetime
    payment_method: PaymentMethodLiteral
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatusLiteral


class OrderItemResponse(BaseModel):
    service_id: int
    clothing_type_id: int
    name: Optional[str] = None
    quantity: int
    price: float

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    store_id: int
    delivery_personnel_id: Optional[int] = None
    items: List[OrderItemResponse]
    total_amount: float
    pickup_address: Address
    delivery_address: Address
    status: OrderStatusLiteral
    payment_status: str
    payment_method: str
    pickup_date: datetime
    picked_up_at: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StoreSummary(BaseModel):
    id: int
    name: str
    address: str
    phone: str


class UserSummary(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None


class AvailableOrder(BaseModel):
    """Unassigned order as shown to delivery partners."""
    id: int
    store: StoreSummary
    user: UserSummary
    items: List[OrderItemResponse]
    total_amount: float
    pickup_address: Address
    delivery_address: Address
    pickup_date: datetime
    payment_method: str
    created_at: datetime
