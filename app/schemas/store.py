# app/schemas/store.py
from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime


class StoreBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=7, max_length=20)
    address: str = Field(..., min_length=1, max_length=300)
    email: Optional[str] = None


class StoreCreate(StoreBase):
    password: str = Field(..., min_length=6)


class StoreUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    is_online: Optional[bool] = None


class StoreLocationUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class StoreOnlineUpdate(BaseModel):
    is_online: bool


class StoreServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(..., gt=0, allow_inf_nan=False)
    category: Optional[str] = None
    image: Optional[str] = None

    @validator('name')
    def name_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()


class StoreServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    category: Optional[str] = None
    image: Optional[str] = None
    is_suspended: Optional[bool] = None


class StoreServiceResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category: Optional[str] = None
    image: Optional[str] = None
    is_suspended: bool

    class Config:
        from_attributes = True


class StoreResponse(StoreBase):
    id: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_suspended: bool
    is_online: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NearbyStore(BaseModel):
    id: int
    name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    distance_m: float
    services: List[StoreServiceResponse]
