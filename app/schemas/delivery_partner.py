# app/schemas/delivery_partner.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class VehicleDetails(BaseModel):
    type: str = Field(..., min_length=1)
    number_plate: str = Field(..., min_length=1)
    model: Optional[str] = None


class IdentityProofDocument(BaseModel):
    type: str = Field(..., min_length=1)
    document_url: str = Field(..., pattern=r"^https?://")


class DeliveryPartnerRegister(BaseModel):
    """Self-registration; the partner stays unapproved until an admin approves."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=10, max_length=15)
    address: str = Field(..., min_length=1)
    vehicle_details: VehicleDetails
    license_number: str = Field(..., min_length=1)
    identity_proof_document: IdentityProofDocument


class DeliveryPartnerLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class DeliveryPartnerCreate(BaseModel):
    """Admin-side creation."""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=10, max_length=15)
    address: str = Field(..., min_length=1)
    vehicle_number: str = Field(..., min_length=1)
    id_proof: str = Field(..., min_length=1)


class DeliveryPartnerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    vehicle_number: Optional[str] = None
    id_proof: Optional[str] = None
    license_number: Optional[str] = None
    is_approved: Optional[bool] = None
    is_available: Optional[bool] = None


class AvailabilityUpdate(BaseModel):
    is_available: bool


class DeliveryPartnerResponse(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    address: str
    vehicle_number: str
    license_number: Optional[str] = None
    is_approved: bool
    is_available: bool
    total_earnings: float
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True
