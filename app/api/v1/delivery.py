"""
Delivery partner endpoints: registration, login and order handling
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_access_policy, get_current_partner
from app.core.database import get_db
from app.core.security import ROLE_DELIVERY, AccessPolicy
from app.models.delivery_partner import DeliveryPartner
from app.schemas.delivery_partner import (
    AvailabilityUpdate,
    DeliveryPartnerLogin,
    DeliveryPartnerRegister,
    DeliveryPartnerResponse,
)
from app.schemas.order import OrderResponse
from app.schemas.user import TokenResponse
from app.services.assignment_service import AssignmentService
from app.services.auth_service import AuthService
from app.services.delivery_partner_service import DeliveryPartnerService
from app.utils.responses import success_response

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.post("/register", status_code=201)
def register_partner(
    data: DeliveryPartnerRegister,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    """The partner stays unapproved until an admin approves them"""
    partner = AuthService(db, policy).register_partner(data)
    return success_response(
        "Registration received, pending approval.",
        DeliveryPartnerResponse.model_validate(partner),
    )


@router.post("/login")
def partner_login(
    data: DeliveryPartnerLogin,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    token = AuthService(db, policy).authenticate_partner(data.email, data.password)
    return success_response("Login successful", TokenResponse(access_token=token, role=ROLE_DELIVERY))


@router.patch("/availability")
def update_availability(
    data: AvailabilityUpdate,
    db: Session = Depends(get_db),
    current_partner: DeliveryPartner = Depends(get_current_partner),
):
    partner = DeliveryPartnerService(db).set_availability(current_partner.id, data.is_available)
    return success_response("Availability updated", DeliveryPartnerResponse.model_validate(partner))


# ========================================
# ORDERS
# ========================================

@router.get("/orders/available")
def get_available_orders(
    db: Session = Depends(get_db),
    current_partner: DeliveryPartner = Depends(get_current_partner),
):
    orders = list(AssignmentService(db).list_available_orders())
    return success_response("Available orders fetched", orders)


@router.get("/orders")
def get_my_orders(
    db: Session = Depends(get_db),
    current_partner: DeliveryPartner = Depends(get_current_partner),
):
    orders = AssignmentService(db).list_partner_orders(current_partner.id)
    return success_response("Assigned orders fetched", [OrderResponse.model_validate(o) for o in orders])


@router.patch("/orders/{order_id}/accept")
def accept_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_partner: DeliveryPartner = Depends(get_current_partner),
):
    order = AssignmentService(db).accept_order(order_id, current_partner.id)
    return success_response("Order accepted", OrderResponse.model_validate(order))


@router.patch("/orders/{order_id}/pickup")
def mark_picked_up(
    order_id: str,
    db: Session = Depends(get_db),
    current_partner: DeliveryPartner = Depends(get_current_partner),
):
    order = AssignmentService(db).mark_picked_up(order_id, current_partner.id)
    return success_response("Order picked up", OrderResponse.model_validate(order))


@router.patch("/orders/{order_id}/deliver")
def mark_delivered(
    order_id: str,
    db: Session = Depends(get_db),
    current_partner: DeliveryPartner = Depends(get_current_partner),
):
    order = AssignmentService(db).mark_delivered(order_id, current_partner.id)
    return success_response("Order delivered", OrderResponse.model_validate(order))
