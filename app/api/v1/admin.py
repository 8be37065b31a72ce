"""
Admin panel: stores, delivery partners and promotions
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_access_policy, get_current_admin
from app.core.database import get_db
from app.core.security import ROLE_ADMIN, AccessPolicy
from app.models.user import Admin
from app.schemas.delivery_partner import DeliveryPartnerCreate, DeliveryPartnerResponse, DeliveryPartnerUpdate
from app.schemas.promotion import PromotionCreate, PromotionResponse
from app.schemas.store import StoreCreate, StoreResponse, StoreUpdate
from app.schemas.user import AdminLogin, AdminPasswordUpdate, TokenResponse
from app.services.auth_service import AuthService
from app.services.delivery_partner_service import DeliveryPartnerService
from app.services.promotion_service import PromotionService
from app.services.store_service import StoreService
from app.utils.responses import success_response

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login")
def admin_login(
    data: AdminLogin,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    token = AuthService(db, policy).authenticate_admin(data.email, data.password)
    return success_response("Login successful", TokenResponse(access_token=token, role=ROLE_ADMIN))


@router.patch("/password")
def update_admin_password(
    data: AdminPasswordUpdate,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
    current_admin: Admin = Depends(get_current_admin),
):
    AuthService(db, policy).update_admin_password(current_admin.id, data.current_password, data.new_password)
    return success_response("Password updated")


# ========================================
# STORES
# ========================================

@router.post("/stores", status_code=201)
def create_store(
    data: StoreCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    store = StoreService(db).create_store(data)
    return success_response("Store created successfully.", StoreResponse.model_validate(store))


@router.get("/stores")
def get_all_stores(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    stores = StoreService(db).list_stores()
    return success_response("Stores retrieved successfully.", [StoreResponse.model_validate(s) for s in stores])


@router.get("/stores/{store_id}")
def get_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    store = StoreService(db).get_store(store_id)
    return success_response("Store retrieved successfully.", StoreResponse.model_validate(store))


@router.patch("/stores/{store_id}")
def update_store(
    store_id: int,
    data: StoreUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    store = StoreService(db).update_store(store_id, data)
    return success_response("Store updated successfully.", StoreResponse.model_validate(store))


@router.delete("/stores/{store_id}")
def delete_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    StoreService(db).delete_store(store_id)
    return success_response("Store deleted successfully.")


@router.patch("/stores/{store_id}/suspend")
def toggle_store_suspension(
    store_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    store = StoreService(db).toggle_suspension(store_id)
    return success_response(
        f"Store has been {'suspended' if store.is_suspended else 'unsuspended'}.",
        {"is_suspended": store.is_suspended},
    )


# ========================================
# DELIVERY PARTNERS
# ========================================

@router.get("/delivery")
def get_all_delivery_partners(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    partners = DeliveryPartnerService(db).list_partners()
    return success_response(
        "Delivery partners fetched.",
        [DeliveryPartnerResponse.model_validate(p) for p in partners],
    )


@router.post("/delivery", status_code=201)
def add_delivery_partner(
    data: DeliveryPartnerCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    partner = DeliveryPartnerService(db).add_partner(data)
    return success_response("Partner added successfully.", DeliveryPartnerResponse.model_validate(partner))


@router.get("/delivery/{partner_id}")
def get_partner_by_id(
    partner_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    partner = DeliveryPartnerService(db).get_partner(partner_id)
    return success_response("Partner details fetched.", DeliveryPartnerResponse.model_validate(partner))


@router.patch("/delivery/{partner_id}")
def update_partner(
    partner_id: int,
    data: DeliveryPartnerUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    partner = DeliveryPartnerService(db).update_partner(partner_id, data)
    return success_response("Partner updated.", DeliveryPartnerResponse.model_validate(partner))


@router.patch("/delivery/{partner_id}/approve")
def approve_partner(
    partner_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    partner = DeliveryPartnerService(db).approve_partner(partner_id)
    return success_response("Partner approved.", DeliveryPartnerResponse.model_validate(partner))


@router.delete("/delivery/{partner_id}")
def delete_partner(
    partner_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    DeliveryPartnerService(db).delete_partner(partner_id)
    return success_response("Partner deleted.")


# ========================================
# PROMOTIONS
# ========================================

@router.get("/promotions")
def get_all_promotions(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    promos = PromotionService(db).list_promotions()
    return success_response("Promotions retrieved successfully.", [PromotionResponse.model_validate(p) for p in promos])


@router.post("/promotions", status_code=201)
def add_promotion(
    data: PromotionCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    promo = PromotionService(db).add_promotion(data)
    return success_response("Promotion added successfully.", PromotionResponse.model_validate(promo))
