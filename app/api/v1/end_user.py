"""
End-user endpoints: nearby stores, orders and promotions
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.order import OrderCreate, OrderResponse
from app.schemas.promotion import PromotionApply, PromotionResponse
from app.schemas.store import NearbyStore, StoreServiceResponse
from app.services.order_service import OrderService
from app.services.promotion_service import PromotionService
from app.services.store_service import StoreService
from app.utils.responses import success_response

router = APIRouter(prefix="/end-user", tags=["end user"])


@router.get("/nearby")
def get_nearby_stores(
    request: Request,
    latitude: float = Query(...),
    longitude: float = Query(...),
    max_distance: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """Online, non-suspended stores around a point, nearest first"""
    default_distance = request.app.state.settings.DEFAULT_NEARBY_DISTANCE_M
    if not max_distance or max_distance <= 0:
        max_distance = default_distance

    nearby = StoreService(db).find_nearby(latitude, longitude, max_distance)
    stores = [
        NearbyStore(
            id=store.id,
            name=store.name,
            address=store.address,
            phone=store.phone,
            latitude=store.latitude,
            longitude=store.longitude,
            distance_m=round(dist, 1),
            services=[
                StoreServiceResponse.model_validate(s) for s in store.services if not s.is_suspended
            ],
        )
        for store, dist in nearby
    ]
    return success_response("Nearby stores fetched successfully", {"stores": stores})


@router.post("/orders", status_code=201)
def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = OrderService(db).create_order(current_user.id, data)
    return success_response("Order created successfully.", OrderResponse.model_validate(order))


@router.get("/orders")
def get_my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    orders = OrderService(db).list_orders_for_user(current_user.id)
    return success_response("Orders fetched", [OrderResponse.model_validate(o) for o in orders])


@router.get("/orders/{order_id}")
def get_my_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = OrderService(db).get_order_for_user(order_id, current_user.id)
    return success_response("Order details fetched", OrderResponse.model_validate(order))


@router.patch("/orders/{order_id}/cancel")
def cancel_my_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = OrderService(db).cancel_order_by_user(order_id, current_user.id)
    return success_response("Order cancelled", OrderResponse.model_validate(order))


@router.post("/promotions/apply")
def apply_promotion(
    data: PromotionApply,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    promo = PromotionService(db).apply_promotion(data.promotion_id, current_user.id)
    return success_response("Promotion applied successfully.", PromotionResponse.model_validate(promo))
