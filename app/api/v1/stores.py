"""
Store owner endpoints: login, location, inventory and orders
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.dependencies import get_access_policy, get_current_store
from app.core.database import get_db
from app.core.security import ROLE_STORE, AccessPolicy
from app.models.store import Store
from app.schemas.order import OrderResponse, OrderStatusUpdate
from app.schemas.store import (
    StoreLocationUpdate,
    StoreOnlineUpdate,
    StoreResponse,
    StoreServiceCreate,
    StoreServiceResponse,
    StoreServiceUpdate,
)
from app.schemas.user import StoreLogin, TokenResponse
from app.services.auth_service import AuthService
from app.services.order_service import OrderService
from app.services.store_service import StoreService
from app.utils.responses import success_response

router = APIRouter(prefix="/store", tags=["store"])


@router.post("/login")
def store_login(
    data: StoreLogin,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    token = AuthService(db, policy).authenticate_store(data.phone, data.password)
    return success_response("Login successful", TokenResponse(access_token=token, role=ROLE_STORE))


# ========================================
# PROFILE
# ========================================

@router.patch("/location")
def update_store_location(
    data: StoreLocationUpdate,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    store = StoreService(db).update_location(current_store.id, data.latitude, data.longitude)
    return success_response("Location updated successfully", {
        "latitude": store.latitude,
        "longitude": store.longitude,
    })


@router.patch("/online")
def update_online_status(
    data: StoreOnlineUpdate,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    store = StoreService(db).set_online(current_store.id, data.is_online)
    return success_response(
        f"Store is now {'online' if store.is_online else 'offline'}",
        StoreResponse.model_validate(store),
    )


# ========================================
# INVENTORY
# ========================================

@router.get("/")
def get_inventory(
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    services = StoreService(db).get_inventory(current_store.id)
    return success_response(
        "Inventory fetched successfully",
        [StoreServiceResponse.model_validate(s) for s in services],
    )


@router.post("/services", status_code=201)
def add_service(
    data: StoreServiceCreate,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    service = StoreService(db).add_service(current_store.id, data)
    return success_response("Service added successfully", StoreServiceResponse.model_validate(service))


@router.patch("/services/{service_id}")
def edit_service(
    service_id: int,
    data: StoreServiceUpdate,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    service = StoreService(db).update_service(current_store.id, service_id, data)
    return success_response("Service updated successfully", StoreServiceResponse.model_validate(service))


@router.delete("/services/{service_id}")
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    StoreService(db).delete_service(current_store.id, service_id)
    return success_response("Service deleted successfully")


# ========================================
# ORDERS
# ========================================

@router.get("/orders")
def get_store_orders(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    orders = OrderService(db).list_orders_for_store(current_store.id, status)
    label = f"{status} orders" if status else "All orders"
    return success_response(f"{label} fetched", [OrderResponse.model_validate(o) for o in orders])


@router.get("/orders/{order_id}")
def get_order_details(
    order_id: str,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    order = OrderService(db).get_order_detail(order_id, current_store.id)
    return success_response("Order details fetched", OrderResponse.model_validate(order))


@router.patch("/orders/{order_id}/status")
def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    order = OrderService(db).advance_order_status(order_id, current_store.id, data.status)
    return success_response(f"Order moved to {order.status}", OrderResponse.model_validate(order))


@router.delete("/orders/{order_id}")
def delete_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_store: Store = Depends(get_current_store),
):
    OrderService(db).delete_order(order_id, current_store.id)
    return success_response("Order deleted")
