from fastapi import APIRouter
from app.api.v1 import (
    users,
    end_user,
    stores,
    delivery,
    admin
)

api_router = APIRouter()

api_router.include_router(users.router)
api_router.include_router(end_user.router)
api_router.include_router(stores.router)
api_router.include_router(delivery.router)
api_router.include_router(admin.router)
