"""
Store catalog: admin management, store owner profile/inventory and the
nearby search used by end users.
"""
import logging
from math import asin, cos, radians, sin, sqrt
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import Conflict, NotFound, ValidationFailed
from app.core.security import hash_password
from app.models.store import Store, StoreService as StoreServiceItem
from app.schemas.store import StoreCreate, StoreServiceCreate, StoreServiceUpdate, StoreUpdate

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000.0


def distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres (haversine)."""
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(sqrt(a))


class StoreService:
    def __init__(self, db: Session):
        self.db = db

    def get_store(self, store_id: int) -> Store:
        store = self.db.query(Store).filter(Store.id == store_id).first()
        if not store:
            raise NotFound("Store not found.", store_id=store_id)
        return store

    def list_stores(self) -> List[Store]:
        return self.db.query(Store).order_by(Store.id).all()

    def create_store(self, data: StoreCreate) -> Store:
        existing = self.db.query(Store).filter(Store.phone == data.phone).first()
        if existing:
            raise Conflict("Store with this phone already exists.")

        store = Store(
            name=data.name,
            phone=data.phone,
            email=data.email,
            address=data.address,
            password_hash=hash_password(data.password),
        )
        self.db.add(store)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Store with this phone already exists.")
        self.db.refresh(store)

        logger.info("Store %s created (%s)", store.id, store.name)
        return store

    def update_store(self, store_id: int, data: StoreUpdate) -> Store:
        store = self.get_store(store_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(store, key, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Store with this phone already exists.")
        self.db.refresh(store)
        return store

    def delete_store(self, store_id: int) -> None:
        store = self.get_store(store_id)
        if store.orders:
            # Orders keep a reference to their store for their whole life
            raise Conflict("Store has orders and cannot be deleted; suspend it instead.")
        self.db.delete(store)
        self.db.commit()
        logger.info("Store %s deleted", store_id)

    def toggle_suspension(self, store_id: int) -> Store:
        store = self.get_store(store_id)
        store.is_suspended = not store.is_suspended
        self.db.commit()
        self.db.refresh(store)

        logger.info("Store %s %s", store_id, "suspended" if store.is_suspended else "unsuspended")
        return store

    def update_location(self, store_id: int, latitude: float, longitude: float) -> Store:
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise ValidationFailed("Invalid latitude or longitude")

        store = self.get_store(store_id)
        store.latitude = latitude
        store.longitude = longitude
        self.db.commit()
        self.db.refresh(store)
        return store

    def set_online(self, store_id: int, is_online: bool) -> Store:
        store = self.get_store(store_id)
        store.is_online = is_online
        self.db.commit()
        self.db.refresh(store)
        return store

    # ============================================
    # NEARBY
    # ============================================

    def find_nearby(self, latitude: float, longitude: float, max_distance_m: float) -> List[Tuple[Store, float]]:
        """
        Online, non-suspended stores within ``max_distance_m``, nearest first.

        A bounding box narrows the query; the exact distance is checked in
        Python.
        """
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise ValidationFailed("Invalid or missing latitude/longitude")

        # 1 degree of latitude is about 111 km
        lat_range = max_distance_m / 111000.0
        cos_lat = abs(cos(radians(latitude)))
        lng_range = 180.0 if cos_lat < 1e-6 else min(180.0, max_distance_m / (111000.0 * cos_lat))

        candidates = self.db.query(Store).options(selectinload(Store.services)).filter(
            Store.is_suspended == False,  # noqa: E712
            Store.is_online == True,  # noqa: E712
            Store.latitude.isnot(None),
            Store.longitude.isnot(None),
            Store.latitude.between(latitude - lat_range, latitude + lat_range),
        ).all()

        nearby = []
        for store in candidates:
            # Longitude is filtered here so boxes crossing the antimeridian still work
            dlng = abs(store.longitude - longitude) % 360
            if min(dlng, 360 - dlng) > lng_range:
                continue
            dist = distance_m(latitude, longitude, store.latitude, store.longitude)
            if dist <= max_distance_m:
                nearby.append((store, dist))

        nearby.sort(key=lambda pair: pair[1])
        return nearby

    # ============================================
    # INVENTORY
    # ============================================

    def get_inventory(self, store_id: int) -> List[StoreServiceItem]:
        store = self.get_store(store_id)
        return self.db.query(StoreServiceItem).filter(
            StoreServiceItem.store_id == store.id
        ).order_by(StoreServiceItem.id).all()

    def add_service(self, store_id: int, data: StoreServiceCreate) -> StoreServiceItem:
        store = self.get_store(store_id)
        service = StoreServiceItem(store_id=store.id, is_suspended=False, **data.model_dump())
        self.db.add(service)
        self.db.commit()
        self.db.refresh(service)

        logger.info("Service %s added to store %s", service.id, store_id)
        return service

    def _get_service(self, store_id: int, service_id: int) -> StoreServiceItem:
        service = self.db.query(StoreServiceItem).filter(
            StoreServiceItem.id == service_id,
            StoreServiceItem.store_id == store_id,
        ).first()
        if not service:
            raise NotFound("Service not found", service_id=service_id)
        return service

    def update_service(self, store_id: int, service_id: int, data: StoreServiceUpdate) -> StoreServiceItem:
        service = self._get_service(store_id, service_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(service, key, value)
        self.db.commit()
        self.db.refresh(service)
        return service

    def delete_service(self, store_id: int, service_id: int) -> None:
        service = self._get_service(store_id, service_id)
        self.db.delete(service)
        self.db.commit()
        logger.info("Service %s removed from store %s", service_id, store_id)
