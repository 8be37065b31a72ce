"""Tests for the store catalog and the nearby search."""

import pytest

from app.core.exceptions import Conflict, NotFound, ValidationFailed
from app.schemas.store import StoreServiceCreate, StoreServiceUpdate, StoreUpdate
from app.services.store_service import StoreService, distance_m

from conftest import make_store

# Connaught Place, New Delhi
CP = (28.6315, 77.2167)


@pytest.fixture
def stores(db):
    return StoreService(db)


def test_distance_m():
    assert distance_m(*CP, *CP) == 0
    # India Gate is roughly 2.4 km from Connaught Place
    assert 2000 < distance_m(*CP, 28.6129, 77.2295) < 2800


class TestFindNearby:
    def test_filters_and_orders_by_distance(self, db, stores):
        far = make_store(db, name="Far Fold", latitude=28.6129, longitude=77.2295)
        near = make_store(db, name="Near Fold", latitude=28.6320, longitude=77.2170)
        make_store(db, name="Offline Fold", latitude=28.6316, longitude=77.2168, is_online=False)
        make_store(db, name="Banned Fold", latitude=28.6316, longitude=77.2168, is_suspended=True)
        make_store(db, name="Gurgaon Fold", latitude=28.4595, longitude=77.0266)

        found = stores.find_nearby(*CP, 5000)

        assert [s.id for s, _ in found] == [near.id, far.id]
        assert found[0][1] < found[1][1] <= 5000

    def test_radius_shrinks_results(self, db, stores):
        make_store(db, name="Far Fold", latitude=28.6129, longitude=77.2295)
        assert stores.find_nearby(*CP, 1000) == []

    def test_stores_without_location_are_skipped(self, db, stores):
        make_store(db, name="Nowhere Fold", latitude=None, longitude=None)
        assert stores.find_nearby(*CP, 5000) == []

    def test_invalid_coordinates(self, stores):
        with pytest.raises(ValidationFailed):
            stores.find_nearby(95, 77.2, 5000)


class TestStoreProfile:
    def test_update_location(self, db, stores):
        store = make_store(db)
        moved = stores.update_location(store.id, 19.0760, 72.8777)
        assert (moved.latitude, moved.longitude) == (19.0760, 72.8777)

    def test_update_location_rejects_bad_coordinates(self, db, stores):
        store = make_store(db)
        with pytest.raises(ValidationFailed):
            stores.update_location(store.id, 10, 200)

    def test_set_online(self, db, stores):
        store = make_store(db, is_online=True)
        assert stores.set_online(store.id, False).is_online is False

    def test_missing_store(self, stores):
        with pytest.raises(NotFound):
            stores.get_store(31337)


class TestInventory:
    def test_add_update_delete(self, db, stores):
        store = make_store(db)

        added = stores.add_service(store.id, StoreServiceCreate(name="  Steam Iron ", price=15))
        assert added.name == "Steam Iron"
        assert [s.id for s in stores.get_inventory(store.id)] == [added.id]

        updated = stores.update_service(store.id, added.id, StoreServiceUpdate(price=18, is_suspended=True))
        assert updated.price == 18
        assert updated.is_suspended is True

        stores.delete_service(store.id, added.id)
        assert stores.get_inventory(store.id) == []

    def test_service_of_another_store(self, db, stores):
        owner = make_store(db, services=["Dry Clean"])
        other = make_store(db, name="Other Laundry")

        with pytest.raises(NotFound):
            stores.update_service(other.id, owner.services[0].id, StoreServiceUpdate(price=99))

    def test_blank_service_name(self):
        with pytest.raises(ValueError):
            StoreServiceCreate(name="   ", price=10)

    @pytest.mark.parametrize("price", [float("inf"), float("nan")])
    def test_service_price_must_be_finite(self, price):
        with pytest.raises(ValueError):
            StoreServiceCreate(name="Steam Iron", price=price)
        with pytest.raises(ValueError):
            StoreServiceUpdate(price=price)


def test_duplicate_phone_on_update(db, stores):
    first = make_store(db, phone="9000000001")
    second = make_store(db, name="Second Fold", phone="9000000002")

    with pytest.raises(Conflict):
        stores.update_store(second.id, StoreUpdate(phone=first.phone))
