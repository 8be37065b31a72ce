"""Tests for the order lifecycle service."""

import pytest

from app.core.exceptions import Forbidden, InvalidState, NotFound, ValidationFailed
from app.models.order import Order, OrderStatus, PaymentStatus
from app.services.assignment_service import AssignmentService
from app.services.order_service import OrderService

from conftest import make_partner, make_store, make_user, order_payload


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def store(db):
    return make_store(db, services=["Wash & Fold", "Dry Clean"])


@pytest.fixture
def service(db):
    return OrderService(db)


def order_count(db):
    return db.query(Order).count()


def force_status(db, order_id, status):
    db.query(Order).filter(Order.id == order_id).update({"status": status})
    db.commit()


class TestCreateOrder:
    def test_total_is_recomputed_from_items(self, service, user, store):
        payload = order_payload(store.id, totalAmount=1, total_amount=1)
        order = service.create_order(user.id, payload)

        assert order.total_amount == 2 * 40.0 + 1 * 120.5
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.payment_method == "cash"
        assert order.delivery_personnel_id is None

    def test_items_keep_their_order(self, service, user, store):
        items = [
            {"service_id": 9, "clothing_type_id": 1, "quantity": 1, "price": 10},
            {"service_id": 3, "clothing_type_id": 2, "quantity": 4, "price": 0},
            {"service_id": 5, "clothing_type_id": 3, "quantity": 3, "price": 7.5},
        ]
        order = service.create_order(user.id, order_payload(store.id, items=items))

        assert [i.service_id for i in order.items] == [9, 3, 5]
        assert order.total_amount == 10 + 0 + 22.5

    def test_item_name_filled_from_store_services(self, service, user, store):
        service_id = store.services[0].id
        items = [{"service_id": service_id, "clothing_type_id": 1, "quantity": 1, "price": 50}]
        order = service.create_order(user.id, order_payload(store.id, items=items))

        assert order.items[0].name == "Wash & Fold"

    @pytest.mark.parametrize("item", [
        {"service_id": 1, "clothing_type_id": 1, "quantity": 0, "price": 10},
        {"service_id": 1, "clothing_type_id": 1, "quantity": -2, "price": 10},
        {"service_id": 1, "clothing_type_id": 1, "quantity": 1, "price": -0.5},
        {"service_id": 1, "clothing_type_id": 1, "quantity": 1, "price": float("inf")},
        {"service_id": 1, "clothing_type_id": 1, "quantity": 1, "price": float("nan")},
        {"service_id": 1, "clothing_type_id": 1, "price": 10},
    ])
    def test_bad_item_is_rejected_without_write(self, db, service, user, store, item):
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, order_payload(store.id, items=[item]))
        assert order_count(db) == 0

    def test_total_overflow_rejected_without_write(self, db, service, user, store):
        items = [{"service_id": 1, "clothing_type_id": 1, "quantity": 10, "price": 1e308}]
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, order_payload(store.id, items=items))
        assert order_count(db) == 0

    def test_empty_items_rejected(self, db, service, user, store):
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, order_payload(store.id, items=[]))
        assert order_count(db) == 0

    @pytest.mark.parametrize("geo", [
        {"lat": 91, "lng": 0},
        {"lat": -90.5, "lng": 0},
        {"lat": 0, "lng": 180.1},
        {"lat": 0},
    ])
    def test_bad_coordinates_rejected(self, db, service, user, store, geo):
        payload = order_payload(store.id)
        payload["delivery_address"]["geo_location"] = geo
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, payload)
        assert order_count(db) == 0

    def test_blank_text_address_rejected(self, service, user, store):
        payload = order_payload(store.id)
        payload["pickup_address"]["text_address"] = "   "
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, payload)

    def test_missing_payment_method_rejected(self, service, user, store):
        payload = order_payload(store.id)
        del payload["payment_method"]
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, payload)

    def test_unknown_store_rejected(self, db, service, user):
        with pytest.raises(ValidationFailed):
            service.create_order(user.id, order_payload(9999))
        assert order_count(db) == 0

    def test_unknown_user_rejected(self, db, service, store):
        with pytest.raises(ValidationFailed):
            service.create_order(4242, order_payload(store.id))
        assert order_count(db) == 0

    def test_suspended_store_rejected(self, db, service, user):
        suspended = make_store(db, name="Closed Cleaners", is_suspended=True)
        with pytest.raises(InvalidState):
            service.create_order(user.id, order_payload(suspended.id))
        assert order_count(db) == 0


class TestStoreReads:
    def test_detail_round_trip(self, db, service, user, store):
        created = service.create_order(user.id, order_payload(store.id))
        created_items = [(i.service_id, i.clothing_type_id, i.quantity, i.price) for i in created.items]
        created_address = dict(created.pickup_address)
        db.expunge_all()

        fetched = service.get_order_detail(created.id, store.id)

        assert [(i.service_id, i.clothing_type_id, i.quantity, i.price) for i in fetched.items] == created_items
        assert fetched.pickup_address == created_address
        assert fetched.total_amount == created.total_amount

    def test_detail_for_other_store_is_not_found(self, db, service, user, store):
        other = make_store(db, name="Other Laundry")
        order = service.create_order(user.id, order_payload(store.id))

        with pytest.raises(NotFound):
            service.get_order_detail(order.id, other.id)

    def test_detail_missing_order(self, service, store):
        with pytest.raises(NotFound):
            service.get_order_detail(12345, store.id)

    def test_list_is_scoped_and_filtered(self, db, service, user, store):
        other = make_store(db, name="Other Laundry")
        first = service.create_order(user.id, order_payload(store.id))
        second = service.create_order(user.id, order_payload(store.id))
        service.create_order(user.id, order_payload(other.id))
        service.cancel_order_by_store(first.id, store.id)

        all_orders = list(service.list_orders_for_store(store.id))
        pending = list(service.list_orders_for_store(store.id, OrderStatus.PENDING))

        assert [o.id for o in all_orders] == [second.id, first.id]
        assert [o.id for o in pending] == [second.id]

    def test_list_with_unknown_status(self, service, store):
        with pytest.raises(ValidationFailed):
            service.list_orders_for_store(store.id, "in-progress")


class TestDeleteOrder:
    def test_owner_deletes_pending_order(self, db, service, user, store):
        order = service.create_order(user.id, order_payload(store.id))
        service.delete_order(order.id, store.id)

        assert order_count(db) == 0
        with pytest.raises(NotFound):
            service.get_order_detail(order.id, store.id)

    def test_other_store_is_forbidden(self, db, service, user, store):
        other = make_store(db, name="Other Laundry")
        order = service.create_order(user.id, order_payload(store.id))

        with pytest.raises(Forbidden):
            service.delete_order(order.id, other.id)
        assert order_count(db) == 1

    def test_accepted_order_cannot_be_deleted(self, db, service, user, store):
        partner = make_partner(db)
        order = service.create_order(user.id, order_payload(store.id))
        AssignmentService(db).accept_order(order.id, partner.id)

        with pytest.raises(InvalidState):
            service.delete_order(order.id, store.id)
        assert order_count(db) == 1

    def test_missing_order(self, service, store):
        with pytest.raises(NotFound):
            service.delete_order(777, store.id)

    def test_malformed_id(self, service, store):
        with pytest.raises(ValidationFailed):
            service.delete_order("abc", store.id)


class TestStatusChanges:
    def _assigned(self, db, service, user, store):
        partner = make_partner(db)
        order = service.create_order(user.id, order_payload(store.id))
        assignment = AssignmentService(db)
        assignment.accept_order(order.id, partner.id)
        assignment.mark_picked_up(order.id, partner.id)
        return order, partner, assignment

    def test_store_processing_steps(self, db, service, user, store):
        order, partner, assignment = self._assigned(db, service, user, store)

        assert service.advance_order_status(order.id, store.id, OrderStatus.IN_PROCESS).status == OrderStatus.IN_PROCESS
        assert service.advance_order_status(order.id, store.id, OrderStatus.READY).status == OrderStatus.READY

        delivered = assignment.mark_delivered(order.id, partner.id)
        assert delivered.status == OrderStatus.DELIVERED
        assert delivered.delivery_date is not None
        assert delivered.payment_status == PaymentStatus.COMPLETED

    def test_cannot_skip_states(self, db, service, user, store):
        order = service.create_order(user.id, order_payload(store.id))

        with pytest.raises(InvalidState):
            service.advance_order_status(order.id, store.id, OrderStatus.READY)
        assert service.get_order_detail(order.id, store.id).status == OrderStatus.PENDING

    def test_store_cannot_accept_on_behalf_of_partner(self, service, user, store):
        order = service.create_order(user.id, order_payload(store.id))

        with pytest.raises(Forbidden):
            service.advance_order_status(order.id, store.id, OrderStatus.ACCEPTED)

    def test_store_cannot_mark_delivered(self, db, service, user, store):
        order, _, _ = self._assigned(db, service, user, store)
        service.advance_order_status(order.id, store.id, OrderStatus.IN_PROCESS)
        service.advance_order_status(order.id, store.id, OrderStatus.READY)

        with pytest.raises(Forbidden):
            service.advance_order_status(order.id, store.id, OrderStatus.DELIVERED)

    def test_terminal_states_are_final(self, service, user, store):
        order = service.create_order(user.id, order_payload(store.id))
        service.cancel_order_by_store(order.id, store.id)

        with pytest.raises(InvalidState):
            service.advance_order_status(order.id, store.id, OrderStatus.PENDING)
        with pytest.raises(InvalidState):
            service.cancel_order_by_store(order.id, store.id)

    def test_store_cancels_in_progress_order(self, db, service, user, store):
        order, _, _ = self._assigned(db, service, user, store)
        cancelled = service.cancel_order_by_store(order.id, store.id)
        assert cancelled.status == OrderStatus.CANCELLED

    def test_user_cancels_pending_order(self, service, user, store):
        order = service.create_order(user.id, order_payload(store.id))
        assert service.cancel_order_by_user(order.id, user.id).status == OrderStatus.CANCELLED

    def test_user_cannot_cancel_after_acceptance(self, db, service, user, store):
        partner = make_partner(db)
        order = service.create_order(user.id, order_payload(store.id))
        AssignmentService(db).accept_order(order.id, partner.id)

        with pytest.raises(InvalidState):
            service.cancel_order_by_user(order.id, user.id)

    def test_user_cannot_see_other_users_order(self, db, service, user, store):
        other = make_user(db, name="Meera")
        order = service.create_order(user.id, order_payload(store.id))

        with pytest.raises(NotFound):
            service.get_order_for_user(order.id, other.id)
        assert [o.id for o in service.list_orders_for_user(other.id)] == []


class TestCreatedOrders:
    @pytest.fixture
    def created(self, db, service, user, store):
        order = service.create_order(user.id, order_payload(store.id))
        force_status(db, order.id, OrderStatus.CREATED)
        return order

    def test_store_deletes_created_order(self, db, service, store, created):
        service.delete_order(created.id, store.id)
        assert order_count(db) == 0

    def test_store_releases_created_order_to_partners(self, db, service, store, created):
        partner = make_partner(db)

        released = service.advance_order_status(created.id, store.id, OrderStatus.PENDING)
        assert released.status == OrderStatus.PENDING

        accepted = AssignmentService(db).accept_order(created.id, partner.id)
        assert accepted.status == OrderStatus.ACCEPTED

    def test_user_cancels_created_order(self, service, user, created):
        assert service.cancel_order_by_user(created.id, user.id).status == OrderStatus.CANCELLED

    def test_partner_cannot_accept_created_order(self, db, created):
        partner = make_partner(db)

        with pytest.raises(InvalidState):
            AssignmentService(db).accept_order(created.id, partner.id)

        db.expire_all()
        untouched = db.get(Order, created.id)
        assert untouched.status == OrderStatus.CREATED
        assert untouched.delivery_personnel_id is None
