"""
Order lifecycle: creation, store-scoped reads, status changes and deletion.
"""
import logging
from typing import Any, Dict, Iterator, Optional, Union

from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, InvalidState, NotFound, ValidationFailed
from app.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from app.models.store import Store
from app.models.user import User
from app.repositories.order_repository import IOrderRepository, SqlAlchemyOrderRepository
from app.schemas.order import OrderCreate
from app.services.validation_service import (
    USER_CANCELLABLE,
    compute_total,
    ensure_transition,
    is_store_edge,
    parse_id,
    parse_order_draft,
)

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, db: Session, orders: Optional[IOrderRepository] = None):
        self.db = db
        self.orders = orders or SqlAlchemyOrderRepository(db)

    # ============================================
    # CREATE
    # ============================================

    def create_order(self, user_id: Any, data: Union[OrderCreate, Dict[str, Any]]) -> Order:
        """
        Place a new order for ``user_id``.

        The order starts ``pending`` with payment ``pending`` and no delivery
        partner. ``total_amount`` is computed from the items; a total sent by
        the client is never used.
        """
        user_id = parse_id(user_id, "user ID")
        draft = parse_order_draft(data)
        total = compute_total(draft.items)

        user = self.db.get(User, user_id)
        if not user:
            raise ValidationFailed("User not found.", user_id=user_id)

        store = self.db.get(Store, draft.store_id)
        if not store:
            raise ValidationFailed("Store not found.", store_id=draft.store_id)
        if store.is_suspended:
            raise InvalidState("Store is not accepting orders.", store_id=store.id)

        service_names = {service.id: service.name for service in store.services}

        order = Order(
            user_id=user_id,
            store_id=store.id,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_method=draft.payment_method,
            total_amount=total,
            pickup_address=draft.pickup_address.model_dump(),
            delivery_address=draft.delivery_address.model_dump(),
            pickup_date=draft.pickup_date,
            notes=draft.notes,
            items=[
                OrderItem(
                    position=position,
                    service_id=item.service_id,
                    clothing_type_id=item.clothing_type_id,
                    name=item.name or service_names.get(item.service_id),
                    quantity=item.quantity,
                    price=item.price,
                )
                for position, item in enumerate(draft.items)
            ],
        )

        created = self.orders.create(order)
        logger.info(
            "Order %s created by user %s for store %s (total %s)",
            created.id, user_id, store.id, created.total_amount,
        )
        return created

    # ============================================
    # STORE SIDE
    # ============================================

    def list_orders_for_store(self, store_id: Any, status: Optional[str] = None) -> Iterator[Order]:
        store_id = parse_id(store_id, "store ID")
        filters = {"store_id": store_id}
        if status is not None:
            if status not in OrderStatus.ALL:
                raise ValidationFailed(f"Unknown order status: {status}")
            filters["status"] = status

        return self.orders.find_many(filters, sort=(Order.created_at.desc(), Order.id.desc()))

    def get_order_detail(self, order_id: Any, store_id: Any) -> Order:
        """Another store's order is reported exactly like a missing one."""
        order_id = parse_id(order_id, "order ID")
        store_id = parse_id(store_id, "store ID")

        order = self.orders.find_by_id(order_id)
        if order.store_id != store_id:
            raise NotFound("Order not found", order_id=order_id)
        return order

    def delete_order(self, order_id: Any, store_id: Any) -> None:
        order_id = parse_id(order_id, "order ID")
        store_id = parse_id(store_id, "store ID")

        order = self.orders.find_by_id(order_id)
        if order.store_id != store_id:
            raise Forbidden("You can only delete your own store's orders.", order_id=order_id)
        if order.status not in OrderStatus.DELETABLE:
            raise InvalidState(
                f"Only pending or created orders can be deleted (current status: {order.status})",
                current_status=order.status,
            )

        self.orders.delete(
            order_id,
            expected={"status": OrderStatus.DELETABLE, "delivery_personnel_id": None},
        )
        logger.info("Order %s deleted by store %s", order_id, store_id)

    def advance_order_status(self, order_id: Any, store_id: Any, new_status: str) -> Order:
        """Store-driven transitions, cancellation included."""
        order = self.get_order_detail(order_id, store_id)
        if new_status not in OrderStatus.ALL:
            raise ValidationFailed(f"Unknown order status: {new_status}")

        current = order.status
        ensure_transition(current, new_status)
        if not is_store_edge(current, new_status):
            raise Forbidden(
                f"Stores cannot move an order from {current} to {new_status}",
                order_id=order.id,
            )

        updated = self.orders.conditional_update(
            order.id,
            expected={"status": current},
            patch={"status": new_status},
        )
        logger.info(
            "Order %s moved %s -> %s by store %s", updated.id, current, new_status, updated.store_id
        )
        return updated

    def cancel_order_by_store(self, order_id: Any, store_id: Any) -> Order:
        return self.advance_order_status(order_id, store_id, OrderStatus.CANCELLED)

    # ============================================
    # END USER SIDE
    # ============================================

    def list_orders_for_user(self, user_id: Any) -> Iterator[Order]:
        user_id = parse_id(user_id, "user ID")
        return self.orders.find_many(
            {"user_id": user_id}, sort=(Order.created_at.desc(), Order.id.desc())
        )

    def get_order_for_user(self, order_id: Any, user_id: Any) -> Order:
        order_id = parse_id(order_id, "order ID")
        user_id = parse_id(user_id, "user ID")

        order = self.orders.find_by_id(order_id)
        if order.user_id != user_id:
            raise NotFound("Order not found", order_id=order_id)
        return order

    def cancel_order_by_user(self, order_id: Any, user_id: Any) -> Order:
        order = self.get_order_for_user(order_id, user_id)
        if order.status not in USER_CANCELLABLE:
            raise InvalidState(
                f"Order can no longer be cancelled (current status: {order.status})",
                current_status=order.status,
            )

        updated = self.orders.conditional_update(
            order.id,
            expected={"status": order.status, "delivery_personnel_id": None},
            patch={"status": OrderStatus.CANCELLED},
        )
        logger.info("Order %s cancelled by user %s", order.id, order.user_id)
        return updated
