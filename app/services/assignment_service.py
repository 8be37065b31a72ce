"""
Assignment of pending orders to delivery partners.

Partners list the unassigned orders and race to claim one. The claim is a
single conditional write on ``status`` + ``delivery_personnel_id``; the
checks that run before it only produce friendlier errors, they do not
protect the invariant.
"""
import logging
from typing import Any, Iterator, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, InvalidState, ValidationFailed
from app.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus, utcnow
from app.repositories.order_repository import IOrderRepository, SqlAlchemyOrderRepository
from app.repositories.partner_directory import PartnerDirectory
from app.schemas.order import AvailableOrder, OrderItemResponse, StoreSummary, UserSummary
from app.services.validation_service import ensure_transition, is_partner_edge, parse_id

logger = logging.getLogger(__name__)


class AssignmentService:
    def __init__(
        self,
        db: Session,
        orders: Optional[IOrderRepository] = None,
        partners: Optional[PartnerDirectory] = None,
    ):
        self.db = db
        self.orders = orders or SqlAlchemyOrderRepository(db)
        self.partners = partners or PartnerDirectory(db)

    def list_available_orders(self) -> Iterator[AvailableOrder]:
        """Pending, unassigned orders, oldest first."""
        orders = self.orders.find_many(
            {"status": OrderStatus.PENDING, "delivery_personnel_id": None},
            sort=(Order.created_at.asc(), Order.id.asc()),
        )
        for order in orders:
            yield AvailableOrder(
                id=order.id,
                store=StoreSummary(
                    id=order.store.id,
                    name=order.store.name,
                    address=order.store.address,
                    phone=order.store.phone,
                ),
                user=UserSummary(id=order.user.id, name=order.user.name, phone=order.user.phone),
                items=[OrderItemResponse.model_validate(item) for item in order.items],
                total_amount=order.total_amount,
                pickup_address=order.pickup_address,
                delivery_address=order.delivery_address,
                pickup_date=order.pickup_date,
                payment_method=order.payment_method,
                created_at=order.created_at,
            )

    def accept_order(self, order_id: Any, partner_id: Any) -> Order:
        """
        Claim ``order_id`` for ``partner_id``.

        Checks run in a fixed order, each with its own error. If another
        partner wins between the checks and the write, Conflict is raised
        and nothing is changed.
        """
        order_id = parse_id(order_id, "order ID")
        partner_id = parse_id(partner_id, "delivery partner ID")

        partner = self.partners.find_by_id(partner_id)
        if not partner.is_approved:
            raise Forbidden("Delivery partner is not approved.", partner_id=partner_id)
        if not partner.is_available:
            raise InvalidState("Delivery partner is not available.", partner_id=partner_id)

        order = self.orders.find_by_id(order_id)
        if order.status != OrderStatus.PENDING:
            raise InvalidState(
                f"Order is not available for pickup (current status: {order.status})",
                current_status=order.status,
            )
        if order.delivery_personnel_id is not None:
            raise InvalidState("Order is already assigned to a delivery partner.", order_id=order_id)

        updated = self.orders.conditional_update(
            order_id,
            expected={"status": OrderStatus.PENDING, "delivery_personnel_id": None},
            patch={"delivery_personnel_id": partner_id, "status": OrderStatus.ACCEPTED},
        )
        logger.info("Order %s accepted by delivery partner %s", order_id, partner_id)
        return updated

    def mark_picked_up(self, order_id: Any, partner_id: Any) -> Order:
        return self._advance(order_id, partner_id, OrderStatus.PICKED_UP)

    def mark_delivered(self, order_id: Any, partner_id: Any) -> Order:
        return self._advance(order_id, partner_id, OrderStatus.DELIVERED)

    def list_partner_orders(self, partner_id: Any, status: Optional[str] = None) -> Iterator[Order]:
        partner_id = parse_id(partner_id, "delivery partner ID")
        filters = {"delivery_personnel_id": partner_id}
        if status is not None:
            if status not in OrderStatus.ALL:
                raise ValidationFailed(f"Unknown order status: {status}")
            filters["status"] = status
        return self.orders.find_many(filters, sort=(Order.updated_at.desc(), Order.id.desc()))

    def _advance(self, order_id: Any, partner_id: Any, new_status: str) -> Order:
        order_id = parse_id(order_id, "order ID")
        partner_id = parse_id(partner_id, "delivery partner ID")

        order = self.orders.find_by_id(order_id)
        if order.delivery_personnel_id != partner_id:
            raise Forbidden("Order is not assigned to you.", order_id=order_id)

        current = order.status
        ensure_transition(current, new_status)
        if not is_partner_edge(current, new_status):
            raise Forbidden(
                f"Delivery partners cannot move an order from {current} to {new_status}",
                order_id=order_id,
            )

        patch = {"status": new_status}
        if new_status == OrderStatus.PICKED_UP:
            patch["picked_up_at"] = utcnow()
        elif new_status == OrderStatus.DELIVERED:
            patch["delivery_date"] = utcnow()
            if order.payment_method == PaymentMethod.CASH:
                patch["payment_status"] = PaymentStatus.COMPLETED

        updated = self.orders.conditional_update(
            order_id,
            expected={"status": current, "delivery_personnel_id": partner_id},
            patch=patch,
        )
        logger.info("Order %s moved %s -> %s by delivery partner %s", order_id, current, new_status, partner_id)
        return updated
