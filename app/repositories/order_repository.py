"""
Storage for Order records.

Every write here touches a single ``orders`` row (plus its items on create
and delete). ``conditional_update`` is a single ``UPDATE ... WHERE`` so the
database decides who wins when two requests race for the same order.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional, Sequence

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import Conflict, Internal, NotFound
from app.models.order import Order, OrderItem, utcnow

logger = logging.getLogger(__name__)


class IOrderRepository(ABC):
    @abstractmethod
    def find_by_id(self, order_id: int) -> Order:
        pass

    @abstractmethod
    def find_many(self, filters: Dict[str, Any], sort: Sequence = ()) -> Iterator[Order]:
        pass

    @abstractmethod
    def conditional_update(self, order_id: int, expected: Dict[str, Any], patch: Dict[str, Any]) -> Order:
        pass

    @abstractmethod
    def create(self, order: Order) -> Order:
        pass

    @abstractmethod
    def delete(self, order_id: int, expected: Optional[Dict[str, Any]] = None) -> None:
        pass


def _criterion(field: str, value: Any):
    column = getattr(Order, field)
    if value is None:
        return column.is_(None)
    if isinstance(value, (list, tuple, set, frozenset)):
        return column.in_(list(value))
    return column == value


class SqlAlchemyOrderRepository(IOrderRepository):

    def __init__(self, db: Session, batch_size: int = 100):
        self.db = db
        self.batch_size = batch_size

    def _load(self, order_id: int, refresh: bool = False) -> Optional[Order]:
        return self.db.get(
            Order,
            order_id,
            options=[selectinload(Order.items)],
            populate_existing=refresh,
        )

    def find_by_id(self, order_id: int) -> Order:
        order = self._load(order_id)
        if not order:
            raise NotFound("Order not found", order_id=order_id)
        return order

    def find_many(self, filters: Dict[str, Any], sort: Sequence = ()) -> Iterator[Order]:
        """
        Stream orders matching ``filters`` (field -> value, ``None`` means
        IS NULL, a tuple means IN). Rows are fetched in batches as the
        caller iterates.
        """
        query = self.db.query(Order).options(
            selectinload(Order.items),
            selectinload(Order.store),
            selectinload(Order.user),
        )
        for field, value in filters.items():
            query = query.filter(_criterion(field, value))
        if sort:
            query = query.order_by(*sort)

        yield from query.yield_per(self.batch_size)

    def conditional_update(self, order_id: int, expected: Dict[str, Any], patch: Dict[str, Any]) -> Order:
        """
        Apply ``patch`` only if the row still matches ``expected``.

        Raises Conflict when no row matched. The caller has already read the
        order, so a miss means someone else changed it in between.
        """
        criteria = [Order.id == order_id]
        criteria.extend(_criterion(field, value) for field, value in expected.items())

        values = dict(patch)
        values["version"] = Order.version + 1
        values["updated_at"] = utcnow()

        stmt = (
            update(Order)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            matched = result.rowcount
            if matched == 1:
                self.db.commit()
            else:
                self.db.rollback()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Conditional update failed for order %s", order_id)
            raise Internal()

        if matched != 1:
            logger.warning("Conditional update lost for order %s (expected %s)", order_id, expected)
            raise Conflict("Order was modified by another request", order_id=order_id)

        return self._load(order_id, refresh=True)

    def create(self, order: Order) -> Order:
        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not persist new order for store %s", order.store_id)
            raise Internal()

        return self._load(order.id, refresh=True)

    def delete(self, order_id: int, expected: Optional[Dict[str, Any]] = None) -> None:
        """
        Remove the order and its items in one transaction. With ``expected``
        the row is only removed if it still matches, else Conflict.
        """
        order = self.find_by_id(order_id)

        criteria = [Order.id == order_id]
        criteria.extend(_criterion(field, value) for field, value in (expected or {}).items())

        try:
            self.db.execute(
                delete(OrderItem)
                .where(OrderItem.order_id == order_id)
                .execution_options(synchronize_session=False)
            )
            result = self.db.execute(
                delete(Order).where(*criteria).execution_options(synchronize_session=False)
            )
            matched = result.rowcount
            if matched == 1:
                self.db.commit()
            else:
                self.db.rollback()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not delete order %s", order_id)
            raise Internal()

        if matched != 1:
            logger.warning("Delete lost for order %s (expected %s)", order_id, expected)
            raise Conflict("Order was modified by another request", order_id=order_id)

        self.db.expunge(order)
