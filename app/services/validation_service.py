"""
Validation helpers shared by the order services: identifiers, order drafts,
totals and the order status machine.
"""
from math import isfinite
from typing import Any, Dict, Iterable, Union

from pydantic import ValidationError

from app.core.exceptions import InvalidState, ValidationFailed
from app.models.order import OrderStatus
from app.schemas.order import OrderCreate


# Forward edges of the lifecycle; cancelled is added for every non-terminal state below
TRANSITIONS = {
    OrderStatus.CREATED: (OrderStatus.PENDING,),
    OrderStatus.PENDING: (OrderStatus.ACCEPTED,),
    OrderStatus.ACCEPTED: (OrderStatus.PICKED_UP,),
    OrderStatus.PICKED_UP: (OrderStatus.IN_PROCESS,),
    OrderStatus.IN_PROCESS: (OrderStatus.READY,),
    OrderStatus.READY: (OrderStatus.DELIVERED,),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}
for _status, _targets in list(TRANSITIONS.items()):
    if _status not in OrderStatus.TERMINAL:
        TRANSITIONS[_status] = _targets + (OrderStatus.CANCELLED,)

# Who may drive each edge. pending -> accepted belongs to accept_order alone.
STORE_EDGES = {
    (OrderStatus.CREATED, OrderStatus.PENDING),
    (OrderStatus.PICKED_UP, OrderStatus.IN_PROCESS),
    (OrderStatus.IN_PROCESS, OrderStatus.READY),
}
PARTNER_EDGES = {
    (OrderStatus.ACCEPTED, OrderStatus.PICKED_UP),
    (OrderStatus.READY, OrderStatus.DELIVERED),
}
USER_CANCELLABLE = (OrderStatus.CREATED, OrderStatus.PENDING)


def parse_id(value: Any, label: str = "id") -> int:
    """Accept a positive int (or its decimal string form) as an identifier."""
    if isinstance(value, bool):
        raise ValidationFailed(f"Invalid {label} format.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ValidationFailed(f"Invalid {label} format.")

    if parsed <= 0:
        raise ValidationFailed(f"Invalid {label} format.")
    return parsed


def parse_order_draft(data: Union[OrderCreate, Dict[str, Any]]) -> OrderCreate:
    if isinstance(data, OrderCreate):
        return data
    try:
        return OrderCreate.model_validate(data)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationFailed("Please provide valid order data.", errors=errors)


def compute_total(items: Iterable) -> float:
    """Sum of quantity * price over the line items."""
    total = sum(item.quantity * item.price for item in items)
    if not isfinite(total):
        raise ValidationFailed("Order total is too large.")
    return total


def ensure_transition(current: str, target: str) -> None:
    if target not in TRANSITIONS.get(current, ()):
        raise InvalidState(
            f"Order cannot move from {current} to {target}",
            current_status=current,
            requested_status=target,
        )


def is_store_edge(current: str, target: str) -> bool:
    if target == OrderStatus.CANCELLED:
        return current not in OrderStatus.TERMINAL
    return (current, target) in STORE_EDGES


def is_partner_edge(current: str, target: str) -> bool:
    return (current, target) in PARTNER_EDGES
