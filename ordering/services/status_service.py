from typing import Dict

from ..errors import NotFoundError, ValidationError
from ..models.order import ORDER_STATUSES, Order
from ..utils.dto import to_order_dto
from .logging import log_event
from .order_query_service import full_order_query


STATUS_MAX_LENGTH = Order.__table__.c.order_status.type.length


class StatusService:
    """Administrative status changes and deletion of orders.

    Any non-empty status string is accepted; there is no transition table.
    A status that is not a string (a number, a list) is rejected with its own
    message rather than treated as empty.
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def update_status(self, order_id: str, new_status: str) -> Dict:
        if new_status is not None and not isinstance(new_status, str):
            raise ValidationError("Status must be a string.", fields=["status"])
        status = (new_status or "").strip()
        if not status:
            raise ValidationError("Provide a valid status for order.", fields=["status"])
        if len(status) > STATUS_MAX_LENGTH:
            raise ValidationError(f"Status must be at most {STATUS_MAX_LENGTH} characters.", fields=["status"])
        with self._session_factory() as session:
            order = full_order_query(session).filter(Order.id == order_id).first()
            if order is None:
                raise NotFoundError("Invalid order ID.")
            previous = order.order_status
            order.order_status = status
            session.flush()
            log_event(
                "info",
                "order.status.updated",
                order_id=order_id,
                previous=previous,
                status=status,
                known_status=status in ORDER_STATUSES,
            )
            return to_order_dto(order)

    def delete_order(self, order_id: str) -> Dict:
        with self._session_factory() as session:
            order = full_order_query(session).filter(Order.id == order_id).first()
            if order is None:
                raise NotFoundError("Invalid order ID.")
            snapshot = to_order_dto(order)
            # ORM cascade removes items, shipping and payment; the FK cascade covers raw deletes
            session.delete(order)
            session.flush()
            log_event("info", "order.deleted", order_id=order_id, items=len(snapshot["order_items"]))
            return snapshot
