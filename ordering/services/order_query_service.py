from typing import Dict, List

from sqlalchemy.orm import Query, Session, selectinload

from ..errors import NotFoundError
from ..models.order import Order
from ..utils.dto import to_order_dto


def full_order_query(session: Session) -> Query:
    """Orders with items, shipping info and payment eagerly loaded."""
    return session.query(Order).options(
        selectinload(Order.items),
        selectinload(Order.shipping_info),
        selectinload(Order.payment),
    )


class OrderQueryService:
    """Read-side assembly of committed orders."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def fetch_order(self, order_id: str) -> Dict:
        with self._session_factory() as session:
            order = full_order_query(session).filter(Order.id == order_id).first() if order_id else None
            if order is None:
                raise NotFoundError("Order not found.")
            return to_order_dto(order)

    def fetch_orders_for_buyer(self, buyer_id: str) -> List[Dict]:
        with self._session_factory() as session:
            q = full_order_query(session).filter(Order.buyer_id == buyer_id, Order.paid_at.isnot(None))
            return [to_order_dto(o) for o in q.order_by(Order.created_at, Order.id).all()]

    def fetch_all_orders(self) -> List[Dict]:
        with self._session_factory() as session:
            q = full_order_query(session).filter(Order.paid_at.isnot(None))
            return [to_order_dto(o) for o in q.order_by(Order.created_at, Order.id).all()]
