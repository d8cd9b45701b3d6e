import time
from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ..errors import OrderingError, PersistenceInvariantError, TransientStoreError, ValidationError
from ..models.order import Order
from ..models.order_item import OrderItem
from ..models.payment import Payment
from ..models.shipping_info import ShippingInfo
from ..utils.dto import to_order_dto
from ..utils.validators import PlacementRequest, ShippingDetails
from .catalog_service import CatalogService
from .logging import log_event
from .notification_service import render_order_confirmation
from .pricing import DEFAULT_POLICY, PricingPolicy, Quote, price_cart
from .stock_ledger import StockLedger


class OrderService:
    """Places orders as a single unit of work against the store."""

    def __init__(
        self,
        session_factory,
        notifier=None,
        policy: Optional[PricingPolicy] = None,
        retry_attempts: int = 3,
        retry_backoff: float = 0.05,
    ):
        self._session_factory = session_factory
        self._notifier = notifier
        self._policy = policy or DEFAULT_POLICY
        self._retry_attempts = max(1, retry_attempts)
        self._retry_backoff = retry_backoff

    def place_order(self, *, buyer_id: str, request: PlacementRequest, buyer_email: Optional[str] = None) -> Dict:
        """Create order, items, shipping and payment, and decrement stock.

        Either every row is committed together or nothing is. Store
        contention is retried; other errors propagate unchanged.
        """
        if not buyer_id or not str(buyer_id).strip():
            raise ValidationError("Buyer identity is required.")
        attempt = 0
        while True:
            attempt += 1
            try:
                with self._session_factory() as session:
                    order = self._place(session, buyer_id, request)
                break
            except OperationalError as exc:
                log_event("warning", "order.place.retry", buyer_id=buyer_id, attempt=attempt, error=str(exc.orig))
                if attempt >= self._retry_attempts:
                    raise TransientStoreError(attempt) from exc
                time.sleep(self._retry_backoff * attempt)
            except OrderingError as exc:
                log_event("info", "order.place.failed", buyer_id=buyer_id, error=type(exc).__name__, message=str(exc))
                raise

        log_event(
            "info",
            "order.placed",
            order_id=order["id"],
            buyer_id=buyer_id,
            items=len(order["order_items"]),
            total_price=order["total_price"],
        )
        self._notify(buyer_email, order)
        return {"order": order, "total_price": order["total_price"]}

    def _place(self, session: Session, buyer_id: str, request: PlacementRequest) -> Dict:
        products = CatalogService(session).lookup((line.product_id for line in request.lines), lock=True)
        quote = price_cart(request.lines, products, self._policy)
        StockLedger(session).reserve(request.lines)

        order = self._insert_order(session, buyer_id, quote)
        self._insert_items(session, order, quote)
        self._insert_shipping(session, order, request.shipping)
        self._insert_payment(session, order)
        session.flush()
        self._verify(session, order, quote)
        return to_order_dto(order)

    def _insert_order(self, session: Session, buyer_id: str, quote: Quote) -> Order:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        order = Order(
            id=str(uuid4()),
            buyer_id=buyer_id,
            total_price=quote.total_price,
            tax_price=quote.tax_rate,
            shipping_price=quote.shipping_price,
            order_status="Processing",
            paid_at=now,
            created_at=now,
        )
        session.add(order)
        # order row first; dependent rows reference it
        session.flush()
        return order

    def _insert_items(self, session: Session, order: Order, quote: Quote) -> None:
        for position, line in enumerate(quote.lines):
            order.items.append(
                OrderItem(
                    id=str(uuid4()),
                    product_id=line.product_id,
                    position=position,
                    quantity=line.quantity,
                    price=line.unit_price,
                    image=line.image,
                    title=line.title,
                )
            )

    def _insert_shipping(self, session: Session, order: Order, shipping: ShippingDetails) -> None:
        order.shipping_info = ShippingInfo(**shipping.to_dict())

    def _insert_payment(self, session: Session, order: Order) -> None:
        # no gateway integration: payment is recorded as already captured
        order.payment = Payment(payment_type="Online", payment_status="Paid", payment_intent_id=None)

    def _verify(self, session: Session, order: Order, quote: Quote) -> None:
        shipping_rows = session.query(func.count(ShippingInfo.id)).filter(ShippingInfo.order_id == order.id).scalar()
        payment_rows = session.query(func.count(Payment.id)).filter(Payment.order_id == order.id).scalar()
        items = session.query(OrderItem).filter(OrderItem.order_id == order.id).all()
        items_total = sum((it.price * it.quantity for it in items), 0)
        problems = []
        if shipping_rows != 1:
            problems.append(f"shipping_info rows={shipping_rows}")
        if payment_rows != 1:
            problems.append(f"payment rows={payment_rows}")
        if len(items) != len(quote.lines):
            problems.append(f"order_items rows={len(items)} expected={len(quote.lines)}")
        if items_total != quote.subtotal:
            problems.append(f"items total={items_total} subtotal={quote.subtotal}")
        if problems:
            log_event("critical", "order.invariant.violated", order_id=order.id, problems=problems)
            raise PersistenceInvariantError(f"Order {order.id} failed integrity check: {', '.join(problems)}")

    def _notify(self, recipient: Optional[str], order: Dict) -> None:
        if not recipient or self._notifier is None:
            return
        try:
            subject, body = render_order_confirmation(order)
            self._notifier.send(recipient, subject, body)
        except Exception as exc:
            # the order is committed; a mail failure must not surface as a placement failure
            log_event("error", "notification.failed", order_id=order["id"], recipient=recipient, error=str(exc))
