from typing import Any, Dict, Optional

from ..services.logging import log_event
from .validators import SHIPPING_FIELDS


def _money(value: Any) -> float:
    return float(value or 0)


def _timestamp(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_order_item_dto(row: Any) -> Dict:
    return {
        "order_item_id": row.id,
        "order_id": row.order_id,
        "product_id": row.product_id,
        "quantity": row.quantity,
        "price": _money(row.price),
        "image": row.image or "",
        "title": row.title,
    }


def to_shipping_dto(row: Any) -> Dict:
    return {name: getattr(row, name, None) if row is not None else None for name in SHIPPING_FIELDS}


def to_payment_dto(row: Any) -> Dict:
    return {
        "payment_type": getattr(row, "payment_type", None),
        "payment_status": getattr(row, "payment_status", None),
        "payment_intent_id": getattr(row, "payment_intent_id", None),
    }


def to_order_row_dto(order: Any) -> Dict:
    return {
        "id": order.id,
        "buyer_id": order.buyer_id,
        "total_price": _money(order.total_price),
        "tax_price": _money(order.tax_price),
        "shipping_price": _money(order.shipping_price),
        "order_status": order.order_status,
        "paid_at": _timestamp(order.paid_at),
        "created_at": _timestamp(order.created_at),
    }


def to_order_dto(order: Any) -> Dict:
    """Order row joined with its items, shipping info and payment."""
    if order.shipping_info is None or order.payment is None:
        log_event(
            "critical",
            "order.invariant.violated",
            order_id=order.id,
            missing_shipping=order.shipping_info is None,
            missing_payment=order.payment is None,
        )
    dto = to_order_row_dto(order)
    dto["order_items"] = [to_order_item_dto(it) for it in (order.items or [])]
    dto["shipping_info"] = to_shipping_dto(order.shipping_info)
    dto["payment"] = to_payment_dto(order.payment)
    return dto
