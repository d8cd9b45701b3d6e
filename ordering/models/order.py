from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.orm import relationship
from .base import Base


ORDER_STATUSES = ("Processing", "Shipped", "Delivered", "Cancelled")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    buyer_id = Column(String(128), nullable=False, index=True)
    total_price = Column(Numeric(12, 2), nullable=False)
    tax_price = Column(Numeric(6, 4), nullable=False)  # tax rate applied, e.g. 0.18
    shipping_price = Column(Numeric(12, 2), nullable=False)
    order_status = Column(String(32), nullable=False, default="Processing")
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.position",
    )
    shipping_info = relationship(
        "ShippingInfo", back_populates="order", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    payment = relationship(
        "Payment", back_populates="order", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
