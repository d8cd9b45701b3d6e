from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .base import Base


PAYMENT_TYPES = ("Online", "COD")
PAYMENT_STATUSES = ("Paid", "Pending", "Failed")


def _one_of(column: str, values) -> str:
    return "{} IN ({})".format(column, ", ".join(f"'{v}'" for v in values))


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(_one_of("payment_type", PAYMENT_TYPES), name="ck_payments_type"),
        CheckConstraint(_one_of("payment_status", PAYMENT_STATUSES), name="ck_payments_status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    payment_type = Column(String(16), nullable=False)
    payment_status = Column(String(16), nullable=False)
    payment_intent_id = Column(String(128), nullable=True)

    order = relationship("Order", back_populates="payment")
