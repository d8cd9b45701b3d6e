from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import Base


class ShippingInfo(Base):
    __tablename__ = "shipping_info"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    state = Column(String(128), nullable=False)
    city = Column(String(128), nullable=False)
    country = Column(String(128), nullable=False)
    address = Column(Text, nullable=False)
    pincode = Column(String(32), nullable=False)
    phone = Column(String(32), nullable=False)

    order = relationship("Order", back_populates="shipping_info")
