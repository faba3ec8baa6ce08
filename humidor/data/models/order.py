from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from humidor.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default="PENDING")  # see humidor.domain.order_status
    shipping_addr_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    billing_addr_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    # display copy of sum(item.price * item.quantity)
    total = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship("OrderItemModel", back_populates="order", order_by="OrderItemModel.id")
    payment = relationship("PaymentModel", back_populates="order", uselist=False)
    user = relationship("UserModel")
    shipping_addr = relationship("AddressModel", foreign_keys=[shipping_addr_id])
    billing_addr = relationship("AddressModel", foreign_keys=[billing_addr_id])


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    variant_id = Column(Integer, ForeignKey("variants.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    # price snapshot at purchase time, never updated afterwards
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
    variant = relationship("VariantModel")


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)

    status = Column(String, nullable=False)  # PENDING, COMPLETED, FAILED, REFUNDED
    amount = Column(Numeric(10, 2), nullable=False)
    provider = Column(String, nullable=False)
    transaction_id = Column(String, nullable=False)

    order = relationship("OrderModel", back_populates="payment")
