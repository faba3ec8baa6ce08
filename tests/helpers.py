import uuid
from decimal import Decimal

from sqlalchemy import func, select

from humidor.data.models import (
    CartItemModel,
    CartModel,
    OrderItemModel,
    OrderModel,
    PaymentModel,
    VariantModel,
)
from humidor.domain.errors import GatewayCommunicationError, PaymentError
from humidor.services.payment_gateway import ChargeResult


class FakeGateway:
    def __init__(self, decline=False, unreachable=False, on_charge=None):
        self.decline = decline
        self.unreachable = unreachable
        self.on_charge = on_charge
        self.calls = []

    def charge(self, amount, token, metadata=None):
        self.calls.append({"amount": amount, "token": token, "metadata": metadata})
        if self.unreachable:
            raise GatewayCommunicationError("Failed to communicate with payment gateway.")
        if self.decline:
            raise PaymentError("Payment Error: Card Error (Status: 10003)", gateway_status=10003)
        if self.on_charge:
            self.on_charge()
        return ChargeResult(transaction_id=f"TX-{uuid.uuid4().hex[:12]}", amount=amount, provider="FakePay")


class FakeNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.confirmations = []
        self.status_updates = []

    def send_order_confirmation(self, user_id, order_id):
        if self.fail:
            raise RuntimeError("mail server on fire")
        self.confirmations.append((user_id, order_id))
        return True

    def send_status_update(self, user_id, order_id, new_status):
        if self.fail:
            raise RuntimeError("mail server on fire")
        self.status_updates.append((user_id, order_id, new_status))
        return True


def inventory_of(db, variant_id):
    return db.execute(select(VariantModel.inventory).where(VariantModel.id == variant_id)).scalar_one()


def count_rows(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def cart_item_count(db, user_id):
    return db.execute(
        select(func.count())
        .select_from(CartItemModel)
        .join(CartModel, CartModel.id == CartItemModel.cart_id)
        .where(CartModel.user_id == user_id)
    ).scalar_one()


def make_order(db, user_id, address_id, variant_id, status="PAID", quantity=1, price="10.00"):
    total = Decimal(price) * quantity
    order = OrderModel(
        user_id=user_id,
        status=status,
        shipping_addr_id=address_id,
        billing_addr_id=address_id,
        total=total,
    )
    db.add(order)
    db.flush()
    db.add(OrderItemModel(order_id=order.id, variant_id=variant_id, quantity=quantity, price=Decimal(price)))
    db.add(
        PaymentModel(
            order_id=order.id,
            status="COMPLETED",
            amount=total,
            provider="FakePay",
            transaction_id=f"TX-{uuid.uuid4().hex[:12]}",
        )
    )
    db.commit()
    return order.id


def order_status(db, order_id):
    return db.execute(select(OrderModel.status).where(OrderModel.id == order_id)).scalar_one()


def payment_status(db, order_id):
    return db.execute(select(PaymentModel.status).where(PaymentModel.order_id == order_id)).scalar_one()


ALLOWED_EDGES = {
    ("PENDING", "PAID"),
    ("PENDING", "CANCELLED"),
    ("PAID", "SHIPPED"),
    ("PAID", "CANCELLED"),
    ("PAID", "REFUNDED"),
    ("SHIPPED", "DELIVERED"),
    ("SHIPPED", "REFUNDED"),
    ("DELIVERED", "REFUNDED"),
}

STATUSES = ("PENDING", "PAID", "SHIPPED", "DELIVERED", "CANCELLED", "REFUNDED")

ALL_STATUS_PAIRS = [(a, b) for a in STATUSES for b in STATUSES]
