# humidor/services/checkout_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from humidor.data.models.order import OrderModel, OrderItemModel, PaymentModel
from humidor.domain.errors import (
    EmptyCartError,
    InsufficientInventoryError,
    InvalidAddressError,
    NotFoundError,
    PostPaymentOrderFailure,
)
from humidor.domain.order_status import OrderStatus, PaymentStatus
from humidor.repos.address_repo import AddressRepo
from humidor.repos.cart_repo import CartRepo
from humidor.repos.order_repo import OrderRepo
from humidor.repos.user_repo import UserRepo
from humidor.services.inventory_service import InventoryLedger
from humidor.services.notification_service import NotificationService
from humidor.services.payment_gateway import ChargeResult, PaymentGateway
from humidor.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutLine:
    variant_id: int
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CheckoutService:
    """
    Use Case: cart -> paid order.

    1. Load the cart, validate the addresses
    2. Price every line with the variant's current price
    3. Advisory stock check, then charge the gateway once
    4. One transaction: decrement stock, create order + items + payment, clear the cart
    5. Queue the confirmation email (best effort)

    Anything failing in step 4 happens after money was captured and is raised
    as PostPaymentOrderFailure, never retried.
    """

    def __init__(
        self,
        db: Session,
        gateway: PaymentGateway | None = None,
        notifier: NotificationService | None = None,
    ):
        self.db = db
        self.users = UserRepo(db)
        self.carts = CartRepo(db)
        self.addresses = AddressRepo(db)
        self.orders = OrderRepo(db)
        self.inventory = InventoryLedger(db)
        self.gateway = gateway or PaymentGateway()
        self.notifier = notifier or NotificationService()

    def _validate_address(self, address_id: int, user_id: int, kind: str):
        address = self.addresses.get_address(address_id)
        if not address or address.user_id != user_id:
            raise InvalidAddressError(f"Invalid {kind} address.", address_id=address_id)
        return address

    def checkout(
        self,
        user_id: int,
        payment_token: str,
        shipping_address_id: int,
        billing_address_id: int | None = None,
    ) -> OrderModel:
        billing_address_id = billing_address_id or shipping_address_id

        user = self.users.get_user(user_id)
        if not user:
            raise NotFoundError("User not found.", user_id=user_id)

        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []
        if not items:
            raise EmptyCartError("Cart is empty.")

        self._validate_address(shipping_address_id, user_id, "shipping")
        if billing_address_id != shipping_address_id:
            self._validate_address(billing_address_id, user_id, "billing")

        lines = [
            CheckoutLine(variant_id=i.variant_id, quantity=i.quantity, unit_price=Decimal(i.variant.price))
            for i in items
        ]
        total = sum((line.line_total for line in lines), Decimal("0.00"))

        for line in lines:
            self.inventory.check_and_reserve(line.variant_id, line.quantity)

        cart_id = cart.id
        metadata = {
            "name": user.name,
            "email": user.email,
            "details": f"Humidor Shop order - User {user.id}",
        }
        # nothing written yet; do not hold a read transaction open across the gateway call
        self.db.rollback()

        logger.info(f"Checkout user={user_id} cart={cart_id}: charging {total} for {len(lines)} lines")
        charge = self.gateway.charge(total, payment_token, metadata)

        try:
            order_id = self._record_order(user_id, cart_id, lines, total, charge, shipping_address_id, billing_address_id)
        except (InsufficientInventoryError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.critical(
                f"Order creation failed post-payment: user={user_id} amount={total} "
                f"transaction_id={charge.transaction_id} reason={e}"
            )
            raise PostPaymentOrderFailure(
                "Your payment was received but we could not save your order. "
                "Please contact support with your payment reference.",
                transaction_id=charge.transaction_id,
                amount=total,
                user_id=user_id,
                reason=str(e),
            ) from e

        logger.info(f"Order {order_id} created for user {user_id}, transaction {charge.transaction_id}")

        try:
            self.notifier.send_order_confirmation(user_id, order_id)
        except Exception as e:
            logger.error(f"Order confirmation for order {order_id} not sent: {e}")

        return self.orders.get_order(order_id)

    def _record_order(
        self,
        user_id: int,
        cart_id: int,
        lines: List[CheckoutLine],
        total: Decimal,
        charge: ChargeResult,
        shipping_address_id: int,
        billing_address_id: int,
    ) -> int:
        # ascending variant id keeps lock order stable between concurrent checkouts
        for line in sorted(lines, key=lambda l: l.variant_id):
            self.inventory.decrement(line.variant_id, line.quantity)

        order = self.orders.add_order(
            OrderModel(
                user_id=user_id,
                status=OrderStatus.PAID.value,
                shipping_addr_id=shipping_address_id,
                billing_addr_id=billing_address_id,
                total=total,
            )
        )

        for line in lines:
            self.orders.add_item(
                OrderItemModel(
                    order_id=order.id,
                    variant_id=line.variant_id,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
            )

        self.orders.add_payment(
            PaymentModel(
                order_id=order.id,
                status=PaymentStatus.COMPLETED.value,
                amount=charge.amount,
                provider=charge.provider,
                transaction_id=charge.transaction_id,
            )
        )

        self.carts.clear_items(cart_id)
        self.carts.bump_version(cart_id)

        order_id = order.id
        self.db.commit()
        return order_id
