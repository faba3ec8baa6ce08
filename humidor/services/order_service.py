# humidor/services/order_service.py
import math
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from humidor.data.models.order import OrderModel
from humidor.domain.errors import ConcurrencyConflictError, NotFoundError
from humidor.domain.order_status import OrderStatus, PaymentStatus, ensure_transition, next_statuses
from humidor.repos.order_repo import OrderRepo, SORTABLE_COLUMNS
from humidor.repos.user_repo import UserRepo
from humidor.services.notification_service import NotificationService
from humidor.utils.logging import get_logger

logger = get_logger(__name__)


def serialize_order(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "shipping_addr_id": order.shipping_addr_id,
        "billing_addr_id": order.billing_addr_id,
        "total": order.total,
        "created_at": order.created_at,
        "items": [
            {"variant_id": i.variant_id, "quantity": i.quantity, "price": i.price}
            for i in order.items
        ],
        "payment": (
            {
                "status": order.payment.status,
                "amount": order.payment.amount,
                "provider": order.payment.provider,
                "transaction_id": order.payment.transaction_id,
            }
            if order.payment
            else None
        ),
        "allowed_next_statuses": next_statuses(order.status),
    }


class OrderService:
    """
    Order queries and the order status manager.
    Status changes go through the single transition table in
    humidor.domain.order_status; admins only.
    """

    def __init__(self, db: Session, notifier: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.users = UserRepo(db)
        self.notifier = notifier or NotificationService()

    def _is_admin(self, user_id: int) -> bool:
        return self.users.is_admin(user_id)

    def _require_admin(self, user_id: int):
        if not self._is_admin(user_id):
            raise PermissionError("Not authorized")

    def _load(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)
        return order

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        """
        Use Case: order detail (Query). Owner or admin.
        """
        order = self._load(order_id)

        if order.user_id != user_id and not self._is_admin(user_id):
            raise PermissionError("Forbidden")

        return serialize_order(order)

    def list_user_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [serialize_order(o) for o in self.repo.list_for_user(user_id)]

    def transition(self, order_id: int, new_status: str, actor_id: int) -> Dict[str, Any]:
        """
        Use Case: admin status change (Command).

        Rejected edges leave the order untouched. The update is conditional on
        the status that was read, so two admins racing on the same order cannot
        both succeed. The notification is sent after commit and may fail silently.
        """
        self._require_admin(actor_id)

        order = self._load(order_id)
        current = order.status
        new_status = OrderStatus(new_status).value
        ensure_transition(current, new_status)

        rowcount = self.repo.update_status(order_id, current, new_status)
        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflictError(
                "Order status was changed by another request",
                order_id=order_id,
            )

        if new_status == OrderStatus.REFUNDED.value:
            self.repo.update_payment_status(order_id, PaymentStatus.REFUNDED.value)

        self.repo.commit()
        logger.info(f"Order {order_id} status {current} -> {new_status} by user {actor_id}")

        try:
            self.notifier.send_status_update(order.user_id, order_id, new_status)
        except Exception as e:
            logger.error(f"Status update notification for order {order_id} not sent: {e}")

        return serialize_order(self._load(order_id))

    def delete_order(self, order_id: int, user_id: int, confirm: bool) -> Dict[str, Any]:
        """
        Use Case: soft delete, requires explicit confirmation.
        """
        if not confirm:
            raise ValueError("Confirmation required to delete order")

        order = self._load(order_id)
        if order.user_id != user_id and not self._is_admin(user_id):
            raise PermissionError("Forbidden")

        deleted = self.repo.soft_delete(order, datetime.now(timezone.utc))
        logger.info(f"Order {order_id} soft-deleted by user {user_id}")
        return {"id": deleted.id, "deleted_at": deleted.deleted_at}

    def list_admin_orders(
        self,
        actor_id: int,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        status: str | None = None,
    ) -> Dict[str, Any]:
        self._require_admin(actor_id)

        if sort_by not in SORTABLE_COLUMNS:
            raise ValueError(f"Cannot sort by {sort_by}")
        if status is not None:
            status = OrderStatus(status).value

        rows, total = self.repo.list_page(page, limit, sort_by, sort_order, status)
        return {
            "orders": [
                {
                    "id": order.id,
                    "user_id": order.user_id,
                    "user_name": user.name,
                    "user_email": user.email,
                    "status": order.status,
                    "total": order.total,
                    "created_at": order.created_at,
                }
                for order, user in rows
            ],
            "pagination": {
                "current_page": page,
                "total_pages": math.ceil(total / limit) if total else 0,
                "total_orders": total,
                "page_size": limit,
            },
        }
