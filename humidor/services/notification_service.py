# humidor/services/notification_service.py
from decimal import Decimal
from html import escape

from humidor.celery_worker import celery_app
from humidor.data.database import SessionLocal
from humidor.data.models.order import OrderModel
from humidor.services.email_client import EmailClient
from humidor.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Best-effort order emails.

    Tasks are queued on Celery after the database commit. Nothing raised
    here may reach the caller: a lost email never undoes an order.
    """

    @staticmethod
    def send_order_confirmation(user_id: int, order_id: int) -> bool:
        try:
            send_order_confirmation_task.delay(user_id, order_id)
        except Exception as e:
            logger.error(f"Failed to queue order confirmation for order {order_id}: {e}")
            return False
        return True

    @staticmethod
    def send_status_update(user_id: int, order_id: int, new_status: str) -> bool:
        try:
            send_order_status_update_task.delay(user_id, order_id, new_status)
        except Exception as e:
            logger.error(f"Failed to queue status update ({new_status}) for order {order_id}: {e}")
            return False
        return True


def _format_address(address) -> str:
    if address is None:
        return "N/A"
    parts = [escape(address.line1)]
    if address.line2:
        parts.append(escape(address.line2))
    parts.append(f"{escape(address.city)}, {escape(address.state)} {escape(address.postal)}")
    parts.append(escape(address.country))
    return "<br>".join(parts)


def render_order_confirmation(order: OrderModel) -> str:
    rows = []
    for item in order.items:
        name = item.variant.product.name if item.variant and item.variant.product else f"Variant {item.variant_id}"
        line_total = Decimal(item.price) * item.quantity
        rows.append(
            f"<tr><td>{escape(name)}</td><td>{item.quantity}</td>"
            f"<td>{item.price}</td><td>{line_total:.2f}</td></tr>"
        )
    total = order.payment.amount if order.payment else order.total
    customer = escape(order.user.name) if order.user and order.user.name else "Customer"

    return (
        "<h1>Order Confirmation</h1>"
        f"<p>Hello {customer},</p>"
        "<p>Thank you for your order! We've received it and will notify you once it ships.</p>"
        f"<p><strong>Order ID:</strong> {order.id}</p>"
        f"<p><strong>Order Date:</strong> {order.created_at:%Y-%m-%d %H:%M}</p>"
        "<table><thead><tr><th>Product</th><th>Quantity</th><th>Price</th><th>Total</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        f"<p class=\"total\">Order Total: {Decimal(total):.2f}</p>"
        f"<h2>Shipping Address</h2><p>{_format_address(order.shipping_addr)}</p>"
    )


def render_status_update(order: OrderModel, new_status: str) -> str:
    customer = escape(order.user.name) if order.user and order.user.name else "Customer"
    return (
        "<h1>Order Status Update</h1>"
        f"<p>Hello {customer},</p>"
        f"<p>The status of your order <strong>#{order.id}</strong> "
        f"has been updated to: <strong>{escape(new_status)}</strong>.</p>"
    )


@celery_app.task(name="humidor.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(user_id: int, order_id: int):
    db = SessionLocal()
    try:
        order = db.get(OrderModel, order_id)
        if order is None or order.user_id != user_id:
            logger.error(f"Could not load order {order_id} for user {user_id} for confirmation email")
            return {"success": False, "error": "Order not found"}

        result = EmailClient().send(
            to=order.user.email if order.user else None,
            subject=f"Your Humidor Shop Order #{order.id} Confirmed!",
            html=render_order_confirmation(order),
            idempotency_key=f"order-{order.id}-confirmation",
        )
        logger.info(f"[NOTIFICATION] User {user_id}: confirmation for order {order_id} success={result['success']}")
        return result
    finally:
        db.close()


@celery_app.task(name="humidor.services.notification_service.send_order_status_update_task")
def send_order_status_update_task(user_id: int, order_id: int, new_status: str):
    db = SessionLocal()
    try:
        order = db.get(OrderModel, order_id)
        if order is None or order.user_id != user_id:
            logger.error(f"Could not load order {order_id} for user {user_id} for status email")
            return {"success": False, "error": "Order not found"}

        result = EmailClient().send(
            to=order.user.email if order.user else None,
            subject=f"Update on your Humidor Shop Order #{order.id}",
            html=render_status_update(order, new_status),
            idempotency_key=f"order-{order.id}-status-{new_status}",
        )
        logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} is now {new_status}, success={result['success']}")
        return result
    finally:
        db.close()
