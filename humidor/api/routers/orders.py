# humidor/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from humidor.api.deps import checkout_rate_limit, get_notifier, get_payment_gateway
from humidor.data.database import get_db
from humidor.domain.errors import ShopError
from humidor.domain.order_status import transition_table
from humidor.domain.schemas import CheckoutIn, OrderOut, StatusTransitionsOut, StatusUpdateIn
from humidor.services.checkout_service import CheckoutService
from humidor.services.notification_service import NotificationService
from humidor.services.order_service import OrderService, serialize_order
from humidor.services.payment_gateway import PaymentGateway

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/", response_model=OrderOut, status_code=201, dependencies=[Depends(checkout_rate_limit)])
def checkout(
    payload: CheckoutIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notifier),
):
    """
    Charges the caller's cart and records the order.
    A 500 with code POST_PAYMENT_ORDER_FAILURE means the payment went
    through but the order was not saved: the client must tell the user to
    contact support, not to try again.
    """
    svc = CheckoutService(db, gateway=gateway, notifier=notifier)
    try:
        order = svc.checkout(
            user_id=user_id,
            payment_token=payload.payment_token,
            shipping_address_id=payload.shipping_address_id,
            billing_address_id=payload.billing_address_id,
        )
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return serialize_order(order)


@router.get("/me", response_model=List[OrderOut])
def my_orders(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_user_orders(user_id)


@router.get("/status-transitions", response_model=StatusTransitionsOut)
def status_transitions():
    """
    The order status transition table, for admin screens that preview
    which statuses an order can move to.
    """
    return {"transitions": transition_table()}


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
):
    svc = OrderService(db, notifier=notifier)
    try:
        return svc.transition(order_id, payload.status, actor_id=user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    user_id: int = Query(...),
    confirm: bool = Query(False),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.delete_order(order_id, user_id, confirm)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
