# humidor/api/routers/admin.py
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from humidor.data.database import get_db
from humidor.domain.order_status import OrderStatus
from humidor.domain.schemas import AdminOrderPage
from humidor.services.order_service import OrderService

router = APIRouter(prefix="/admin", tags=["admin"])

DEFAULT_PAGE_SIZE = 10


@router.get("/orders", response_model=AdminOrderPage)
def list_orders(
    user_id: int = Query(...),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    sort_by: Literal["created_at", "total", "status"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    status: OrderStatus | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.list_admin_orders(
            actor_id=user_id,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
            status=status.value if status else None,
        )
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
