#humidor/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from humidor.data.database import get_db
from humidor.domain.errors import ShopError
from humidor.domain.schemas import (
    CartOut,
    ItemIn,
    MergeCartIn,
    QuantityIn,
)
from humidor.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return svc.get_cart(user_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_item(
            user_id=user_id,
            variant_id=payload.variant_id,
            quantity=payload.quantity,
        )
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/items/{variant_id}", response_model=CartOut)
def update_item(
    variant_id: int,
    payload: QuantityIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_item(user_id, variant_id, payload.quantity)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/items/{variant_id}", response_model=CartOut)
def remove_item(
    variant_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.remove_item(user_id, variant_id)
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post("/merge", response_model=CartOut)
def merge_cart(
    payload: MergeCartIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Merges a guest cart (kept in browser storage) after login.
    """
    svc = get_service(db)
    try:
        return svc.merge_guest_cart(user_id, [item.model_dump() for item in payload.items])
    except ShopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
