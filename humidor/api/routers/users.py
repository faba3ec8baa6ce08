from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from humidor.data.database import get_db
from humidor.services.user_service import UserService
from humidor.domain.schemas import AddressIn, AddressOut, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.get("/{user_id}/addresses", response_model=List[AddressOut])
def list_addresses(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.list_addresses(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post("/{user_id}/addresses", response_model=AddressOut, status_code=201)
def add_address(user_id: int, payload: AddressIn, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.add_address(user_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
