from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from humidor.data.models.address import AddressModel
from humidor.data.models.user import UserModel
from humidor.repos.address_repo import AddressRepo
from humidor.repos.user_repo import UserRepo
from humidor.domain.schemas import AddressIn, AddressOut, UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)
        self.addresses = AddressRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        user = UserModel(
            id=payload.id,
            name=payload.name,
            email=payload.email,
            is_admin=payload.is_admin,
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            self.db.rollback()
            raise ValueError("Email already registered")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")
        return UserRead.model_validate(user)

    def list_addresses(self, user_id: int) -> List[AddressOut]:
        self.get_user(user_id)
        return [AddressOut.model_validate(a) for a in self.addresses.list_for_user(user_id)]

    def add_address(self, user_id: int, payload: AddressIn) -> AddressOut:
        self.get_user(user_id)
        address = AddressModel(user_id=user_id, **payload.model_dump())
        created = self.addresses.create_address(address)
        return AddressOut.model_validate(created)
