# humidor/repos/address_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from humidor.data.models.address import AddressModel


class AddressRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_address(self, address_id: int) -> AddressModel | None:
        return self.db.get(AddressModel, address_id)

    def list_for_user(self, user_id: int) -> List[AddressModel]:
        return list(
            self.db.execute(
                select(AddressModel).where(AddressModel.user_id == user_id).order_by(AddressModel.id)
            ).scalars()
        )

    def create_address(self, address: AddressModel) -> AddressModel:
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address
