# humidor/repos/variant_repo.py
from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from humidor.data.models.product import VariantModel


class VariantRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_variant(self, variant_id: int) -> VariantModel | None:
        return self.db.get(VariantModel, variant_id, options=[joinedload(VariantModel.product)])

    def get_inventory(self, variant_id: int) -> int | None:
        variant = self.db.get(VariantModel, variant_id, populate_existing=True)
        return variant.inventory if variant else None

    def decrement_inventory(self, variant_id: int, quantity: int) -> int:
        """
        Conditional decrement. Returns the number of affected rows, 0 means
        the stock was lower than ``quantity`` (or the variant is gone).
        """
        stmt = (
            update(VariantModel)
            .where(VariantModel.id == variant_id, VariantModel.inventory >= quantity)
            .values(inventory=VariantModel.inventory - quantity)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount
