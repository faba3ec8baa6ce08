# humidor/services/inventory_service.py
from sqlalchemy.orm import Session

from humidor.domain.errors import InsufficientInventoryError, NotFoundError
from humidor.repos.variant_repo import VariantRepo
from humidor.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    Per-variant stock.

    check_and_reserve is advisory (read only, runs before payment).
    decrement is the authoritative step and must run inside the transaction
    that creates the order; a failed decrement means the caller rolls back.
    """

    def __init__(self, db: Session):
        self.repo = VariantRepo(db)

    def available(self, variant_id: int) -> int:
        inventory = self.repo.get_inventory(variant_id)
        if inventory is None:
            raise NotFoundError(f"Variant {variant_id} not found", variant_id=variant_id)
        return inventory

    def check_and_reserve(self, variant_id: int, quantity: int) -> bool:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        inventory = self.available(variant_id)
        if inventory < quantity:
            logger.info(
                f"Insufficient stock for variant {variant_id}: required {quantity}, available {inventory}"
            )
            raise InsufficientInventoryError(
                f"Insufficient stock for variant {variant_id}. Required: {quantity}, Available: {inventory}",
                variant_id=variant_id,
                required=quantity,
                available=inventory,
            )
        return True

    def decrement(self, variant_id: int, quantity: int) -> None:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        # UPDATE variants SET inventory = inventory - :qty WHERE id = :id AND inventory >= :qty
        rowcount = self.repo.decrement_inventory(variant_id, quantity)

        if rowcount == 0:
            logger.warning(f"Conditional decrement of variant {variant_id} by {quantity} affected 0 rows")
            raise InsufficientInventoryError(
                f"Insufficient stock for variant {variant_id}. Required: {quantity}",
                variant_id=variant_id,
                required=quantity,
            )

        logger.info(f"Variant {variant_id} inventory decremented by {quantity}")
