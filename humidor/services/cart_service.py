from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from humidor.data.models.cart import CartModel
from humidor.data.models.cart_item import CartItemModel
from humidor.data.models.product import VariantModel
from humidor.domain.errors import ConcurrencyConflictError, InsufficientInventoryError, NotFoundError
from humidor.repos.cart_repo import CartRepo
from humidor.repos.user_repo import UserRepo
from humidor.repos.variant_repo import VariantRepo
from humidor.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases of the cart domain.
    commands (add, update, remove, merge) change state and bump the cart version,
    query (get) only reads. Totals always use the variant's current price.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.users = UserRepo(db)
        self.variants = VariantRepo(db)

    def _require_user(self, user_id: int):
        if not self.users.get_user(user_id):
            raise NotFoundError("User not found", user_id=user_id)

    def _sellable_variant(self, variant_id: int) -> VariantModel:
        variant = self.variants.get_variant(variant_id)
        if not variant or variant.product is None or variant.product.deleted_at is not None:
            raise NotFoundError("Product or variant not found", variant_id=variant_id)
        return variant

    @staticmethod
    def _check_stock(variant: VariantModel, quantity: int):
        if variant.inventory < quantity:
            raise InsufficientInventoryError(
                "Insufficient stock",
                variant_id=variant.id,
                required=quantity,
                available=variant.inventory,
            )

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart
        logger.info(f"Creating cart for user {user_id}")
        try:
            return self.repo.create_cart(CartModel(user_id=user_id, version=1))
        except IntegrityError:
            self.repo.rollback()
            raise ConcurrencyConflictError("Cart was created by a concurrent request, please retry")

    def _bump_version(self, cart: CartModel):
        # optimistic locking, UPDATE carts SET version = v + 1 WHERE id = :id AND version = v
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
        )
        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflictError("Cart was modified by another request")

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            return {"cart_id": None, "user_id": user_id, "items": [], "total": Decimal("0.00"), "version": 0}

        items = self.repo.get_cart_items(cart.id)
        lines = [
            {
                "variant_id": i.variant_id,
                "sku": i.variant.sku,
                "product_name": i.variant.product.name,
                "quantity": i.quantity,
                "unit_price": i.variant.price,
                "line_total": i.variant.price * i.quantity,
                "inventory": i.variant.inventory,
            }
            for i in items
        ]
        total = sum((line["line_total"] for line in lines), Decimal("0.00"))

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": lines,
            "total": total,
            "version": cart.version,
        }

    #commands
    def add_item(self, user_id: int, variant_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        self._require_user(user_id)
        variant = self._sellable_variant(variant_id)
        self._check_stock(variant, quantity)

        cart = self._get_or_create_cart(user_id)
        existing = self.repo.get_cart_item(cart.id, variant_id)

        if existing:
            new_quantity = existing.quantity + quantity
            self._check_stock(variant, new_quantity)
            logger.info(
                f"Variant {variant_id} already in cart {cart.id}, quantity {existing.quantity} -> {new_quantity}"
            )
            existing.quantity = new_quantity
            self.repo.add_cart_item(existing)
        else:
            logger.info(f"Adding variant {variant_id} x{quantity} to cart {cart.id}")
            self.repo.add_cart_item(CartItemModel(cart_id=cart.id, variant_id=variant_id, quantity=quantity))

        self._bump_version(cart)
        self.repo.commit()
        return self.get_cart(user_id)

    def update_item(self, user_id: int, variant_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        variant = self._sellable_variant(variant_id)
        self._check_stock(variant, quantity)

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found", user_id=user_id)

        item = self.repo.get_cart_item(cart.id, variant_id)
        if not item:
            raise NotFoundError("Cart item not found", variant_id=variant_id)

        item.quantity = quantity
        self.repo.add_cart_item(item)

        self._bump_version(cart)
        self.repo.commit()
        logger.info(f"Cart {cart.id}: variant {variant_id} quantity set to {quantity}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, variant_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found", user_id=user_id)

        if self.repo.delete_cart_item(cart.id, variant_id) == 0:
            raise NotFoundError("Cart item not found", variant_id=variant_id)

        self._bump_version(cart)
        self.repo.commit()
        logger.info(f"Variant {variant_id} removed from cart {cart.id}")
        return self.get_cart(user_id)

    def merge_guest_cart(self, user_id: int, items: Iterable[Dict[str, int]]) -> Dict[str, Any]:
        """
        Merge a guest cart (held in browser storage) into the user's cart.
        All lines are validated before anything is written.
        """
        incoming: Dict[int, int] = {}
        for line in items:
            incoming[line["variant_id"]] = incoming.get(line["variant_id"], 0) + line["quantity"]
        if not incoming:
            raise ValueError("Nothing to merge")

        self._require_user(user_id)
        cart = self.repo.get_cart_by_user(user_id)
        existing = {i.variant_id: i for i in self.repo.get_cart_items(cart.id)} if cart else {}

        planned: List[tuple] = []
        for variant_id, quantity in incoming.items():
            variant = self._sellable_variant(variant_id)
            current = existing.get(variant_id)
            intended = quantity + (current.quantity if current else 0)
            self._check_stock(variant, intended)
            planned.append((variant_id, intended, current))

        cart = cart or self._get_or_create_cart(user_id)
        for variant_id, intended, current in planned:
            if current:
                current.quantity = intended
                self.repo.add_cart_item(current)
            else:
                self.repo.add_cart_item(CartItemModel(cart_id=cart.id, variant_id=variant_id, quantity=intended))

        self._bump_version(cart)
        self.repo.commit()
        logger.info(f"Merged {len(planned)} guest cart lines into cart {cart.id}")
        return self.get_cart(user_id)
