from decimal import Decimal

import pytest

from humidor.domain.errors import InsufficientInventoryError, NotFoundError
from humidor.services.cart_service import CartService
from tests.helpers import cart_item_count


@pytest.fixture
def user_id(make_user):
    return make_user(1)


def test_empty_cart_for_new_user(db, user_id):
    cart = CartService(db).get_cart(user_id)
    assert cart["cart_id"] is None
    assert cart["items"] == []
    assert cart["total"] == Decimal("0.00")


def test_add_item_creates_cart(db, user_id, make_variant):
    variant_id = make_variant(price="7.50", inventory=4)

    cart = CartService(db).add_item(user_id, variant_id, 2)

    assert cart["cart_id"] is not None
    assert cart["items"][0]["variant_id"] == variant_id
    assert cart["items"][0]["quantity"] == 2
    assert cart["total"] == Decimal("15.00")
    assert cart["version"] == 2


def test_adding_same_variant_increases_quantity(db, user_id, make_variant):
    variant_id = make_variant(inventory=4)
    svc = CartService(db)

    svc.add_item(user_id, variant_id, 1)
    cart = svc.add_item(user_id, variant_id, 2)

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3


def test_cannot_add_more_than_stock(db, user_id, make_variant):
    variant_id = make_variant(inventory=2)
    svc = CartService(db)
    svc.add_item(user_id, variant_id, 2)

    with pytest.raises(InsufficientInventoryError):
        svc.add_item(user_id, variant_id, 1)

    assert svc.get_cart(user_id)["items"][0]["quantity"] == 2


def test_deleted_product_cannot_be_added(db, user_id, make_variant):
    variant_id = make_variant(deleted=True)
    with pytest.raises(NotFoundError):
        CartService(db).add_item(user_id, variant_id, 1)


def test_unknown_user_cannot_add(db, make_variant):
    with pytest.raises(NotFoundError):
        CartService(db).add_item(99, make_variant(), 1)


def test_update_and_remove_item(db, user_id, make_variant):
    variant_id = make_variant(inventory=10)
    svc = CartService(db)
    svc.add_item(user_id, variant_id, 1)

    cart = svc.update_item(user_id, variant_id, 5)
    assert cart["items"][0]["quantity"] == 5

    cart = svc.remove_item(user_id, variant_id)
    assert cart["items"] == []
    with pytest.raises(NotFoundError):
        svc.remove_item(user_id, variant_id)


def test_cart_total_tracks_current_price(db, user_id, make_variant, set_price):
    variant_id = make_variant(price="10.00")
    svc = CartService(db)
    svc.add_item(user_id, variant_id, 2)

    set_price(variant_id, "11.00")

    assert svc.get_cart(user_id)["total"] == Decimal("22.00")


def test_merge_guest_cart_adds_to_existing_lines(db, user_id, make_variant):
    a = make_variant(inventory=5)
    b = make_variant(inventory=5)
    svc = CartService(db)
    svc.add_item(user_id, a, 1)

    cart = svc.merge_guest_cart(
        user_id,
        [{"variant_id": a, "quantity": 2}, {"variant_id": b, "quantity": 1}, {"variant_id": b, "quantity": 1}],
    )

    quantities = {i["variant_id"]: i["quantity"] for i in cart["items"]}
    assert quantities == {a: 3, b: 2}


def test_merge_is_all_or_nothing(db, user_id, make_variant):
    a = make_variant(inventory=5)
    b = make_variant(inventory=1)

    with pytest.raises(InsufficientInventoryError):
        CartService(db).merge_guest_cart(
            user_id, [{"variant_id": a, "quantity": 1}, {"variant_id": b, "quantity": 2}]
        )

    assert cart_item_count(db, user_id) == 0
    assert CartService(db).get_cart(user_id)["cart_id"] is None
