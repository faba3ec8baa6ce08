import threading

from humidor.data.database import SessionLocal
from humidor.data.models import OrderModel
from humidor.domain.errors import InsufficientInventoryError, PostPaymentOrderFailure
from humidor.services.checkout_service import CheckoutService
from tests.helpers import FakeGateway, FakeNotifier, count_rows, inventory_of

BUYERS = 5


def test_concurrent_checkouts_for_last_unit_produce_one_order(db, make_user, make_address, make_variant, put_in_cart):
    variant_id = make_variant(price="10.00", inventory=1)
    buyers = []
    for user_id in range(1, BUYERS + 1):
        make_user(user_id, name=f"Buyer {user_id}")
        address_id = make_address(user_id)
        put_in_cart(user_id, variant_id, 1)
        buyers.append((user_id, address_id))

    gateway = FakeGateway()
    barrier = threading.Barrier(BUYERS)
    outcomes = {}

    def buy(user_id, address_id):
        session = SessionLocal()
        try:
            svc = CheckoutService(session, gateway=gateway, notifier=FakeNotifier())
            barrier.wait()
            try:
                svc.checkout(user_id, "tok", address_id)
                outcomes[user_id] = "ok"
            except PostPaymentOrderFailure:
                outcomes[user_id] = "charged_without_order"
            except InsufficientInventoryError:
                outcomes[user_id] = "sold_out"
        finally:
            session.close()

    threads = [threading.Thread(target=buy, args=b) for b in buyers]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(outcomes) == BUYERS
    assert list(outcomes.values()).count("ok") == 1
    assert inventory_of(db, variant_id) == 0
    assert count_rows(db, OrderModel) == 1
    charged = [v for v in outcomes.values() if v in ("ok", "charged_without_order")]
    assert len(gateway.calls) == len(charged)
