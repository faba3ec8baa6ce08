import pytest

from humidor.domain.errors import InvalidTransitionError
from humidor.domain.order_status import (
    OrderStatus,
    can_transition,
    ensure_transition,
    is_terminal,
    next_statuses,
    transition_table,
)
from tests.helpers import ALL_STATUS_PAIRS, ALLOWED_EDGES


@pytest.mark.parametrize("current,new", ALL_STATUS_PAIRS)
def test_can_transition_matches_table(current, new):
    assert can_transition(current, new) is ((current, new) in ALLOWED_EDGES)


@pytest.mark.parametrize("current,new", ALL_STATUS_PAIRS)
def test_ensure_transition_raises_only_for_rejected_edges(current, new):
    if (current, new) in ALLOWED_EDGES:
        ensure_transition(current, new)
    else:
        with pytest.raises(InvalidTransitionError):
            ensure_transition(current, new)


def test_self_transitions_are_rejected():
    for status in OrderStatus:
        assert not can_transition(status.value, status.value)


def test_unknown_status_is_never_allowed():
    assert not can_transition("PAID", "LOST")
    assert not can_transition("LOST", "PAID")


def test_terminal_statuses():
    assert is_terminal("CANCELLED")
    assert is_terminal("REFUNDED")
    assert not is_terminal("DELIVERED")


def test_next_statuses_keeps_declaration_order():
    assert next_statuses("PAID") == ["SHIPPED", "CANCELLED", "REFUNDED"]
    assert next_statuses("REFUNDED") == []


def test_transition_table_lists_every_status():
    table = transition_table()
    assert set(table) == {s.value for s in OrderStatus}
    assert {(k, v) for k, vs in table.items() for v in vs} == ALLOWED_EDGES


def test_rejected_transition_carries_details():
    with pytest.raises(InvalidTransitionError) as exc:
        ensure_transition(OrderStatus.DELIVERED, OrderStatus.PAID)

    detail = exc.value.to_detail()
    assert exc.value.status_code == 409
    assert detail["code"] == "INVALID_STATUS_TRANSITION"
    assert detail["current_status"] == "DELIVERED"
    assert detail["requested_status"] == "PAID"
    assert detail["allowed"] == ["REFUNDED"]
    assert "from DELIVERED to PAID" in detail["error"]


def test_unknown_current_status_is_a_rejected_transition():
    assert next_statuses("LOST") == []

    with pytest.raises(InvalidTransitionError) as exc:
        ensure_transition("LOST", "PAID")

    assert exc.value.context["allowed"] == []
