"""Unit tests for order status transitions (State Pattern)."""

import pytest

from src.domain.entities import Order
from src.domain.enums import OrderStatus
from src.domain.errors import InvalidStateTransition


class TestOrderStateMachine:
    def test_initial_status_is_pending(self):
        assert Order().status == OrderStatus.PENDING

    # ── Valid transitions ─────────────────────────────────────────

    @pytest.mark.parametrize(
        "start, target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELED),
            (OrderStatus.CONFIRMED, OrderStatus.COMPLETED),
            (OrderStatus.CONFIRMED, OrderStatus.CANCELED),
        ],
    )
    def test_allowed(self, start, target):
        order = Order(status=start)
        order.transition_to(target)
        assert order.status == target

    # ── Invalid transitions ───────────────────────────────────────

    def test_pending_to_completed_fails(self):
        order = Order(status=OrderStatus.PENDING)
        with pytest.raises(InvalidStateTransition):
            order.transition_to(OrderStatus.COMPLETED)

    @pytest.mark.parametrize("terminal", [OrderStatus.COMPLETED, OrderStatus.CANCELED])
    def test_terminal_states_are_final(self, terminal):
        order = Order(status=terminal)
        for target in OrderStatus:
            with pytest.raises(InvalidStateTransition):
                order.transition_to(target)
        assert order.status == terminal

    def test_error_message_names_both_states(self):
        order = Order(status=OrderStatus.CANCELED)
        with pytest.raises(InvalidStateTransition, match="from CANCELED to CONFIRMED"):
            order.transition_to(OrderStatus.CONFIRMED)
