"""Tests for the conditional-write store and the transition tables."""

import pytest

from core.models import generate_object_id, is_valid_object_id
from models.orderModels import PAID_ORDER_SOURCES, can_transition
from services.orderStore import apply_transition, reload_order


class TestTransitionTables:
    @pytest.mark.parametrize("current,new", [
        ("pending", "accepted"),
        ("accepted", "processing"),
        ("processing", "completed"),
        ("processing", "cancelled"),
        ("accepted", "rejected"),
    ])
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        ("pending", "processing"),
        ("pending", "completed"),
        ("completed", "cancelled"),
        ("cancelled", "pending"),
        ("rejected", "accepted"),
        ("processing", "pending"),
    ])
    def test_forbidden(self, current, new):
        assert not can_transition(current, new)

    def test_payment_may_advance_unaccepted_orders(self):
        assert set(PAID_ORDER_SOURCES) == {"pending", "accepted"}


class TestObjectIds:
    def test_generated_ids_are_valid(self):
        assert is_valid_object_id(generate_object_id())

    @pytest.mark.parametrize("value", ["abc", "g" * 24, "a" * 25, None, 123])
    def test_invalid(self, value):
        assert not is_valid_object_id(value)


class TestApplyTransition:
    def test_only_one_of_two_racing_writes_wins(self, order):
        expected = {"payment_status": ("pending",)}

        first = apply_transition(order.id, {"payment_status": "completed", "status": "processing"}, **expected)
        second = apply_transition(order.id, {"payment_status": "cancelled", "status": "cancelled"}, **expected)

        assert (first, second) == (True, False)
        current = reload_order(order.id)
        assert (current.status, current.payment_status) == ("processing", "completed")

    def test_matches_null(self, order):
        assert apply_transition(order.id, {"refund_id": "rfnd_1"}, refund_id=(None,))
        assert not apply_transition(order.id, {"refund_id": "rfnd_2"}, refund_id=(None,))
        assert reload_order(order.id).refund_id == "rfnd_1"

    def test_null_or_value(self, order):
        assert apply_transition(order.id, {"meeting_location": "x"}, gateway_order_id=(None, "order_1"))

    def test_unknown_order(self, app):
        assert not apply_transition(generate_object_id(), {"status": "cancelled"})

    def test_stamps_updated_at(self, order):
        before = reload_order(order.id).updated_at
        apply_transition(order.id, {"meeting_location": "Gate 2 at 5pm"})
        assert reload_order(order.id).updated_at >= before
