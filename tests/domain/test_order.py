"""Unit tests for the Order aggregate and its status state machine."""

import pytest

from fabricstock.domain.exceptions import IllegalTransition, ValidationError
from fabricstock.domain.model.order import (
    ALLOWED_TRANSITIONS,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    SalesModel,
    can_transition,
    is_terminal,
)
from fabricstock.domain.model.value_objects import Market, Meters, Money


def _item(
    meters: str = "2.00",
    price: str = "10.00",
    currency: str = "USD",
    model: SalesModel = SalesModel.METER,
    roll_id: str | None = None,
) -> OrderItem:
    return OrderItem(
        material_id="linen",
        description="Linen",
        sales_model=model,
        meters=Meters.of(meters),
        unit_price=Money.of(price, currency),
        roll_id=roll_id,
    )


def _order_in(status: OrderStatus) -> Order:
    order = Order.create(Market.GLOBAL, [_item()])
    order.status = status
    return order


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(Market.GLOBAL, [_item(meters="2.50", price="12.00")])
        assert order.status == OrderStatus.NEW
        assert order.order_type == OrderType.STANDARD
        assert order.currency == "USD"
        assert order.total_amount == Money.of("30.00")

    def test_total_is_sum_of_line_totals(self):
        order = Order.create(
            Market.TR,
            [
                _item(meters="1.00", price="100.00", currency="TRY"),
                _item(meters="0.50", price="80.00", currency="TRY"),
            ],
        )
        assert order.total_amount == Money.of("140.00", "TRY")

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create(Market.GLOBAL, [])

    def test_currency_must_match_market(self):
        with pytest.raises(ValidationError, match="priced in TRY"):
            Order.create(Market.GLOBAL, [_item(currency="TRY")])

    def test_zero_length_rejected(self):
        with pytest.raises(ValidationError, match="positive length"):
            Order.create(Market.GLOBAL, [_item(meters="0")])

    def test_standard_item_cannot_reference_roll(self):
        with pytest.raises(ValidationError, match="cannot be cut from a roll"):
            Order.create(Market.GLOBAL, [_item(model=SalesModel.STANDARD, roll_id="r1")])

    def test_custom_item_makes_custom_order(self):
        order = Order.create(Market.GLOBAL, [_item(), _item(model=SalesModel.CUSTOM)])
        assert order.order_type == OrderType.CUSTOM

    def test_roll_items_only_lists_assigned_roll_stock(self):
        order = Order.create(
            Market.GLOBAL,
            [_item(roll_id="r1"), _item(), _item(model=SalesModel.STANDARD)],
        )
        assert [i.roll_id for i in order.roll_items] == ["r1"]


class TestTransitionTable:

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(OrderStatus)

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.NEW, OrderStatus.PAID),
            (OrderStatus.NEW, OrderStatus.RESERVED),
            (OrderStatus.NEW, OrderStatus.PAYMENT_FAILED),
            (OrderStatus.NEW, OrderStatus.CANCELLED),
            (OrderStatus.PAID, OrderStatus.RESERVED),
            (OrderStatus.RESERVED, OrderStatus.PRODUCTION),
            (OrderStatus.RESERVED, OrderStatus.CANCELLED),
            (OrderStatus.PRODUCTION, OrderStatus.QC),
            (OrderStatus.QC, OrderStatus.SHIPPED),
            (OrderStatus.QC, OrderStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.NEW, OrderStatus.SHIPPED),
            (OrderStatus.RESERVED, OrderStatus.SHIPPED),
            (OrderStatus.PRODUCTION, OrderStatus.SHIPPED),
            (OrderStatus.RESERVED, OrderStatus.NEW),
            (OrderStatus.QC, OrderStatus.PRODUCTION),
        ],
    )
    def test_forbidden(self, current, target):
        assert not can_transition(current, target)

    @pytest.mark.parametrize(
        "status",
        [
            OrderStatus.SHIPPED,
            OrderStatus.CANCELLED,
            OrderStatus.REFUNDED,
            OrderStatus.PAYMENT_FAILED,
        ],
    )
    def test_terminal_statuses_go_nowhere(self, status):
        assert is_terminal(status)
        assert not any(can_transition(status, target) for target in OrderStatus)

    def test_non_terminal_statuses(self):
        assert not is_terminal(OrderStatus.NEW)
        assert not is_terminal(OrderStatus.QC)


class TestTransitionTo:

    def test_reserved_to_production(self):
        order = _order_in(OrderStatus.RESERVED)
        before = order.updated_at
        order.transition_to(OrderStatus.PRODUCTION)
        assert order.status == OrderStatus.PRODUCTION
        assert order.updated_at >= before

    def test_shipped_requires_qc(self):
        order = _order_in(OrderStatus.RESERVED)
        with pytest.raises(IllegalTransition) as exc_info:
            order.transition_to(OrderStatus.SHIPPED)
        assert exc_info.value.current == "reserved"
        assert exc_info.value.target == "shipped"
        assert order.status == OrderStatus.RESERVED

    def test_terminal_order_rejects_everything(self):
        order = _order_in(OrderStatus.CANCELLED)
        with pytest.raises(IllegalTransition, match="cancelled -> new"):
            order.transition_to(OrderStatus.NEW)


class TestPayment:

    def test_record_payment(self):
        order = _order_in(OrderStatus.NEW)
        order.record_payment("pi_123")
        assert order.status == OrderStatus.PAID
        assert order.payment_reference == "pi_123"

    def test_record_payment_failure(self):
        order = _order_in(OrderStatus.NEW)
        order.record_payment_failure("card declined")
        assert order.status == OrderStatus.PAYMENT_FAILED
        assert order.payment_error == "card declined"

    def test_payment_after_reserved_is_illegal(self):
        order = _order_in(OrderStatus.RESERVED)
        with pytest.raises(IllegalTransition):
            order.record_payment("pi_123")
        assert order.payment_reference is None

    def test_late_reference_attached_once(self):
        order = _order_in(OrderStatus.RESERVED)
        order.attach_payment_reference("pi_1")
        order.attach_payment_reference("pi_2")
        assert order.status == OrderStatus.RESERVED
        assert order.payment_reference == "pi_1"
