"""Order aggregate and its status state machine.

The Order is an aggregate root that owns its line items.  Reservations
belong to the order too, but live in their own repository because the
Reservation Manager writes them together with roll counters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from fabricstock.domain.exceptions import IllegalTransition, ValidationError
from fabricstock.domain.model.value_objects import Market, Meters, Money


class OrderStatus(Enum):
    NEW = "new"
    PAID = "paid"
    RESERVED = "reserved"
    PRODUCTION = "production"
    QC = "qc"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PAYMENT_FAILED = "payment_failed"


# Every status has an entry; terminal statuses map to an empty set.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.NEW: frozenset(
        {
            OrderStatus.PAID,
            OrderStatus.RESERVED,
            OrderStatus.PAYMENT_FAILED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.PAID: frozenset({OrderStatus.RESERVED, OrderStatus.CANCELLED}),
    OrderStatus.RESERVED: frozenset({OrderStatus.PRODUCTION, OrderStatus.CANCELLED}),
    OrderStatus.PRODUCTION: frozenset({OrderStatus.QC, OrderStatus.CANCELLED}),
    OrderStatus.QC: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
    OrderStatus.PAYMENT_FAILED: frozenset(),
}

# Statuses from which a successful reservation moves the order to RESERVED.
RESERVABLE_FROM = frozenset({OrderStatus.NEW, OrderStatus.PAID})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(status: OrderStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


class OrderType(Enum):
    STANDARD = "standard"
    CUSTOM = "custom"


class SalesModel(Enum):
    """How a line item is sold; only fabric sold by length holds roll stock."""

    STANDARD = "standard"
    CUSTOM = "custom"
    METER = "meter"

    @property
    def uses_roll_stock(self) -> bool:
        return self in (SalesModel.CUSTOM, SalesModel.METER)


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a material and its price at order-creation time.

    Immutable: later catalog price changes never touch existing orders.
    """

    material_id: str
    description: str
    sales_model: SalesModel
    meters: Meters
    unit_price: Money  # per metre, locked at order-creation time
    roll_id: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.meters

    @property
    def needs_reservation(self) -> bool:
        return self.sales_model.uses_roll_stock and self.roll_id is not None


@dataclass
class Order:
    """Aggregate root for customer purchases.

    Use ``Order.create()`` for new orders.  The ``__init__`` stays simple so
    repositories can reconstitute persisted orders without re-validating.
    """

    id: str
    market: Market
    items: list[OrderItem]
    order_type: OrderType = OrderType.STANDARD
    status: OrderStatus = OrderStatus.NEW
    payment_reference: str | None = None
    payment_error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        market: Market,
        items: list[OrderItem],
        order_type: OrderType | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        for item in items:
            if item.unit_price.currency != market.currency:
                raise ValidationError(
                    f"Item '{item.description}' is priced in {item.unit_price.currency}, "
                    f"market {market.value} sells in {market.currency}"
                )
            if not item.meters.is_positive:
                raise ValidationError(f"Item '{item.description}' must have a positive length")
            if item.roll_id is not None and not item.sales_model.uses_roll_stock:
                raise ValidationError(
                    f"Item '{item.description}' is sold as {item.sales_model.value} "
                    f"and cannot be cut from a roll"
                )

        if order_type is None:
            custom = any(item.sales_model == SalesModel.CUSTOM for item in items)
            order_type = OrderType.CUSTOM if custom else OrderType.STANDARD

        return Order(id=str(uuid4()), market=market, items=list(items), order_type=order_type)

    # --- State transitions ----------------------------------------------------

    def transition_to(self, target: OrderStatus) -> None:
        """Move to *target* if the transition table allows it."""
        if not can_transition(self.status, target):
            raise IllegalTransition(self.status.value, target.value)
        self.status = target
        self.updated_at = datetime.now(timezone.utc)

    def record_payment(self, payment_reference: str | None) -> None:
        self.transition_to(OrderStatus.PAID)
        self.payment_reference = payment_reference

    def attach_payment_reference(self, payment_reference: str) -> None:
        """Keep a gateway reference that arrived after the order moved on."""
        if self.payment_reference is None:
            self.payment_reference = payment_reference
            self.updated_at = datetime.now(timezone.utc)

    def record_payment_failure(self, reason: str) -> None:
        self.transition_to(OrderStatus.PAYMENT_FAILED)
        self.payment_error = reason

    # --- Computed properties --------------------------------------------------

    @property
    def currency(self) -> str:
        return self.market.currency

    @property
    def total_amount(self) -> Money:
        result = Money.zero(self.currency)
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def roll_items(self) -> list[OrderItem]:
        return [item for item in self.items if item.needs_reservation]
