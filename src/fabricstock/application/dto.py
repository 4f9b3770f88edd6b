"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI / boundary API and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from fabricstock.domain.model.fabric_roll import FabricRoll
from fabricstock.domain.model.material import Material
from fabricstock.domain.model.order import Order
from fabricstock.domain.model.reservation import Reservation
from fabricstock.domain.model.value_objects import Meters

_TIMESTAMP = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: a line the customer asked for."""

    material_id: str
    meters: str
    sales_model: str = "meter"
    roll_id: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class PaymentCallback:
    """Input: the outcome a payment gateway reported for an order."""

    order_reference: str
    payment_succeeded: bool
    payment_id: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class MaterialDTO:
    id: str
    name: str
    composition: str
    width_cm: int | None
    prices: dict[str, str]  # market -> formatted price per metre


@dataclass(frozen=True)
class RollDTO:
    id: str
    material_id: str
    label: str
    total_meters: str
    reserved_meters: str
    free_meters: str
    low_stock: bool
    received_at: str


@dataclass(frozen=True)
class StockOverviewDTO:
    rolls: list[RollDTO]
    total_meters: str
    reserved_meters: str
    free_meters: str
    low_stock_count: int


@dataclass(frozen=True)
class ReservationDTO:
    id: str
    roll_id: str
    order_id: str
    meters: str
    status: str
    created_at: str


@dataclass(frozen=True)
class OrderItemDTO:
    material_id: str
    description: str
    sales_model: str
    meters: str
    unit_price: str  # formatted, e.g. "12.50 USD"
    line_total: str
    roll_id: str | None


@dataclass(frozen=True)
class OrderDTO:
    id: str
    market: str
    order_type: str
    status: str
    currency: str
    items: list[OrderItemDTO]
    total: str
    payment_reference: str | None
    payment_error: str | None
    created_at: str


@dataclass(frozen=True)
class AuditFindingDTO:
    roll_id: str
    problem: str


# --- Mapping ------------------------------------------------------------------


def material_to_dto(material: Material) -> MaterialDTO:
    return MaterialDTO(
        id=material.id,
        name=material.name,
        composition=material.composition,
        width_cm=material.width_cm,
        prices={market.value: str(price) for market, price in material.prices.items()},
    )


def roll_to_dto(roll: FabricRoll, low_stock_threshold: Meters) -> RollDTO:
    return RollDTO(
        id=roll.id,
        material_id=roll.material_id,
        label=roll.label,
        total_meters=str(roll.total_meters),
        reserved_meters=str(roll.reserved_meters),
        free_meters=str(roll.free_meters),
        low_stock=roll.is_low_stock(low_stock_threshold),
        received_at=roll.received_at.strftime(_TIMESTAMP),
    )


def reservation_to_dto(reservation: Reservation) -> ReservationDTO:
    return ReservationDTO(
        id=reservation.id,
        roll_id=reservation.roll_id,
        order_id=reservation.order_id,
        meters=str(reservation.meters),
        status=reservation.status.value,
        created_at=reservation.created_at.strftime(_TIMESTAMP),
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        market=order.market.value,
        order_type=order.order_type.value,
        status=order.status.value,
        currency=order.currency,
        items=[
            OrderItemDTO(
                material_id=item.material_id,
                description=item.description,
                sales_model=item.sales_model.value,
                meters=str(item.meters),
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
                roll_id=item.roll_id,
            )
            for item in order.items
        ],
        total=str(order.total_amount),
        payment_reference=order.payment_reference,
        payment_error=order.payment_error,
        created_at=order.created_at.strftime(_TIMESTAMP),
    )
