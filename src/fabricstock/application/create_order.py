"""Application service: Create Order use case.

Orchestrates the flow between the catalog and the Order aggregate.  This
is where prices are snapshotted into line items and where a roll chosen
for a line is checked against the line's material.
"""

from __future__ import annotations

import structlog

from fabricstock.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from fabricstock.domain.exceptions import MaterialNotFound, RollNotFound, ValidationError
from fabricstock.domain.model.order import Order, OrderItem, OrderType, SalesModel
from fabricstock.domain.model.value_objects import Market, Meters
from fabricstock.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        market: str,
        item_specs: list[OrderItemSpec],
        order_type: str | None = None,
    ) -> OrderDTO:
        """Create a new order in status ``new``.

        Steps:
        1. Resolve each material (fail if not found) and, where a roll is
           named, check the roll exists and holds that material.
        2. Build OrderItems with *current* prices for the market (snapshot).
        3. Let the Order aggregate validate all business rules.
        4. Persist and return a DTO.
        """
        resolved_market = _parse_enum(Market, market.upper(), "market")
        resolved_type = (
            _parse_enum(OrderType, order_type, "order type") if order_type else None
        )

        with self._uow:
            items: list[OrderItem] = []
            for spec in item_specs:
                material = self._uow.materials.get_by_id(spec.material_id)
                if material is None:
                    raise MaterialNotFound(f"Material not found: '{spec.material_id}'")

                if spec.roll_id is not None:
                    roll = self._uow.rolls.get_by_id(spec.roll_id)
                    if roll is None:
                        raise RollNotFound(f"Roll {spec.roll_id} not found")
                    if roll.material_id != material.id:
                        raise ValidationError(
                            f"Roll {roll.id} holds '{roll.material_id}', "
                            f"not '{material.id}'"
                        )

                items.append(
                    OrderItem(
                        material_id=material.id,
                        description=spec.description or material.name,
                        sales_model=_parse_enum(SalesModel, spec.sales_model, "sales model"),
                        meters=Meters.of(spec.meters),
                        unit_price=material.price_per_meter(resolved_market),  # <-- price snapshot
                        roll_id=spec.roll_id,
                    )
                )

            order = Order.create(resolved_market, items, resolved_type)
            self._uow.orders.add(order)
            self._uow.commit()

        logger.info(
            "Order created",
            order_id=order.id,
            market=order.market.value,
            total=str(order.total_amount),
        )
        return order_to_dto(order)


def _parse_enum(enum_cls, value: str, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {what} '{value}'") from None
