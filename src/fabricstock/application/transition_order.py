"""Application service: Transition Order use case.

The Order aggregate decides whether a status change is legal.  This
handler adds the stock side of two transitions, inside the same unit of
work as the status change:

- ``shipped`` consumes every active reservation of the order (the fabric
  has been cut and has left the warehouse);
- ``cancelled`` releases every active reservation back to its roll.
"""

from __future__ import annotations

import structlog

from fabricstock.application.dto import OrderDTO, order_to_dto
from fabricstock.domain.exceptions import (
    DomainException,
    IllegalTransition,
    OrderNotFound,
    ValidationError,
)
from fabricstock.domain.model.order import OrderStatus
from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.domain.service.reservation_manager import ReservationManager

logger = structlog.get_logger(__name__)


class TransitionOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: str, target_status: str) -> OrderDTO:
        try:
            target = parse_status(target_status)
            with self._uow:
                order = self._uow.orders.get_by_id(order_id)
                if order is None:
                    raise OrderNotFound(f"Order {order_id} not found")

                previous = order.status
                order.transition_to(target)
                if not self._uow.orders.save_status(order, expected=previous):
                    current = self._uow.orders.get_by_id(order_id)
                    raise IllegalTransition(current.status.value, target.value)  # type: ignore[union-attr]

                manager = ReservationManager(
                    self._uow.rolls, self._uow.reservations, self._uow.orders
                )
                if target == OrderStatus.SHIPPED:
                    touched = manager.consume_for_order(order_id)
                elif target == OrderStatus.CANCELLED:
                    touched = manager.release_for_order(order_id)
                else:
                    touched = []
                self._uow.commit()
        except DomainException as exc:
            logger.warning(
                "Transition rejected",
                order_id=order_id,
                target=target_status,
                error=exc.code,
            )
            raise

        logger.info(
            "Order status changed",
            order_id=order_id,
            previous=previous.value,
            status=target.value,
            reservations_closed=len(touched),
        )
        return order_to_dto(order)


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown order status '{value}'") from None
