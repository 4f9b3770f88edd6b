"""Application service: Reserve Stock use case.

Holds metres of one roll for one order.  The conditional counter update,
the reservation insert and the order's move to RESERVED commit together
or not at all.
"""

from __future__ import annotations

import structlog

from fabricstock.application.dto import ReservationDTO, reservation_to_dto
from fabricstock.domain.exceptions import DomainException
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.domain.service.reservation_manager import ReservationManager

logger = structlog.get_logger(__name__)


class ReserveStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: str, roll_id: str, meters: str | float) -> ReservationDTO:
        try:
            length = Meters.of(meters)
            with self._uow:
                manager = ReservationManager(
                    self._uow.rolls, self._uow.reservations, self._uow.orders
                )
                reservation = manager.reserve(order_id, roll_id, length)
                self._uow.commit()
        except DomainException as exc:
            logger.warning(
                "Reservation rejected",
                order_id=order_id,
                roll_id=roll_id,
                meters=meters,
                error=exc.code,
            )
            raise

        logger.info(
            "Stock reserved",
            reservation_id=reservation.id,
            order_id=order_id,
            roll_id=roll_id,
            meters=str(length),
        )
        return reservation_to_dto(reservation)
