"""Application service: Consume Reservation use case.

The roll has been cut: the reservation's metres leave both the reserved
and the total counters.
"""

from __future__ import annotations

import structlog

from fabricstock.application.dto import ReservationDTO, reservation_to_dto
from fabricstock.domain.exceptions import DomainException
from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.domain.service.reservation_manager import ReservationManager

logger = structlog.get_logger(__name__)


class ConsumeReservationHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, reservation_id: str) -> ReservationDTO:
        try:
            with self._uow:
                manager = ReservationManager(
                    self._uow.rolls, self._uow.reservations, self._uow.orders
                )
                reservation = manager.consume(reservation_id)
                self._uow.commit()
        except DomainException as exc:
            logger.warning(
                "Consume rejected", reservation_id=reservation_id, error=exc.code
            )
            raise

        logger.info(
            "Reservation consumed",
            reservation_id=reservation_id,
            roll_id=reservation.roll_id,
            meters=str(reservation.meters),
        )
        return reservation_to_dto(reservation)
