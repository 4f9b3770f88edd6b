"""Application service: Release Reservation use case.

Returns a reservation's metres to the roll's free pool.  The roll's total
is untouched.
"""

from __future__ import annotations

import structlog

from fabricstock.application.dto import ReservationDTO, reservation_to_dto
from fabricstock.domain.exceptions import DomainException
from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.domain.service.reservation_manager import ReservationManager

logger = structlog.get_logger(__name__)


class ReleaseReservationHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, reservation_id: str) -> ReservationDTO:
        try:
            with self._uow:
                manager = ReservationManager(
                    self._uow.rolls, self._uow.reservations, self._uow.orders
                )
                reservation = manager.release(reservation_id)
                self._uow.commit()
        except DomainException as exc:
            logger.warning(
                "Release rejected", reservation_id=reservation_id, error=exc.code
            )
            raise

        logger.info(
            "Reservation released",
            reservation_id=reservation_id,
            roll_id=reservation.roll_id,
            meters=str(reservation.meters),
        )
        return reservation_to_dto(reservation)
