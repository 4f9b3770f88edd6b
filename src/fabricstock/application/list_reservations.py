"""Application service: List Reservations use case (query)."""

from __future__ import annotations

from fabricstock.application.dto import ReservationDTO, reservation_to_dto
from fabricstock.domain.repository.unit_of_work import UnitOfWork


class ListReservationsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        order_id: str | None = None,
        roll_id: str | None = None,
        limit: int = 20,
    ) -> list[ReservationDTO]:
        """Active reservations by default; every reservation of an order or roll if given."""
        with self._uow:
            if order_id is not None:
                reservations = self._uow.reservations.list_by_order(order_id)
            elif roll_id is not None:
                reservations = self._uow.reservations.list_by_roll(roll_id)
            else:
                reservations = self._uow.reservations.list_active(limit)
        return [reservation_to_dto(r) for r in reservations]
