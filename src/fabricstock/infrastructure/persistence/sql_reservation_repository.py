"""SQLAlchemy implementation of ReservationRepository."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from fabricstock.domain.model.reservation import Reservation, ReservationStatus
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.reservation_repository import ReservationRepository
from fabricstock.infrastructure.persistence.converters import as_utc
from fabricstock.infrastructure.persistence.tables import ReservationRow


class SqlReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ReservationRepository interface --------------------------------------

    def get_by_id(self, reservation_id: str) -> Reservation | None:
        row = self._session.get(ReservationRow, reservation_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def list_by_order(self, order_id: str) -> list[Reservation]:
        return self._list(
            select(ReservationRow)
            .where(ReservationRow.order_id == order_id)
            .order_by(ReservationRow.created_at)
        )

    def list_by_roll(self, roll_id: str) -> list[Reservation]:
        return self._list(
            select(ReservationRow)
            .where(ReservationRow.roll_id == roll_id)
            .order_by(ReservationRow.created_at)
        )

    def list_active(self, limit: int | None = None) -> list[Reservation]:
        query = (
            select(ReservationRow)
            .where(ReservationRow.status == ReservationStatus.ACTIVE.value)
            .order_by(ReservationRow.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return self._list(query)

    def add(self, reservation: Reservation) -> None:
        self._session.add(
            ReservationRow(
                id=reservation.id,
                roll_id=reservation.roll_id,
                order_id=reservation.order_id,
                meters_cm=reservation.meters.centimeters,
                status=reservation.status.value,
                created_at=reservation.created_at,
                closed_at=reservation.closed_at,
            )
        )
        self._session.flush()

    def close(self, reservation: Reservation) -> bool:
        result = self._session.execute(
            update(ReservationRow)
            .where(
                ReservationRow.id == reservation.id,
                ReservationRow.status == ReservationStatus.ACTIVE.value,
            )
            .values(status=reservation.status.value, closed_at=reservation.closed_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    def _list(self, query) -> list[Reservation]:
        rows = self._session.scalars(query.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(row: ReservationRow) -> Reservation:
        return Reservation(
            id=row.id,
            roll_id=row.roll_id,
            order_id=row.order_id,
            meters=Meters.from_centimeters(row.meters_cm),
            status=ReservationStatus(row.status),
            created_at=as_utc(row.created_at),
            closed_at=as_utc(row.closed_at) if row.closed_at is not None else None,
        )
