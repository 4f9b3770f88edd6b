"""SQLAlchemy unit of work: one session and one transaction per block."""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.infrastructure.persistence.sql_fabric_roll_repository import (
    SqlFabricRollRepository,
)
from fabricstock.infrastructure.persistence.sql_material_repository import (
    SqlMaterialRepository,
)
from fabricstock.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from fabricstock.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def __enter__(self) -> UnitOfWork:
        self._session = self._session_factory()
        self.rolls = SqlFabricRollRepository(self._session)
        self.reservations = SqlReservationRepository(self._session)
        self.orders = SqlOrderRepository(self._session)
        self.materials = SqlMaterialRepository(self._session)
        return super().__enter__()

    def __exit__(self, *args) -> None:
        super().__exit__(*args)
        self._session.close()

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
