"""Abstract unit of work: one transaction spanning every repository.

Use it as a context manager and call ``commit()`` before leaving the
block; anything not committed is rolled back on exit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabricstock.domain.repository.fabric_roll_repository import FabricRollRepository
from fabricstock.domain.repository.material_repository import MaterialRepository
from fabricstock.domain.repository.order_repository import OrderRepository
from fabricstock.domain.repository.reservation_repository import ReservationRepository


class UnitOfWork(ABC):

    rolls: FabricRollRepository
    reservations: ReservationRepository
    orders: OrderRepository
    materials: MaterialRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change since ``__enter__`` durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes."""
