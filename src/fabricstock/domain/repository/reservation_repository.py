"""Abstract repository for Reservation entities."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabricstock.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def get_by_id(self, reservation_id: str) -> Reservation | None:
        """Return a reservation by its ID, or None if not found."""

    @abstractmethod
    def list_by_order(self, order_id: str) -> list[Reservation]:
        """Return every reservation held for an order."""

    @abstractmethod
    def list_by_roll(self, roll_id: str) -> list[Reservation]:
        """Return every reservation made against a roll."""

    @abstractmethod
    def list_active(self, limit: int | None = None) -> list[Reservation]:
        """Return active reservations, newest first."""

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        """Persist a new reservation."""

    @abstractmethod
    def close(self, reservation: Reservation) -> bool:
        """Persist a terminal status if the stored reservation is still active.

        Returns False when another caller closed it first.
        """
