"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from fabricstock.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_recent(self, status: OrderStatus | None = None, limit: int = 100) -> list[Order]:
        """Return orders newest first, optionally filtered by status."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order with its items."""

    @abstractmethod
    def save_status(self, order: Order, expected: OrderStatus) -> bool:
        """Write the order's status and payment fields.

        Only applies if the stored status is still *expected*; returns False
        otherwise.
        """

    @abstractmethod
    def advance_status(
        self,
        order_id: str,
        from_statuses: Iterable[OrderStatus],
        target: OrderStatus,
    ) -> bool:
        """Set *target* only if the stored status is one of *from_statuses*."""
