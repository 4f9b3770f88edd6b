"""Application service: List Orders use case (query)."""

from __future__ import annotations

from fabricstock.application.dto import OrderDTO, order_to_dto
from fabricstock.domain.exceptions import ValidationError
from fabricstock.domain.model.order import OrderStatus
from fabricstock.domain.repository.unit_of_work import UnitOfWork


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, status: str | None = None, limit: int = 100) -> list[OrderDTO]:
        """Newest orders first, optionally only those in *status*."""
        wanted = None
        if status is not None:
            try:
                wanted = OrderStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown order status '{status}'") from None

        with self._uow:
            orders = self._uow.orders.list_recent(wanted, limit)
        return [order_to_dto(order) for order in orders]
