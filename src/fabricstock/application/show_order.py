"""Application service: Show Order use case (query)."""

from __future__ import annotations

from fabricstock.application.dto import OrderDTO, order_to_dto
from fabricstock.domain.exceptions import OrderNotFound
from fabricstock.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: str) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")
        return order_to_dto(order)
