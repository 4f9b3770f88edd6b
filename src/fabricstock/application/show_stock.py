"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from fabricstock.application.dto import (
    RollDTO,
    StockOverviewDTO,
    roll_to_dto,
)
from fabricstock.domain.exceptions import RollNotFound
from fabricstock.domain.model.fabric_roll import DEFAULT_LOW_STOCK_THRESHOLD
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.unit_of_work import UnitOfWork


class ShowStockHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        low_stock_threshold: Meters = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._uow = uow
        self._low_stock_threshold = low_stock_threshold

    def handle(self) -> StockOverviewDTO:
        """Every roll plus warehouse-wide totals."""
        with self._uow:
            rolls = self._uow.rolls.list_all()

        total = Meters.zero()
        reserved = Meters.zero()
        for roll in rolls:
            total = total + roll.total_meters
            reserved = reserved + roll.reserved_meters

        return StockOverviewDTO(
            rolls=[roll_to_dto(roll, self._low_stock_threshold) for roll in rolls],
            total_meters=str(total),
            reserved_meters=str(reserved),
            free_meters=str(total - reserved),
            low_stock_count=sum(
                1 for roll in rolls if roll.is_low_stock(self._low_stock_threshold)
            ),
        )

    def handle_one(self, roll_id: str) -> RollDTO:
        with self._uow:
            roll = self._uow.rolls.get_by_id(roll_id)
        if roll is None:
            raise RollNotFound(f"Roll {roll_id} not found")
        return roll_to_dto(roll, self._low_stock_threshold)
