"""Application service: Receive Roll and Replenish Roll use cases."""

from __future__ import annotations

import structlog

from fabricstock.application.dto import RollDTO, roll_to_dto
from fabricstock.domain.exceptions import MaterialNotFound, RollNotFound
from fabricstock.domain.model.fabric_roll import DEFAULT_LOW_STOCK_THRESHOLD, FabricRoll
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class ReceiveRollHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        low_stock_threshold: Meters = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._uow = uow
        self._low_stock_threshold = low_stock_threshold

    def handle(self, material_id: str, meters: str, label: str = "") -> RollDTO:
        """Register a new roll of a known material."""
        with self._uow:
            if self._uow.materials.get_by_id(material_id) is None:
                raise MaterialNotFound(f"Material not found: '{material_id}'")
            roll = FabricRoll.receive(material_id, Meters.of(meters), label)
            self._uow.rolls.add(roll)
            self._uow.commit()

        logger.info(
            "Roll received",
            roll_id=roll.id,
            material_id=material_id,
            meters=str(roll.total_meters),
        )
        return roll_to_dto(roll, self._low_stock_threshold)


class ReplenishRollHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        low_stock_threshold: Meters = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._uow = uow
        self._low_stock_threshold = low_stock_threshold

    def handle(self, roll_id: str, meters: str) -> RollDTO:
        """Add metres to an existing roll's total."""
        added = Meters.of(meters)
        with self._uow:
            roll = self._uow.rolls.get_by_id(roll_id)
            if roll is None:
                raise RollNotFound(f"Roll {roll_id} not found")
            roll.replenish(added)  # validates the amount
            self._uow.rolls.replenish(roll_id, added)
            self._uow.commit()
            roll = self._uow.rolls.get_by_id(roll_id)

        logger.info("Roll replenished", roll_id=roll_id, meters=str(added))
        return roll_to_dto(roll, self._low_stock_threshold)  # type: ignore[arg-type]
