"""Abstract repository for the FabricRoll aggregate: the roll ledger.

Counter changes go through the conditional operations below and never
through a read-modify-write of a loaded FabricRoll, so concurrent callers
on the same roll are serialised by the store itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabricstock.domain.model.fabric_roll import FabricRoll
from fabricstock.domain.model.value_objects import Meters


class FabricRollRepository(ABC):

    @abstractmethod
    def get_by_id(self, roll_id: str) -> FabricRoll | None:
        """Return a roll by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[FabricRoll]:
        """Return every roll, most recently received first."""

    @abstractmethod
    def add(self, roll: FabricRoll) -> None:
        """Persist a newly received roll."""

    @abstractmethod
    def try_reserve(self, roll_id: str, meters: Meters) -> bool:
        """Add *meters* to the reserved counter only if they are free.

        The check and the increment are one indivisible operation.
        Returns False when the roll is missing or lacks free metres.
        """

    @abstractmethod
    def release(self, roll_id: str, meters: Meters) -> None:
        """Subtract *meters* from the reserved counter."""

    @abstractmethod
    def consume(self, roll_id: str, meters: Meters) -> None:
        """Subtract *meters* from both the reserved and total counters."""

    @abstractmethod
    def replenish(self, roll_id: str, meters: Meters) -> None:
        """Add *meters* to the total counter."""
