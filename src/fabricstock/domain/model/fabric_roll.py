"""FabricRoll aggregate: tracks total and reserved metres of one roll.

Each physical roll of a material has one FabricRoll record that knows how
long the roll is and how much of it is held by active reservations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from fabricstock.domain.exceptions import InsufficientStock, ValidationError
from fabricstock.domain.model.value_objects import Meters

DEFAULT_LOW_STOCK_THRESHOLD = Meters(Decimal("10.00"))


@dataclass
class FabricRoll:
    """Aggregate root for roll stock.

    Invariants:
    - ``reserved_meters`` can never exceed ``total_meters``
    - ``free_meters`` is always >= 0
    - ``total_meters`` only decreases through ``consume``

    The SQL repository applies the same rules as conditional ``UPDATE``
    statements instead of calling these methods, so the two stay in step.
    """

    id: str
    material_id: str
    total_meters: Meters
    reserved_meters: Meters = field(default_factory=Meters.zero)
    label: str = ""
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def receive(material_id: str, total_meters: Meters, label: str = "") -> FabricRoll:
        """Register a newly received roll."""
        if not total_meters.is_positive:
            raise ValidationError("A received roll must have a positive length")
        return FabricRoll(
            id=str(uuid4()),
            material_id=material_id,
            total_meters=total_meters,
            label=label.strip(),
        )

    # --- Queries --------------------------------------------------------------

    @property
    def free_meters(self) -> Meters:
        return self.total_meters - self.reserved_meters

    def is_low_stock(self, threshold: Meters = DEFAULT_LOW_STOCK_THRESHOLD) -> bool:
        return self.free_meters < threshold

    # --- Counter adjustments --------------------------------------------------

    def reserve(self, meters: Meters) -> None:
        """Hold *meters* of free stock.

        Raises InsufficientStock if the roll does not have that much free.
        """
        require_positive(meters, "Reservation")
        if meters > self.free_meters:
            raise InsufficientStock(
                f"Insufficient stock on roll {self.id} "
                f"(need {meters}, have {self.free_meters} free)"
            )
        self.reserved_meters = self.reserved_meters + meters

    def release(self, meters: Meters) -> None:
        """Return held metres to the free pool; total stays the same."""
        require_positive(meters, "Release")
        if meters > self.reserved_meters:
            raise ValidationError(
                f"Cannot release {meters} on roll {self.id} "
                f"- only {self.reserved_meters} currently reserved"
            )
        self.reserved_meters = self.reserved_meters - meters

    def consume(self, meters: Meters) -> None:
        """Permanently deduct held metres (the roll was cut).

        Both ``total_meters`` and ``reserved_meters`` decrease by the same
        amount, so ``free_meters`` is unchanged.
        """
        require_positive(meters, "Consume")
        if meters > self.reserved_meters:
            raise ValidationError(
                f"Cannot consume {meters} on roll {self.id} "
                f"- only {self.reserved_meters} currently reserved"
            )
        self.reserved_meters = self.reserved_meters - meters
        self.total_meters = self.total_meters - meters

    def replenish(self, meters: Meters) -> None:
        require_positive(meters, "Replenish")
        self.total_meters = self.total_meters + meters


def require_positive(meters: Meters, what: str) -> None:
    if not meters.is_positive:
        raise ValidationError(f"{what} length must be positive")
