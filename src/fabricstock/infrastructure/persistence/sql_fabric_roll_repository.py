"""SQLAlchemy implementation of FabricRollRepository.

Every counter change is a single ``UPDATE ... WHERE`` whose condition
carries the invariant, so the database evaluates the check and applies the
change as one statement.  ``rowcount`` tells whether the condition held.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from fabricstock.domain.exceptions import RollNotFound, ValidationError
from fabricstock.domain.model.fabric_roll import FabricRoll, require_positive
from fabricstock.domain.model.value_objects import MAX_UNITS, Meters
from fabricstock.domain.repository.fabric_roll_repository import FabricRollRepository
from fabricstock.infrastructure.persistence.converters import as_utc
from fabricstock.infrastructure.persistence.tables import FabricRollRow

_MAX_CM = Meters(MAX_UNITS).centimeters


class SqlFabricRollRepository(FabricRollRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- FabricRollRepository interface ---------------------------------------

    def get_by_id(self, roll_id: str) -> FabricRoll | None:
        row = self._session.get(FabricRollRow, roll_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[FabricRoll]:
        rows = self._session.scalars(
            select(FabricRollRow)
            .order_by(FabricRollRow.received_at.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(row) for row in rows]

    def add(self, roll: FabricRoll) -> None:
        self._session.add(self._to_row(roll))
        self._session.flush()

    def try_reserve(self, roll_id: str, meters: Meters) -> bool:
        require_positive(meters, "Reservation")
        cm = meters.centimeters
        result = self._session.execute(
            update(FabricRollRow)
            .where(
                FabricRollRow.id == roll_id,
                FabricRollRow.reserved_cm + cm <= FabricRollRow.total_cm,
            )
            .values(reserved_cm=FabricRollRow.reserved_cm + cm)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def release(self, roll_id: str, meters: Meters) -> None:
        require_positive(meters, "Release")
        cm = meters.centimeters
        result = self._session.execute(
            update(FabricRollRow)
            .where(FabricRollRow.id == roll_id, FabricRollRow.reserved_cm >= cm)
            .values(reserved_cm=FabricRollRow.reserved_cm - cm)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self._require_exists(roll_id)
            raise ValidationError(
                f"Cannot release {meters} on roll {roll_id} - not that much reserved"
            )

    def consume(self, roll_id: str, meters: Meters) -> None:
        require_positive(meters, "Consume")
        cm = meters.centimeters
        result = self._session.execute(
            update(FabricRollRow)
            .where(
                FabricRollRow.id == roll_id,
                FabricRollRow.reserved_cm >= cm,
                FabricRollRow.total_cm >= cm,
            )
            .values(
                reserved_cm=FabricRollRow.reserved_cm - cm,
                total_cm=FabricRollRow.total_cm - cm,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self._require_exists(roll_id)
            raise ValidationError(
                f"Cannot consume {meters} on roll {roll_id} - not that much reserved"
            )

    def replenish(self, roll_id: str, meters: Meters) -> None:
        require_positive(meters, "Replenish")
        cm = meters.centimeters
        result = self._session.execute(
            update(FabricRollRow)
            .where(FabricRollRow.id == roll_id, FabricRollRow.total_cm <= _MAX_CM - cm)
            .values(total_cm=FabricRollRow.total_cm + cm)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self._require_exists(roll_id)
            raise ValidationError(
                f"Replenishing roll {roll_id} by {meters} exceeds the longest storable roll"
            )

    def _require_exists(self, roll_id: str) -> None:
        if self._session.get(FabricRollRow, roll_id) is None:
            raise RollNotFound(f"Roll {roll_id} not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(roll: FabricRoll) -> FabricRollRow:
        return FabricRollRow(
            id=roll.id,
            material_id=roll.material_id,
            label=roll.label,
            total_cm=roll.total_meters.centimeters,
            reserved_cm=roll.reserved_meters.centimeters,
            received_at=roll.received_at,
        )

    @staticmethod
    def _to_domain(row: FabricRollRow) -> FabricRoll:
        return FabricRoll(
            id=row.id,
            material_id=row.material_id,
            total_meters=Meters.from_centimeters(row.total_cm),
            reserved_meters=Meters.from_centimeters(row.reserved_cm),
            label=row.label,
            received_at=as_utc(row.received_at),
        )
