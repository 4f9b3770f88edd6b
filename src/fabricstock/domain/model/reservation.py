"""Reservation entity: a soft hold of metres on one roll for one order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from fabricstock.domain.exceptions import InvalidState, ValidationError
from fabricstock.domain.model.value_objects import Meters


class ReservationStatus(Enum):
    ACTIVE = "active"
    RELEASED = "released"
    CONSUMED = "consumed"


@dataclass
class Reservation:
    """A claim of ``meters`` from a roll on behalf of an order.

    ``released`` and ``consumed`` are terminal.  Closing an already closed
    reservation raises InvalidState so stock is never returned or deducted
    twice.
    """

    id: str
    roll_id: str
    order_id: str
    meters: Meters
    status: ReservationStatus = ReservationStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    closed_at: datetime | None = None

    @staticmethod
    def create(order_id: str, roll_id: str, meters: Meters) -> Reservation:
        if not meters.is_positive:
            raise ValidationError("Reservation length must be positive")
        return Reservation(
            id=str(uuid4()),
            roll_id=roll_id,
            order_id=order_id,
            meters=meters,
        )

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    def release(self) -> None:
        self._close(ReservationStatus.RELEASED)

    def consume(self) -> None:
        self._close(ReservationStatus.CONSUMED)

    def _close(self, target: ReservationStatus) -> None:
        if not self.is_active:
            raise InvalidState(
                f"Reservation {self.id} is already {self.status.value}"
            )
        self.status = target
        self.closed_at = datetime.now(timezone.utc)
