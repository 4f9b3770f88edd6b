"""Domain service: consistency checks between rolls and reservations.

A roll's ``reserved_meters`` must equal the sum of its active
reservations, and stay within ``0..total_meters``.  The counters are
maintained incrementally, so this recomputes them from the reservations
and reports any drift.
"""

from __future__ import annotations

from collections.abc import Iterable

from fabricstock.domain.model.fabric_roll import FabricRoll
from fabricstock.domain.model.reservation import Reservation
from fabricstock.domain.model.value_objects import Meters


def audit_roll(roll: FabricRoll, reservations: Iterable[Reservation]) -> list[str]:
    """Return a description of every broken invariant on *roll*."""
    problems: list[str] = []

    active = Meters.zero()
    for reservation in reservations:
        if reservation.roll_id != roll.id:
            problems.append(
                f"reservation {reservation.id} belongs to roll {reservation.roll_id}"
            )
        elif reservation.is_active:
            active = active + reservation.meters

    if roll.reserved_meters > roll.total_meters:
        problems.append(
            f"reserved {roll.reserved_meters} exceeds total {roll.total_meters}"
        )
    if roll.reserved_meters != active:
        problems.append(
            f"reserved {roll.reserved_meters} but active reservations hold {active}"
        )
    return problems
