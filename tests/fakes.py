"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQLAlchemy
repositories but keep everything in a dict. No database, no side effects.
Counter updates on rolls and status changes take a lock so the fakes are
safe to hit from several threads, like the real conditional updates.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from datetime import datetime, timezone

from fabricstock.domain.exceptions import InsufficientStock, RollNotFound
from fabricstock.domain.model.fabric_roll import FabricRoll
from fabricstock.domain.model.material import Material
from fabricstock.domain.model.order import Order, OrderStatus
from fabricstock.domain.model.reservation import Reservation, ReservationStatus
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.fabric_roll_repository import FabricRollRepository
from fabricstock.domain.repository.material_repository import MaterialRepository
from fabricstock.domain.repository.order_repository import OrderRepository
from fabricstock.domain.repository.reservation_repository import ReservationRepository
from fabricstock.domain.repository.unit_of_work import UnitOfWork


class FakeFabricRollRepository(FabricRollRepository):

    def __init__(self, rolls: list[FabricRoll] | None = None) -> None:
        self._store: dict[str, FabricRoll] = {}
        self._lock = threading.Lock()
        for roll in rolls or []:
            self._store[roll.id] = roll

    def get_by_id(self, roll_id: str) -> FabricRoll | None:
        roll = self._store.get(roll_id)
        return copy.deepcopy(roll) if roll is not None else None

    def list_all(self) -> list[FabricRoll]:
        return [copy.deepcopy(r) for r in self._store.values()]

    def add(self, roll: FabricRoll) -> None:
        self._store[roll.id] = copy.deepcopy(roll)

    def try_reserve(self, roll_id: str, meters: Meters) -> bool:
        with self._lock:
            roll = self._store.get(roll_id)
            if roll is None:
                return False
            try:
                roll.reserve(meters)
            except InsufficientStock:
                return False
            return True

    def release(self, roll_id: str, meters: Meters) -> None:
        with self._lock:
            self._stored(roll_id).release(meters)

    def consume(self, roll_id: str, meters: Meters) -> None:
        with self._lock:
            self._stored(roll_id).consume(meters)

    def replenish(self, roll_id: str, meters: Meters) -> None:
        with self._lock:
            self._stored(roll_id).replenish(meters)

    def _stored(self, roll_id: str) -> FabricRoll:
        roll = self._store.get(roll_id)
        if roll is None:
            raise RollNotFound(f"Roll {roll_id} not found")
        return roll


class FakeReservationRepository(ReservationRepository):

    def __init__(self, reservations: list[Reservation] | None = None) -> None:
        self._store: dict[str, Reservation] = {}
        self._lock = threading.Lock()
        for r in reservations or []:
            self._store[r.id] = r

    def get_by_id(self, reservation_id: str) -> Reservation | None:
        r = self._store.get(reservation_id)
        return copy.deepcopy(r) if r is not None else None

    def list_by_order(self, order_id: str) -> list[Reservation]:
        return [copy.deepcopy(r) for r in self._store.values() if r.order_id == order_id]

    def list_by_roll(self, roll_id: str) -> list[Reservation]:
        return [copy.deepcopy(r) for r in self._store.values() if r.roll_id == roll_id]

    def list_active(self, limit: int | None = None) -> list[Reservation]:
        active = [copy.deepcopy(r) for r in self._store.values() if r.is_active]
        active.sort(key=lambda r: r.created_at, reverse=True)
        return active[:limit] if limit is not None else active

    def add(self, reservation: Reservation) -> None:
        with self._lock:
            self._store[reservation.id] = copy.deepcopy(reservation)

    def close(self, reservation: Reservation) -> bool:
        with self._lock:
            stored = self._store.get(reservation.id)
            if stored is None or stored.status != ReservationStatus.ACTIVE:
                return False
            self._store[reservation.id] = copy.deepcopy(reservation)
            return True


class FakeOrderRepository(OrderRepository):

    def __init__(self, orders: list[Order] | None = None) -> None:
        self._store: dict[str, Order] = {}
        self._lock = threading.Lock()
        for o in orders or []:
            self._store[o.id] = o

    def get_by_id(self, order_id: str) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    def list_recent(self, status: OrderStatus | None = None, limit: int = 100) -> list[Order]:
        orders = [
            copy.deepcopy(o)
            for o in self._store.values()
            if status is None or o.status == status
        ]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit]

    def add(self, order: Order) -> None:
        self._store[order.id] = copy.deepcopy(order)

    def save_status(self, order: Order, expected: OrderStatus) -> bool:
        with self._lock:
            stored = self._store.get(order.id)
            if stored is None or stored.status != expected:
                return False
            stored.status = order.status
            stored.payment_reference = order.payment_reference
            stored.payment_error = order.payment_error
            stored.updated_at = order.updated_at
            return True

    def advance_status(
        self,
        order_id: str,
        from_statuses: Iterable[OrderStatus],
        target: OrderStatus,
    ) -> bool:
        with self._lock:
            stored = self._store.get(order_id)
            if stored is None or stored.status not in set(from_statuses):
                return False
            stored.status = target
            stored.updated_at = datetime.now(timezone.utc)
            return True


class FakeMaterialRepository(MaterialRepository):

    def __init__(self, materials: list[Material] | None = None) -> None:
        self._store: dict[str, Material] = {}
        for m in materials or []:
            self._store[m.id] = m

    def get_by_id(self, material_id: str) -> Material | None:
        return self._store.get(material_id)

    def list_all(self) -> list[Material]:
        return sorted(self._store.values(), key=lambda m: m.name)

    def save(self, material: Material) -> None:
        self._store[material.id] = material


class FakeUnitOfWork(UnitOfWork):
    """Shares one set of fake repositories; tracks commits for assertions."""

    def __init__(
        self,
        rolls: FakeFabricRollRepository | None = None,
        reservations: FakeReservationRepository | None = None,
        orders: FakeOrderRepository | None = None,
        materials: FakeMaterialRepository | None = None,
    ) -> None:
        self.rolls = rolls or FakeFabricRollRepository()
        self.reservations = reservations or FakeReservationRepository()
        self.orders = orders or FakeOrderRepository()
        self.materials = materials or FakeMaterialRepository()
        self.commits = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        pass


def active_meters(reservations: FakeReservationRepository, roll_id: str) -> Meters:
    """Sum of active reservation metres on a roll."""
    total = Meters.zero()
    for r in reservations.list_by_roll(roll_id):
        if r.is_active:
            total = total + r.meters
    return total


def assert_ledger_consistent(uow: FakeUnitOfWork) -> None:
    for roll in uow.rolls.list_all():
        assert Meters.zero() <= roll.reserved_meters <= roll.total_meters
        assert roll.reserved_meters == active_meters(uow.reservations, roll.id)
