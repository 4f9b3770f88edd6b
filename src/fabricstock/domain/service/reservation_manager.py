"""Domain service: Reservation Manager.

The only writer of roll counters.  It coordinates three repositories:
the roll ledger (counters), reservations (the individual holds) and
orders (the status side effect of a successful reservation).

Every mutation follows the same order: validate references first, then
apply the single conditional store operation that can fail, then the
writes that cannot.  A rejected call therefore leaves nothing behind even
without a transactional store.
"""

from __future__ import annotations

from fabricstock.domain.exceptions import (
    InsufficientStock,
    InvalidState,
    OrderNotFound,
    ReservationNotFound,
    RollNotFound,
    ValidationError,
)
from fabricstock.domain.model.fabric_roll import FabricRoll
from fabricstock.domain.model.order import RESERVABLE_FROM, Order, OrderStatus
from fabricstock.domain.model.reservation import Reservation
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.fabric_roll_repository import FabricRollRepository
from fabricstock.domain.repository.order_repository import OrderRepository
from fabricstock.domain.repository.reservation_repository import ReservationRepository


class ReservationManager:

    def __init__(
        self,
        roll_repo: FabricRollRepository,
        reservation_repo: ReservationRepository,
        order_repo: OrderRepository,
    ) -> None:
        self._roll_repo = roll_repo
        self._reservation_repo = reservation_repo
        self._order_repo = order_repo

    # --- Queries --------------------------------------------------------------

    def free(self, roll_id: str) -> Meters:
        return self._get_roll(roll_id).free_meters

    # --- Single reservations --------------------------------------------------

    def reserve(self, order_id: str, roll_id: str, meters: Meters) -> Reservation:
        """Hold *meters* of *roll_id* for *order_id*.

        Moves the order to RESERVED if it was NEW or PAID; an order that is
        already further along keeps its status.
        """
        if not meters.is_positive:
            raise ValidationError("Reservation length must be positive")
        order = self._get_reservable_order(order_id)
        self._get_roll(roll_id)

        if not self._roll_repo.try_reserve(roll_id, meters):
            raise self._insufficient(roll_id, meters)

        reservation = Reservation.create(order_id=order.id, roll_id=roll_id, meters=meters)
        self._reservation_repo.add(reservation)
        self._order_repo.advance_status(order.id, RESERVABLE_FROM, OrderStatus.RESERVED)
        return reservation

    def release(self, reservation_id: str) -> Reservation:
        """Return a reservation's metres to the roll's free pool."""
        reservation = self._get_reservation(reservation_id)
        reservation.release()
        self._close(reservation)
        self._roll_repo.release(reservation.roll_id, reservation.meters)
        return reservation

    def consume(self, reservation_id: str) -> Reservation:
        """Permanently deduct a reservation's metres from the roll."""
        reservation = self._get_reservation(reservation_id)
        reservation.consume()
        self._close(reservation)
        self._roll_repo.consume(reservation.roll_id, reservation.meters)
        return reservation

    # --- Whole orders ---------------------------------------------------------

    def reserve_for_order(self, order: Order) -> list[Reservation]:
        """Reserve every roll-assigned item of an order.

        Uses a two-phase approach:
          Phase 1 - validate: the order can still take reservations and
                    every referenced roll exists.
          Phase 2 - claim: conditional reserve on each roll.  If one roll
                    refuses, the rolls already claimed in this call are
                    released again before the error propagates.
        """
        # Phase 1: validate
        if order.is_terminal:
            raise InvalidState(
                f"Order {order.id} is {order.status.value} and cannot take reservations"
            )
        items = order.roll_items
        for item in items:
            self._get_roll(item.roll_id)  # type: ignore[arg-type]

        # Phase 2: claim
        claimed: list[tuple[str, Meters]] = []
        for item in items:
            roll_id: str = item.roll_id  # type: ignore[assignment]
            if not self._roll_repo.try_reserve(roll_id, item.meters):
                for done_roll_id, done_meters in claimed:
                    self._roll_repo.release(done_roll_id, done_meters)
                raise self._insufficient(roll_id, item.meters)
            claimed.append((roll_id, item.meters))

        reservations = []
        for roll_id, meters in claimed:
            reservation = Reservation.create(order_id=order.id, roll_id=roll_id, meters=meters)
            self._reservation_repo.add(reservation)
            reservations.append(reservation)

        if reservations:
            self._order_repo.advance_status(order.id, RESERVABLE_FROM, OrderStatus.RESERVED)
        return reservations

    def release_for_order(self, order_id: str) -> list[Reservation]:
        """Release every active reservation held by an order."""
        return [
            self.release(reservation.id)
            for reservation in self._reservation_repo.list_by_order(order_id)
            if reservation.is_active
        ]

    def consume_for_order(self, order_id: str) -> list[Reservation]:
        """Consume every active reservation held by an order."""
        return [
            self.consume(reservation.id)
            for reservation in self._reservation_repo.list_by_order(order_id)
            if reservation.is_active
        ]

    # --- Internal helpers -----------------------------------------------------

    def _get_roll(self, roll_id: str) -> FabricRoll:
        roll = self._roll_repo.get_by_id(roll_id)
        if roll is None:
            raise RollNotFound(f"Roll {roll_id} not found")
        return roll

    def _get_reservation(self, reservation_id: str) -> Reservation:
        reservation = self._reservation_repo.get_by_id(reservation_id)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {reservation_id} not found")
        return reservation

    def _get_reservable_order(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")
        if order.is_terminal:
            raise InvalidState(
                f"Order {order_id} is {order.status.value} and cannot take reservations"
            )
        return order

    def _close(self, reservation: Reservation) -> None:
        if not self._reservation_repo.close(reservation):
            raise InvalidState(f"Reservation {reservation.id} was closed concurrently")

    def _insufficient(self, roll_id: str, meters: Meters) -> InsufficientStock:
        roll = self._get_roll(roll_id)
        return InsufficientStock(
            f"Insufficient stock on roll {roll_id} "
            f"(need {meters}, have {roll.free_meters} free)"
        )
