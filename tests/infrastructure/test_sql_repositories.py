"""Tests for the SQLAlchemy repositories against a temporary SQLite file."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from fabricstock.application.dto import PaymentCallback
from fabricstock.application.handle_payment_callback import HandlePaymentCallbackHandler
from fabricstock.application.reserve_stock import ReserveStockHandler
from fabricstock.application.transition_order import TransitionOrderHandler
from fabricstock.domain.exceptions import DomainException, InsufficientStock, InvalidState
from fabricstock.domain.model.fabric_roll import FabricRoll
from fabricstock.domain.model.material import Material
from fabricstock.domain.model.order import Order, OrderItem, OrderStatus, SalesModel
from fabricstock.domain.model.reservation import Reservation, ReservationStatus
from fabricstock.domain.model.value_objects import MAX_UNITS, Market, Meters, Money
from fabricstock.domain.service.reservation_manager import ReservationManager
from fabricstock.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    create_session_factory,
)
from fabricstock.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from tests.fakes import FakeFabricRollRepository


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'stock.db'}", sqlite_busy_timeout=10)
    create_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """One material, one 10 m roll and ten new orders against it."""
    orders = []
    with SqlAlchemyUnitOfWork(session_factory) as uow:
        uow.materials.save(
            Material(
                id="linen",
                name="Linen",
                prices={Market.GLOBAL: Money.of("12.50"), Market.TR: Money.of("420", "TRY")},
            )
        )
        uow.rolls.add(FabricRoll(id="r1", material_id="linen", total_meters=Meters.of("10")))
        for _ in range(10):
            order = _order("r1", "6")
            uow.orders.add(order)
            orders.append(order)
        uow.commit()
    return session_factory, orders


def _order(roll_id: str, meters: str) -> Order:
    return Order.create(
        Market.GLOBAL,
        [
            OrderItem(
                material_id="linen",
                description="Linen",
                sales_model=SalesModel.METER,
                meters=Meters.of(meters),
                unit_price=Money.of("12.50"),
                roll_id=roll_id,
            )
        ],
    )


def _roll(session_factory, roll_id: str = "r1") -> FabricRoll:
    with SqlAlchemyUnitOfWork(session_factory) as uow:
        return uow.rolls.get_by_id(roll_id)


class TestRoundTrip:

    def test_material(self, seeded):
        session_factory, _ = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            material = uow.materials.get_by_id("linen")
        assert material.price_per_meter(Market.TR) == Money.of("420", "TRY")
        assert material.price_per_meter(Market.GLOBAL) == Money.of("12.50")

    def test_order(self, seeded):
        session_factory, orders = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            loaded = uow.orders.get_by_id(orders[0].id)
        assert loaded.status == OrderStatus.NEW
        assert loaded.items[0].meters == Meters.of("6")
        assert loaded.items[0].roll_id == "r1"
        assert loaded.total_amount == Money.of("75.00")
        assert loaded.created_at.tzinfo is not None

    def test_list_recent_by_status(self, seeded):
        session_factory, orders = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            uow.orders.advance_status(orders[3].id, {OrderStatus.NEW}, OrderStatus.CANCELLED)
            uow.commit()
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            cancelled = uow.orders.list_recent(OrderStatus.CANCELLED)
            assert len(uow.orders.list_recent(limit=4)) == 4
        assert [o.id for o in cancelled] == [orders[3].id]

    def test_uncommitted_work_is_rolled_back(self, seeded):
        session_factory, orders = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            assert uow.rolls.try_reserve("r1", Meters.of("4"))
        assert _roll(session_factory).reserved_meters == Meters.zero()


class TestConditionalUpdates:

    def test_try_reserve_respects_free_length(self, seeded):
        session_factory, _ = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            assert uow.rolls.try_reserve("r1", Meters.of("7"))
            assert not uow.rolls.try_reserve("r1", Meters.of("3.01"))
            assert uow.rolls.try_reserve("r1", Meters.of("3"))
            assert uow.rolls.get_by_id("r1").free_meters == Meters.zero()
            uow.commit()

    def test_try_reserve_unknown_roll(self, seeded):
        session_factory, _ = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            assert not uow.rolls.try_reserve("nope", Meters.of("1"))

    def test_reservation_close_happens_once(self, seeded):
        session_factory, orders = seeded
        reservation = Reservation.create(orders[0].id, "r1", Meters.of("2"))
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            uow.reservations.add(reservation)
            reservation.release()
            assert uow.reservations.close(reservation)
            assert not uow.reservations.close(reservation)
            uow.commit()
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            stored = uow.reservations.get_by_id(reservation.id)
        assert stored.status == ReservationStatus.RELEASED
        assert stored.closed_at is not None

    def test_save_status_compares_expected(self, seeded):
        session_factory, orders = seeded
        order = orders[0]
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            order.record_payment("pi_1")
            assert uow.orders.save_status(order, expected=OrderStatus.NEW)
            assert not uow.orders.save_status(order, expected=OrderStatus.NEW)
            uow.commit()
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            stored = uow.orders.get_by_id(order.id)
        assert stored.status == OrderStatus.PAID
        assert stored.payment_reference == "pi_1"


class TestRollCounterParity:
    """The in-memory repository and SQLite agree on every counter rule."""

    STEPS = [
        ("try_reserve", "r1", "4"),
        ("try_reserve", "r1", "7"),
        ("try_reserve", "r1", "0"),
        ("release", "r1", "5"),
        ("consume", "r1", "3"),
        ("release", "r1", "1"),
        ("release", "r1", "0"),
        ("consume", "r1", "0.01"),
        ("replenish", "r1", "2"),
        ("replenish", "r1", MAX_UNITS),
        ("release", "nope", "1"),
        ("consume", "nope", "1"),
        ("replenish", "nope", "1"),
    ]

    @staticmethod
    def _run(repo) -> list:
        outcomes = []
        for method, roll_id, meters in TestRollCounterParity.STEPS:
            try:
                outcomes.append(getattr(repo, method)(roll_id, Meters.of(meters)))
            except DomainException as exc:
                outcomes.append(exc.code)
        roll = repo.get_by_id("r1")
        outcomes.append((roll.total_meters, roll.reserved_meters))
        return outcomes

    def test_same_outcomes(self, session_factory):
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            uow.materials.save(Material(id="linen", name="Linen", prices={}))
            uow.rolls.add(FabricRoll(id="r1", material_id="linen", total_meters=Meters.of("10")))
            sql_outcomes = self._run(uow.rolls)
            uow.commit()
        fake = FakeFabricRollRepository(
            [FabricRoll(id="r1", material_id="linen", total_meters=Meters.of("10"))]
        )

        assert self._run(fake) == sql_outcomes
        assert sql_outcomes == [
            True,
            False,
            "ValidationError",
            "ValidationError",
            None,
            None,
            "ValidationError",
            "ValidationError",
            None,
            "ValidationError",
            "RollNotFound",
            "RollNotFound",
            "RollNotFound",
            (Meters.of("9"), Meters.zero()),
        ]


class TestReservationWorkflow:

    def test_scenario_reserve_release(self, seeded):
        session_factory, orders = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            manager = ReservationManager(uow.rolls, uow.reservations, uow.orders)
            reservation = manager.reserve(orders[0].id, "r1", Meters.of("4"))
            uow.commit()
        assert _roll(session_factory).reserved_meters == Meters.of("4")

        with SqlAlchemyUnitOfWork(session_factory) as uow:
            manager = ReservationManager(uow.rolls, uow.reservations, uow.orders)
            manager.release(reservation.id)
            uow.commit()
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            manager = ReservationManager(uow.rolls, uow.reservations, uow.orders)
            with pytest.raises(InvalidState):
                manager.release(reservation.id)
            assert uow.orders.get_by_id(orders[0].id).status == OrderStatus.RESERVED
        assert _roll(session_factory).reserved_meters == Meters.zero()

    def test_failed_reserve_for_order_leaves_nothing(self, seeded):
        session_factory, orders = seeded
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            uow.rolls.add(
                FabricRoll(id="r2", material_id="linen", total_meters=Meters.of("1"))
            )
            uow.commit()
        order = Order.create(Market.GLOBAL, _order("r1", "5").items + _order("r2", "2").items)
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            uow.orders.add(order)
            uow.commit()

        with SqlAlchemyUnitOfWork(session_factory) as uow:
            manager = ReservationManager(uow.rolls, uow.reservations, uow.orders)
            with pytest.raises(InsufficientStock):
                manager.reserve_for_order(order)

        assert _roll(session_factory, "r1").reserved_meters == Meters.zero()
        assert _roll(session_factory, "r2").reserved_meters == Meters.zero()

    def test_paid_and_shipped_order_cuts_the_roll(self, seeded):
        session_factory, orders = seeded
        order_id = orders[0].id
        HandlePaymentCallbackHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
            PaymentCallback(order_id, payment_succeeded=True, payment_id="pi_9")
        )
        for status in ("production", "qc", "shipped"):
            TransitionOrderHandler(SqlAlchemyUnitOfWork(session_factory)).handle(
                order_id, status
            )

        roll = _roll(session_factory)
        assert roll.total_meters == Meters.of("4")
        assert roll.reserved_meters == Meters.zero()
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            assert uow.orders.get_by_id(order_id).status == OrderStatus.SHIPPED
            statuses = {r.status for r in uow.reservations.list_by_order(order_id)}
        assert statuses == {ReservationStatus.CONSUMED}


class TestConcurrentReservations:

    def test_only_one_of_competing_reservations_wins(self, seeded):
        session_factory, orders = seeded

        def attempt(order: Order) -> bool:
            handler = ReserveStockHandler(SqlAlchemyUnitOfWork(session_factory))
            try:
                handler.handle(order.id, "r1", "6")
            except InsufficientStock:
                return False
            return True

        with ThreadPoolExecutor(max_workers=len(orders)) as pool:
            results = list(pool.map(attempt, orders))

        assert results.count(True) == 1
        assert _roll(session_factory).reserved_meters == Meters.of("6")
        with SqlAlchemyUnitOfWork(session_factory) as uow:
            assert len(uow.reservations.list_active()) == 1
