"""SQLAlchemy implementation of OrderRepository."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from fabricstock.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    SalesModel,
)
from fabricstock.domain.model.value_objects import Market, Meters
from fabricstock.domain.repository.order_repository import OrderRepository
from fabricstock.infrastructure.persistence.converters import as_utc, from_minor, to_minor
from fabricstock.infrastructure.persistence.tables import OrderItemRow, OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        row = self._session.scalars(
            select(OrderRow)
            .where(OrderRow.id == order_id)
            .options(selectinload(OrderRow.items))
            .execution_options(populate_existing=True)
        ).one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_recent(self, status: OrderStatus | None = None, limit: int = 100) -> list[Order]:
        query = select(OrderRow).options(selectinload(OrderRow.items))
        if status is not None:
            query = query.where(OrderRow.status == status.value)
        query = (
            query.order_by(OrderRow.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(row) for row in self._session.scalars(query)]

    def add(self, order: Order) -> None:
        self._session.add(self._to_row(order))
        self._session.flush()

    def save_status(self, order: Order, expected: OrderStatus) -> bool:
        result = self._session.execute(
            update(OrderRow)
            .where(OrderRow.id == order.id, OrderRow.status == expected.value)
            .values(
                status=order.status.value,
                payment_reference=order.payment_reference,
                payment_error=order.payment_error,
                updated_at=order.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def advance_status(
        self,
        order_id: str,
        from_statuses: Iterable[OrderStatus],
        target: OrderStatus,
    ) -> bool:
        result = self._session.execute(
            update(OrderRow)
            .where(
                OrderRow.id == order_id,
                OrderRow.status.in_([status.value for status in from_statuses]),
            )
            .values(status=target.value, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        return OrderRow(
            id=order.id,
            market=order.market.value,
            order_type=order.order_type.value,
            status=order.status.value,
            currency=order.currency,
            total_amount_minor=to_minor(order.total_amount),
            payment_reference=order.payment_reference,
            payment_error=order.payment_error,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemRow(
                    position=position,
                    material_id=item.material_id,
                    description=item.description,
                    sales_model=item.sales_model.value,
                    meters_cm=item.meters.centimeters,
                    unit_price_minor=to_minor(item.unit_price),
                    currency=item.unit_price.currency,
                    roll_id=item.roll_id,
                )
                for position, item in enumerate(order.items)
            ],
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        items = [
            OrderItem(
                material_id=i.material_id,
                description=i.description,
                sales_model=SalesModel(i.sales_model),
                meters=Meters.from_centimeters(i.meters_cm),
                unit_price=from_minor(i.unit_price_minor, i.currency),
                roll_id=i.roll_id,
            )
            for i in row.items
        ]
        return Order(
            id=row.id,
            market=Market(row.market),
            items=items,
            order_type=OrderType(row.order_type),
            status=OrderStatus(row.status),
            payment_reference=row.payment_reference,
            payment_error=row.payment_error,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
