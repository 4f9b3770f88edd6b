"""SQLAlchemy implementation of MaterialRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from fabricstock.domain.model.material import Material
from fabricstock.domain.model.value_objects import Market, Money
from fabricstock.domain.repository.material_repository import MaterialRepository
from fabricstock.infrastructure.persistence.tables import MaterialRow


class SqlMaterialRepository(MaterialRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, material_id: str) -> Material | None:
        row = self._session.get(MaterialRow, material_id)
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Material]:
        rows = self._session.scalars(select(MaterialRow).order_by(MaterialRow.name))
        return [self._to_domain(row) for row in rows]

    def save(self, material: Material) -> None:
        self._session.merge(
            MaterialRow(
                id=material.id,
                name=material.name,
                composition=material.composition,
                width_cm=material.width_cm,
                prices={
                    market.value: str(price.amount)
                    for market, price in material.prices.items()
                },
            )
        )
        self._session.flush()

    @staticmethod
    def _to_domain(row: MaterialRow) -> Material:
        prices = {}
        for code, amount in row.prices.items():
            market = Market(code)
            prices[market] = Money(Decimal(amount), market.currency)
        return Material(
            id=row.id,
            name=row.name,
            composition=row.composition,
            width_cm=row.width_cm,
            prices=prices,
        )
