"""Application service: Add Material use case.

Materials normally arrive from the catalog; this handler lets operators
seed the reference data the stock workflow reads.
"""

from __future__ import annotations

import re
from decimal import Decimal

import structlog

from fabricstock.application.dto import MaterialDTO, material_to_dto
from fabricstock.domain.exceptions import ValidationError
from fabricstock.domain.model.material import Material
from fabricstock.domain.model.value_objects import Market, Money
from fabricstock.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class AddMaterialHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        prices: dict[str, str],
        composition: str = "",
        width_cm: int | None = None,
    ) -> MaterialDTO:
        """Add a material with a price per metre for each market.

        *prices* maps a market code (``TR``, ``GLOBAL``) to an amount in
        that market's currency.
        """
        if not name or not name.strip():
            raise ValidationError("Material name is required")
        if width_cm is not None and width_cm <= 0:
            raise ValidationError("Material width must be positive")

        material_id = _slugify(name)
        material = Material(
            id=material_id,
            name=name.strip(),
            composition=composition.strip(),
            width_cm=width_cm,
            prices=_parse_prices(prices),
        )

        with self._uow:
            if self._uow.materials.get_by_id(material_id) is not None:
                raise ValidationError(f"Material '{name}' already exists")
            self._uow.materials.save(material)
            self._uow.commit()

        logger.info("Material added", material_id=material_id, markets=sorted(prices))
        return material_to_dto(material)


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    if not slug:
        raise ValidationError(f"Cannot derive an ID from material name {name!r}")
    return slug


def _parse_prices(raw: dict[str, str]) -> dict[Market, Money]:
    prices: dict[Market, Money] = {}
    for code, amount in raw.items():
        try:
            market = Market(code.upper())
        except ValueError:
            raise ValidationError(f"Unknown market '{code}'") from None
        price = Money.of(amount, market.currency)
        if price.amount <= 0:
            raise ValidationError("Material price must be greater than zero")
        if price.amount != price.amount.quantize(Decimal("0.01")):
            raise ValidationError(f"Price {amount} has more than two decimal places")
        prices[market] = price
    return prices
