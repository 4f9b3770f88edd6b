"""Material: catalog reference data for a fabric.

Materials are maintained by the catalog and read here only to check that a
roll belongs to a known fabric and to snapshot the price per metre into new
orders.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fabricstock.domain.exceptions import ValidationError
from fabricstock.domain.model.value_objects import Market, Money


@dataclass
class Material:

    id: str
    name: str
    composition: str = ""
    width_cm: int | None = None
    prices: dict[Market, Money] = field(default_factory=dict)

    def price_per_meter(self, market: Market) -> Money:
        price = self.prices.get(market)
        if price is None:
            raise ValidationError(
                f"Material '{self.name}' has no price for market {market.value}"
            )
        return price
