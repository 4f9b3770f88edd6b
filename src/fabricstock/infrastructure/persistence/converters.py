"""Helpers shared by the SQLAlchemy repositories."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from fabricstock.domain.model.value_objects import Money


def to_minor(money: Money) -> int:
    return int(money.amount * 100)


def from_minor(minor: int, currency: str) -> Money:
    return Money((Decimal(minor) / 100).quantize(Decimal("0.01")), currency)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored here is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
