"""SQLAlchemy table mappings.

Lengths are stored as integer centimetres and money as integer minor
units, so the conditional updates in the repositories compare exact
integers on every backend.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class MaterialRow(Base):
    __tablename__ = "materials"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    composition: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    width_cm: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # market code -> price per metre as a decimal string
    prices: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)


class FabricRollRow(Base):
    __tablename__ = "fabric_rolls"
    __table_args__ = (
        CheckConstraint("reserved_cm >= 0", name="ck_roll_reserved_non_negative"),
        CheckConstraint("reserved_cm <= total_cm", name="ck_roll_reserved_within_total"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    material_id: Mapped[str] = mapped_column(
        ForeignKey("materials.id"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    total_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    reserved_cm: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    market: Mapped[str] = mapped_column(String(16), nullable=False)
    order_type: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    total_amount_minor: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_error: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items: Mapped[list[OrderItemRow]] = relationship(
        back_populates="order",
        order_by="OrderItemRow.position",
        cascade="all, delete-orphan",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("meters_cm > 0", name="ck_item_meters_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    material_id: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    sales_model: Mapped[str] = mapped_column(String(16), nullable=False)
    meters_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_minor: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    roll_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    order: Mapped[OrderRow] = relationship(back_populates="items")


class ReservationRow(Base):
    __tablename__ = "stock_reservations"
    __table_args__ = (
        CheckConstraint("meters_cm > 0", name="ck_reservation_meters_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    roll_id: Mapped[str] = mapped_column(
        ForeignKey("fabric_rolls.id"), nullable=False, index=True
    )
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    meters_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
