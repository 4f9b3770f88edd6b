"""CLI commands for stock reservations."""

from __future__ import annotations

import click

from fabricstock.application.consume_reservation import ConsumeReservationHandler
from fabricstock.application.list_reservations import ListReservationsHandler
from fabricstock.application.release_reservation import ReleaseReservationHandler
from fabricstock.application.reserve_stock import ReserveStockHandler
from fabricstock.domain.exceptions import DomainException
from fabricstock.infrastructure.bootstrap import unit_of_work


@click.command("reserve")
@click.option("--order", "order_id", required=True, help="Order ID.")
@click.option("--roll", "roll_id", required=True, help="Roll ID.")
@click.option("--meters", required=True, help="Metres to hold.")
def reservation_reserve(order_id: str, roll_id: str, meters: str) -> None:
    """Hold metres of a roll for an order."""
    handler = ReserveStockHandler(uow=unit_of_work())

    try:
        reservation = handler.handle(order_id=order_id, roll_id=roll_id, meters=meters)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Reservation {reservation.id}: {reservation.meters} of roll "
        f"{reservation.roll_id} held for order {reservation.order_id}"
    )


@click.command("release")
@click.option("--id", "reservation_id", required=True, help="Reservation ID.")
def reservation_release(reservation_id: str) -> None:
    """Release a reservation back to its roll."""
    handler = ReleaseReservationHandler(uow=unit_of_work())

    try:
        reservation = handler.handle(reservation_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reservation {reservation.id} released - {reservation.meters} free again.")


@click.command("consume")
@click.option("--id", "reservation_id", required=True, help="Reservation ID.")
def reservation_consume(reservation_id: str) -> None:
    """Consume a reservation (the roll has been cut)."""
    handler = ConsumeReservationHandler(uow=unit_of_work())

    try:
        reservation = handler.handle(reservation_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reservation {reservation.id} consumed - {reservation.meters} deducted.")


@click.command("list")
@click.option("--order", "order_id", default=None, help="Only reservations of this order.")
@click.option("--roll", "roll_id", default=None, help="Only reservations on this roll.")
@click.option("--limit", default=20, show_default=True, help="Maximum active reservations to show.")
def reservation_list(order_id: str | None, roll_id: str | None, limit: int) -> None:
    """List active reservations, or every reservation of an order or roll."""
    reservations = ListReservationsHandler(uow=unit_of_work()).handle(
        order_id=order_id, roll_id=roll_id, limit=limit
    )

    if not reservations:
        click.echo("No reservations found.")
        return

    click.echo(f"{'Reservation':<38} {'Order':<38} {'Meters':>10} {'Status':<10}")
    click.echo("-" * 99)
    for r in reservations:
        click.echo(f"{r.id:<38} {r.order_id:<38} {r.meters:>10} {r.status:<10}")
