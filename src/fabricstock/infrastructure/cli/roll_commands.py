"""CLI commands for fabric rolls."""

from __future__ import annotations

import click

from fabricstock.application.audit_ledger import AuditLedgerHandler
from fabricstock.application.receive_roll import ReceiveRollHandler, ReplenishRollHandler
from fabricstock.application.show_stock import ShowStockHandler
from fabricstock.domain.exceptions import DomainException
from fabricstock.infrastructure.bootstrap import settings, unit_of_work


@click.command("receive")
@click.option("--material", "material_id", required=True, help="Material ID.")
@click.option("--meters", required=True, help="Length of the roll in metres.")
@click.option("--label", default="", help="Free-text roll tag.")
def roll_receive(material_id: str, meters: str, label: str) -> None:
    """Register a newly received roll."""
    handler = ReceiveRollHandler(
        uow=unit_of_work(),
        low_stock_threshold=settings().low_stock_threshold,
    )

    try:
        roll = handler.handle(material_id=material_id, meters=meters, label=label)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Roll {roll.id} received ({roll.total_meters} of {roll.material_id})")


@click.command("replenish")
@click.option("--id", "roll_id", required=True, help="Roll ID.")
@click.option("--meters", required=True, help="Metres to add to the roll.")
def roll_replenish(roll_id: str, meters: str) -> None:
    """Add metres to an existing roll."""
    handler = ReplenishRollHandler(
        uow=unit_of_work(),
        low_stock_threshold=settings().low_stock_threshold,
    )

    try:
        roll = handler.handle(roll_id=roll_id, meters=meters)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Roll {roll.id} now holds {roll.total_meters} ({roll.free_meters} free)")


@click.command("show")
@click.option("--id", "roll_id", required=True, help="Roll ID.")
def roll_show(roll_id: str) -> None:
    """Show one roll's counters."""
    handler = ShowStockHandler(
        uow=unit_of_work(),
        low_stock_threshold=settings().low_stock_threshold,
    )

    try:
        roll = handler.handle_one(roll_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Roll {roll.id}  ({roll.label or 'no label'})")
    click.echo(f"Material: {roll.material_id}")
    click.echo(f"Received: {roll.received_at}")
    click.echo(f"Total:    {roll.total_meters}")
    click.echo(f"Reserved: {roll.reserved_meters}")
    click.echo(f"Free:     {roll.free_meters}{'  LOW STOCK' if roll.low_stock else ''}")


@click.command("list")
def roll_list() -> None:
    """Show current stock levels for every roll."""
    handler = ShowStockHandler(
        uow=unit_of_work(),
        low_stock_threshold=settings().low_stock_threshold,
    )
    overview = handler.handle()

    if not overview.rolls:
        click.echo("No fabric rolls found.")
        return

    click.echo(f"{'Roll':<38} {'Material':<20} {'Total':>10} {'Reserved':>10} {'Free':>10}")
    click.echo("-" * 92)
    for roll in overview.rolls:
        flag = "  !" if roll.low_stock else ""
        click.echo(
            f"{roll.id:<38} {roll.material_id:<20} {roll.total_meters:>10} "
            f"{roll.reserved_meters:>10} {roll.free_meters:>10}{flag}"
        )
    click.echo("-" * 92)
    click.echo(
        f"{'Totals':<59} {overview.total_meters:>10} "
        f"{overview.reserved_meters:>10} {overview.free_meters:>10}"
    )
    click.echo(f"Low stock rolls: {overview.low_stock_count}")


@click.command("audit")
def roll_audit() -> None:
    """Check roll counters against their reservations."""
    findings = AuditLedgerHandler(uow=unit_of_work()).handle()

    if not findings:
        click.echo("Ledger consistent.")
        return

    for finding in findings:
        click.echo(f"{finding.roll_id}: {finding.problem}")
    raise click.ClickException(f"{len(findings)} inconsistencies found")
