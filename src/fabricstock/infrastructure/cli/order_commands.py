"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from fabricstock.application.create_order import CreateOrderHandler
from fabricstock.application.dto import OrderDTO, OrderItemSpec, PaymentCallback
from fabricstock.application.handle_payment_callback import HandlePaymentCallbackHandler
from fabricstock.application.list_orders import ListOrdersHandler
from fabricstock.application.show_order import ShowOrderHandler
from fabricstock.application.transition_order import TransitionOrderHandler
from fabricstock.domain.exceptions import DomainException
from fabricstock.domain.model.order import OrderStatus
from fabricstock.infrastructure.bootstrap import unit_of_work


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'linen-white:2.5@<roll>,cotton:1:custom' into OrderItemSpec list.

    Each item is ``material:meters[:sales_model][@roll_id]``.
    """
    specs: list[OrderItemSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        roll_id = None
        if "@" in entry:
            entry, roll_id = entry.split("@", 1)
            roll_id = roll_id.strip() or None
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'material:meters[:model][@roll]'."
            )
        sales_model = parts[2] if len(parts) == 3 else "meter"
        specs.append(
            OrderItemSpec(
                material_id=parts[0],
                meters=parts[1],
                sales_model=sales_model,
                roll_id=roll_id,
            )
        )
    return specs


@click.command("create")
@click.option("--market", type=click.Choice(["TR", "GLOBAL"], case_sensitive=False), required=True, help="Sales market.")
@click.option("--items", required=True, help="Items as 'material:meters[:model][@roll],...'.")
@click.option("--type", "order_type", type=click.Choice(["standard", "custom"]), default=None, help="Order type (derived from items if omitted).")
def order_create(market: str, items: str, order_type: str | None) -> None:
    """Create a new order."""
    specs = _parse_items(items)
    handler = CreateOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(market=market, item_specs=specs, order_type=order_type)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id} created  (status={dto.status})")
    _display_items(dto)


def _display_items(dto: OrderDTO) -> None:
    click.echo()
    click.echo(f"  {'Item':<24} {'Model':<8} {'Meters':>9} {'Price/m':>13} {'Total':>13}")
    click.echo(f"  {'-'*71}")
    for item in dto.items:
        click.echo(
            f"  {item.description:<24} {item.sales_model:<8} {item.meters:>9} "
            f"{item.unit_price:>13} {item.line_total:>13}"
        )
        if item.roll_id:
            click.echo(f"    cut from roll {item.roll_id}")
    click.echo(f"  {'-'*71}")
    click.echo(f"  {'Order Total':<43} {dto.total:>27}")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id}  (status={dto.status})")
    click.echo(f"Market:   {dto.market} ({dto.currency}), type {dto.order_type}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.payment_reference:
        click.echo(f"Payment:  {dto.payment_reference}")
    if dto.payment_error:
        click.echo(f"Payment error: {dto.payment_error}")
    _display_items(dto)


@click.command("list")
@click.option("--status", type=click.Choice([s.value for s in OrderStatus]), default=None, help="Only orders in this status.")
@click.option("--limit", default=100, show_default=True, help="Maximum orders to show.")
def order_list(status: str | None, limit: int) -> None:
    """List recent orders."""
    try:
        orders = ListOrdersHandler(uow=unit_of_work()).handle(status=status, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'Order':<38} {'Status':<15} {'Type':<9} {'Total':>14}  Created")
    click.echo("-" * 100)
    for o in orders:
        click.echo(f"{o.id:<38} {o.status:<15} {o.order_type:<9} {o.total:>14}  {o.created_at}")


@click.command("transition")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--to", "target", type=click.Choice([s.value for s in OrderStatus]), required=True, help="Target status.")
def order_transition(order_id: str, target: str) -> None:
    """Move an order to another status.

    Shipping consumes the order's reservations; cancelling releases them.
    """
    handler = TransitionOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id, target)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id} is now {dto.status}.")


@click.command("payment-callback")
@click.option("--id", "order_id", required=True, help="Order reference from the gateway.")
@click.option("--outcome", type=click.Choice(["succeeded", "failed"]), required=True, help="Payment outcome.")
@click.option("--payment-id", default=None, help="Gateway payment ID.")
@click.option("--error", "error_message", default=None, help="Gateway error message.")
def order_payment_callback(
    order_id: str,
    outcome: str,
    payment_id: str | None,
    error_message: str | None,
) -> None:
    """Apply a payment gateway outcome to an order."""
    handler = HandlePaymentCallbackHandler(uow=unit_of_work())

    try:
        dto = handler.handle(
            PaymentCallback(
                order_reference=order_id,
                payment_succeeded=outcome == "succeeded",
                payment_id=payment_id,
                error_message=error_message,
            )
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id} is now {dto.status}.")
