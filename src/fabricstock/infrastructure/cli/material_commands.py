"""CLI commands for catalog materials."""

from __future__ import annotations

import click

from fabricstock.application.add_material import AddMaterialHandler
from fabricstock.application.list_materials import ListMaterialsHandler
from fabricstock.domain.exceptions import DomainException
from fabricstock.infrastructure.bootstrap import unit_of_work


def _parse_prices(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse ('TR=450', 'GLOBAL=12.5') into {market: amount}."""
    prices: dict[str, str] = {}
    for pair in raw:
        if "=" not in pair:
            raise click.BadParameter(
                f"Invalid price '{pair}'. Expected 'MARKET=AMOUNT'."
            )
        market, amount = pair.split("=", 1)
        prices[market.strip()] = amount.strip()
    return prices


@click.command("add")
@click.option("--name", required=True, help="Material name.")
@click.option("--price", "prices", multiple=True, required=True, help="Price per metre as MARKET=AMOUNT (repeatable).")
@click.option("--composition", default="", help="Fibre composition, e.g. '100% Linen'.")
@click.option("--width", "width_cm", type=int, default=None, help="Roll width in cm.")
def material_add(name: str, prices: tuple[str, ...], composition: str, width_cm: int | None) -> None:
    """Add a material to the catalog."""
    handler = AddMaterialHandler(uow=unit_of_work())

    try:
        material = handler.handle(
            name=name,
            prices=_parse_prices(prices),
            composition=composition,
            width_cm=width_cm,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Material '{material.id}' added")


@click.command("list")
def material_list() -> None:
    """List all materials in the catalog."""
    materials = ListMaterialsHandler(uow=unit_of_work()).handle()

    if not materials:
        click.echo("No materials found.")
        return

    click.echo(f"{'ID':<24} {'Name':<24} {'Prices per metre'}")
    click.echo("-" * 72)
    for m in materials:
        prices = ", ".join(f"{market}: {price}" for market, price in sorted(m.prices.items()))
        click.echo(f"{m.id:<24} {m.name:<24} {prices}")
