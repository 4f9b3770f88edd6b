import click

from fabricstock.infrastructure.bootstrap import init_database, settings
from fabricstock.infrastructure.cli.material_commands import material_add, material_list
from fabricstock.infrastructure.cli.order_commands import (
    order_create,
    order_list,
    order_payment_callback,
    order_show,
    order_transition,
)
from fabricstock.infrastructure.cli.reservation_commands import (
    reservation_consume,
    reservation_list,
    reservation_release,
    reservation_reserve,
)
from fabricstock.infrastructure.cli.roll_commands import (
    roll_audit,
    roll_list,
    roll_receive,
    roll_replenish,
    roll_show,
)
from fabricstock.utils.logging import configure_logging


@click.group()
def cli() -> None:
    """fabricstock - fabric roll stock and order workflow"""
    configure_logging(settings().log_level)


@cli.group()
def material() -> None:
    """Manage catalog materials."""


@cli.group()
def roll() -> None:
    """Manage fabric rolls."""


@cli.group()
def reservation() -> None:
    """Manage stock reservations."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def db() -> None:
    """Manage the database."""


@db.command("init")
def db_init() -> None:
    """Create the database tables."""
    init_database()
    click.echo("Database initialised.")


# Register subcommands
material.add_command(material_add)
material.add_command(material_list)
roll.add_command(roll_audit)
roll.add_command(roll_list)
roll.add_command(roll_receive)
roll.add_command(roll_replenish)
roll.add_command(roll_show)
reservation.add_command(reservation_consume)
reservation.add_command(reservation_list)
reservation.add_command(reservation_release)
reservation.add_command(reservation_reserve)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_payment_callback)
order.add_command(order_show)
order.add_command(order_transition)
