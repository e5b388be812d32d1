import click

from showgear.infrastructure.cli.allocation_commands import (
    allocation_checkout,
    allocation_create,
    allocation_list,
    allocation_remove,
    allocation_return,
    allocation_suggest,
    allocation_update,
    allocation_validate,
)
from showgear.infrastructure.cli.equipment_commands import (
    equipment_add,
    equipment_availability,
    equipment_duplicate,
    equipment_list,
)
from showgear.infrastructure.cli.production_commands import production_add, production_list
from showgear.infrastructure.config import get_settings
from showgear.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """showgear: production equipment reservations"""
    configure_logging(get_settings())


@cli.group()
def allocation() -> None:
    """Reserve equipment for productions."""


@cli.group()
def equipment() -> None:
    """Manage equipment."""


@cli.group()
def production() -> None:
    """Manage productions."""


# Register subcommands
allocation.add_command(allocation_checkout)
allocation.add_command(allocation_create)
allocation.add_command(allocation_list)
allocation.add_command(allocation_remove)
allocation.add_command(allocation_return)
allocation.add_command(allocation_suggest)
allocation.add_command(allocation_update)
allocation.add_command(allocation_validate)
equipment.add_command(equipment_add)
equipment.add_command(equipment_availability)
equipment.add_command(equipment_duplicate)
equipment.add_command(equipment_list)
production.add_command(production_add)
production.add_command(production_list)
