"""CLI commands for productions (shows)."""

from __future__ import annotations

import click

from showgear.domain.exceptions import DomainException
from showgear.domain.model.equipment import Production
from showgear.infrastructure.bootstrap import container


@click.command("add")
@click.option("--name", required=True, help="Production name.")
@click.option("--date", default="", help="Opening date (YYYY-MM-DD).")
@click.option("--venue", default="", help="Venue name.")
def production_add(name: str, date: str, venue: str) -> None:
    """Register a production."""
    try:
        created = container().productions.add(
            Production(id=None, name=name, date=date, venue=venue)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Production #{created.id} '{created.name}' added")


@click.command("list")
def production_list() -> None:
    """List productions."""
    productions = container().productions.list_all()
    if not productions:
        click.echo("No productions found.")
        return

    click.echo(f"{'ID':>4}  {'Name':<30} {'Date':<12} {'Venue':<20}")
    click.echo("-" * 70)
    for p in productions:
        click.echo(f"{p.id:>4}  {p.name:<30} {p.date:<12} {p.venue:<20}")
