"""CLI commands for equipment: catalog entries, availability, batch duplication."""

from __future__ import annotations

import click

from showgear.domain.exceptions import DomainException
from showgear.infrastructure.bootstrap import (
    batch_duplicate_handler,
    container,
    show_availability_handler,
)


def _parse_ids(raw: str) -> list[int]:
    """Parse '3,7,12' into [3, 7, 12]."""
    ids: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise click.BadParameter(f"Invalid equipment ID '{part}'.")
    return ids


@click.command("add")
@click.option("--name", required=True, help="Equipment name.")
@click.option("--quantity", default=1, type=int, help="Total quantity owned.")
@click.option("--brand", default="", help="Brand.")
@click.option("--model", default="", help="Model.")
@click.option("--serial", "serial_number", default=None, help="Serial number (unique).")
@click.option("--image", "reference_image_id", default=None, type=int, help="Reference image ID.")
def equipment_add(
    name: str,
    quantity: int,
    brand: str,
    model: str,
    serial_number: str | None,
    reference_image_id: int | None,
) -> None:
    """Add an item to the catalog."""
    try:
        item_id = container().catalog.create_item(
            {
                "name": name,
                "total_quantity": quantity,
                "brand": brand,
                "model": model,
                "serial_number": serial_number,
                "reference_image_id": reference_image_id,
            }
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Equipment #{item_id} '{name}' added (quantity {quantity})")


@click.command("list")
def equipment_list() -> None:
    """List the equipment catalog."""
    items = container().catalog.list_all()
    if not items:
        click.echo("No equipment found.")
        return

    click.echo(f"{'ID':>4}  {'Name':<20} {'Serial':<16} {'Qty':>5}")
    click.echo("-" * 50)
    for item in items:
        click.echo(
            f"{item.id:>4}  {item.name:<20} {item.serial_number or '':<16} {item.total_quantity:>5}"
        )


@click.command("availability")
@click.option("--id", "equipment_id", required=True, type=int, help="Equipment ID.")
def equipment_availability(equipment_id: int) -> None:
    """Show how much of an item is still uncommitted."""
    try:
        dto = show_availability_handler().handle(equipment_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Equipment #{dto.equipment_id}  {dto.label}")
    click.echo(f"  {'Total':<12} {dto.total:>6}")
    click.echo(f"  {'Committed':<12} {dto.committed:>6}")
    click.echo(f"  {'Available':<12} {dto.available:>6}")
    click.echo()
    click.echo("  By status (quantity allocated):")
    for status, qty in dto.by_status.items():
        click.echo(f"    {status:<12} {qty:>6}")


@click.command("duplicate")
@click.option("--ids", required=True, help="Source equipment IDs as '1,2,3'.")
@click.option("--count", required=True, type=int, help="Copies per source item (1-50).")
@click.option(
    "--pattern",
    default=None,
    help="Serial number pattern containing {n}.  Defaults to the source serial "
    "for one item, BATCH-{n} for several.",
)
@click.option("--preview", is_flag=True, help="Only show the serial numbers that would be used.")
def equipment_duplicate(ids: str, count: int, pattern: str | None, preview: bool) -> None:
    """Create serial-numbered copies of equipment items."""
    equipment_ids = _parse_ids(ids)
    handler = batch_duplicate_handler()

    try:
        if preview:
            for source_id, serials in handler.preview(equipment_ids, count, pattern).items():
                click.echo(f"#{source_id}: {', '.join(serials)}")
            return

        job = handler.prepare(equipment_ids, count, pattern)
        if pattern is None:
            click.echo(f"Using pattern {job.pattern}")
        with click.progressbar(length=job.total, label="Duplicating") as bar:
            dto = handler.run(job, on_progress=lambda _job: bar.update(1))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Created {len(dto.created)} of {job.total} copies ({dto.progress}%)")
    for created in dto.created:
        click.echo(
            f"  #{created.item_id:<5} {created.serial_number}  (from #{created.source_id})"
        )

    if dto.failures:
        click.echo()
        click.echo(f"{len(dto.failures)} copies failed:")
        for failure in dto.failures:
            click.echo(
                f"  #{failure.source_id} copy {failure.copy_index} "
                f"({failure.serial_number}): {failure.message}"
            )

    if dto.image_copy_failures:
        click.echo()
        click.echo("Reference images not copied:")
        for failure in dto.image_copy_failures:
            click.echo(f"  #{failure.item_id}: {failure.message}")
