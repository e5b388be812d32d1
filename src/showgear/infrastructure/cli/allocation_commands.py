"""CLI commands for equipment reservations."""

from __future__ import annotations

import click

from showgear.domain.exceptions import ConflictError, DomainException
from showgear.domain.model.reservation import Reservation, ReservationStatus
from showgear.domain.model.validation import ValidationIssue, ValidationResult
from showgear.infrastructure.bootstrap import allocation_service

_STATUS_CHOICE = click.Choice([s.value for s in ReservationStatus])


def _display_reservation(r: Reservation) -> None:
    """Shared formatting for displaying a reservation."""
    click.echo(f"Reservation #{r.id}  (status={r.status.value})")
    click.echo(f"Equipment:  #{r.equipment_id}")
    click.echo(f"Production: #{r.production_id}")
    click.echo(f"Quantity:   {r.quantity_allocated} allocated of {r.quantity_needed} needed")
    if r.notes:
        click.echo(f"Notes:      {r.notes}")
    if r.checked_out_at:
        click.echo(f"Checked out: {r.checked_out_at.strftime('%Y-%m-%d %H:%M UTC')}")
    if r.returned_at:
        click.echo(f"Returned:    {r.returned_at.strftime('%Y-%m-%d %H:%M UTC')}")


def _display_issues(issues: list[ValidationIssue], err: bool = False) -> None:
    for issue in issues:
        click.echo(
            f"  {issue.severity.value:<8} [{issue.kind.value}] {issue.message}", err=err
        )


def _report(result: tuple[Reservation, ValidationResult]) -> None:
    reservation, validation = result
    _display_reservation(reservation)
    if validation.warnings:
        click.echo()
        click.echo("Warnings:")
        _display_issues(validation.warnings)


def _reject(exc: ConflictError) -> click.ClickException:
    click.echo("Change rejected:", err=True)
    _display_issues(exc.conflicts + exc.warnings, err=True)
    return click.ClickException(str(exc))


@click.command("create")
@click.option("--equipment", "equipment_id", required=True, type=int, help="Equipment ID.")
@click.option("--production", "production_id", required=True, type=int, help="Production ID.")
@click.option("--quantity", required=True, type=int, help="Quantity needed.")
@click.option("--notes", default="", help="Free-form notes.")
def allocation_create(equipment_id: int, production_id: int, quantity: int, notes: str) -> None:
    """Request equipment for a production."""
    try:
        reservation = allocation_service().create(
            equipment_id=equipment_id,
            production_id=production_id,
            quantity_needed=quantity,
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_reservation(reservation)


@click.command("update")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
@click.option("--needed", type=int, default=None, help="New quantity needed.")
@click.option("--allocated", type=int, default=None, help="New quantity allocated.")
@click.option("--status", type=_STATUS_CHOICE, default=None, help="New status.")
@click.option("--notes", default=None, help="Replace the notes.")
def allocation_update(
    reservation_id: int,
    needed: int | None,
    allocated: int | None,
    status: str | None,
    notes: str | None,
) -> None:
    """Change quantities, status or notes of a reservation."""
    try:
        result = allocation_service().update(
            reservation_id,
            quantity_needed=needed,
            quantity_allocated=allocated,
            status=status,
            notes=notes,
        )
    except ConflictError as exc:
        raise _reject(exc)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _report(result)


@click.command("validate")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
@click.option("--status", required=True, type=_STATUS_CHOICE, help="Proposed status.")
@click.option("--quantity", type=int, default=None, help="Proposed quantity allocated.")
@click.pass_context
def allocation_validate(
    ctx: click.Context, reservation_id: int, status: str, quantity: int | None
) -> None:
    """Check a status change without applying it."""
    try:
        result = allocation_service().validate_status(reservation_id, status, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("valid" if result.valid else "invalid")
    _display_issues(result.conflicts + result.warnings)
    if not result.valid:
        ctx.exit(1)


@click.command("suggest")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
def allocation_suggest(reservation_id: int) -> None:
    """Show which status changes would be accepted now."""
    try:
        statuses = allocation_service().suggested_transitions(reservation_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not statuses:
        click.echo("No further status changes available.")
        return
    for status in statuses:
        click.echo(status.value)


@click.command("checkout")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
def allocation_checkout(reservation_id: int) -> None:
    """Check equipment out to the production."""
    try:
        result = allocation_service().checkout(reservation_id)
    except ConflictError as exc:
        raise _reject(exc)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _report(result)


@click.command("return")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
def allocation_return(reservation_id: int) -> None:
    """Mark checked-out equipment as returned."""
    try:
        result = allocation_service().return_equipment(reservation_id)
    except ConflictError as exc:
        raise _reject(exc)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _report(result)


@click.command("remove")
@click.option("--id", "reservation_id", required=True, type=int, help="Reservation ID.")
def allocation_remove(reservation_id: int) -> None:
    """Remove a requested or returned reservation."""
    try:
        allocation_service().remove(reservation_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reservation #{reservation_id} removed")


@click.command("list")
@click.option("--production", "production_id", required=True, type=int, help="Production ID.")
def allocation_list(production_id: int) -> None:
    """List the equipment reserved for a production."""
    try:
        reservations = allocation_service().list_for_production(production_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not reservations:
        click.echo("No reservations for this production.")
        return

    click.echo(f"{'ID':>4}  {'Equipment':>9} {'Needed':>7} {'Allocated':>10}  {'Status':<12}")
    click.echo("-" * 50)
    for r in reservations:
        click.echo(
            f"{r.id:>4}  {r.equipment_id:>9} {r.quantity_needed:>7} "
            f"{r.quantity_allocated:>10}  {r.status.value:<12}"
        )
