"""Validation CLI command."""

from __future__ import annotations

import click
from rich.console import Console

from linkweave.cli.main import Context, pass_context

console = Console()


@click.command()
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on warnings",
)
@click.option(
    "--check-data",
    is_flag=True,
    help="Validate that all entity references in the data file resolve",
)
@pass_context
def validate(ctx: Context, strict: bool, check_data: bool) -> None:
    """
    Validate registry and data declarations.

    Checks for schema compliance, unknown relationship targets and
    dangling entity references.

    Examples:

        # Basic validation
        linkweave validate

        # Strict validation including the data file
        linkweave validate --strict --check-data
    """
    errors: list[str] = []
    warnings: list[str] = []
    registry = None
    store = None

    console.print("[bold]Validating registry...[/bold]")
    try:
        registry = ctx.registry
        console.print(f"  [green]✓[/green] Registry loaded: {len(registry)} types")
    except Exception as e:
        errors.append(f"Registry validation failed: {e}")
        console.print(f"  [red]✗[/red] Registry validation failed: {e}")

    if registry is not None:
        for descriptor in registry:
            if not descriptor.attributes:
                warnings.append(f"Type '{descriptor.type_name}' declares no attributes")
            if not registry.referencing(descriptor.type_name) and not descriptor.relationships:
                warnings.append(f"Type '{descriptor.type_name}' is not connected to any other type")

    if check_data and registry is not None:
        console.print("[bold]Validating data...[/bold]")
        try:
            store = ctx.store
            console.print(f"  [green]✓[/green] Data loaded: {len(store)} entities")
        except Exception as e:
            errors.append(f"Data validation failed: {e}")
            console.print(f"  [red]✗[/red] Data validation failed: {e}")

    if store is not None:
        console.print("[bold]Checking entity references...[/bold]")
        reference_errors = store.validate()
        if reference_errors:
            for err in reference_errors:
                errors.append(err)
                console.print(f"  [red]✗[/red] {err}")
        else:
            console.print("  [green]✓[/green] All references resolve")

    # Summary
    console.print("\n[bold]Validation Summary[/bold]")
    console.print(f"  Errors: {len(errors)}")
    console.print(f"  Warnings: {len(warnings)}")

    if errors:
        console.print("\n[red bold]Validation failed[/red bold]")
        for err in errors:
            console.print(f"  [red]•[/red] {err}")
        raise SystemExit(1)

    if warnings and strict:
        console.print("\n[yellow bold]Validation failed (strict mode)[/yellow bold]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")
        raise SystemExit(1)

    if warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")

    console.print("\n[green bold]Validation passed[/green bold]")
