"""Main CLI entry point for linkweave."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from rich.console import Console

from linkweave import __version__
from linkweave.logging import configure_logging

console = Console()

# Default paths (can be overridden)
DEFAULT_REGISTRY = "examples/registry.yml"
DEFAULT_DATA = "examples/data.yml"


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.registry_path: Path | None = None
        self.data_path: Path | None = None
        self.verbose: bool = False
        self._registry: Any = None
        self._store: Any = None

    @property
    def registry(self) -> Any:
        """Lazy-load registry."""
        if self._registry is None:
            from linkweave.core.registry import Registry

            if self.registry_path and self.registry_path.exists():
                self._registry = Registry.load(self.registry_path)
            else:
                raise click.ClickException(f"Registry not found: {self.registry_path}")
        return self._registry

    @property
    def store(self) -> Any:
        """Lazy-load entity data."""
        if self._store is None:
            from linkweave.core.store import InMemoryStore

            if self.data_path and self.data_path.exists():
                self._store = InMemoryStore.load(self.registry, self.data_path)
            else:
                raise click.ClickException(f"Data file not found: {self.data_path}")
        return self._store

    def engine(self, max_depth: int | None = None, base_url: str | None = None) -> Any:
        """Build an engine, applying command-line overrides."""
        from linkweave.engine import HypermediaEngine
        from linkweave.settings import EngineSettings

        settings = EngineSettings().merged_with(self.registry.settings)
        overrides = {k: v for k, v in {"max_depth": max_depth, "base_url": base_url}.items() if v is not None}
        if overrides:
            settings = settings.model_copy(update=overrides)
        return HypermediaEngine(self.registry, settings)


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(version=__version__, prog_name="linkweave")
@click.option(
    "-r",
    "--registry",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_REGISTRY,
    envvar="LINKWEAVE_REGISTRY",
    help="Path to registry YAML file",
)
@click.option(
    "-d",
    "--data",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_DATA,
    envvar="LINKWEAVE_DATA",
    help="Path to entity data YAML file",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error", "critical"]),
    default=None,
    help="Log level (default from LINKWEAVE_LOG_LEVEL or info)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@pass_context
def cli(ctx: Context, registry: Path, data: Path, log_level: str | None, verbose: bool) -> None:
    """
    Linkweave - Hypermedia representations for entity graphs.

    Render registered resource types as HAL or JSON:API documents
    with embedding control and pagination links.
    """
    if verbose:
        log_level = "debug"
    elif log_level is None:
        from linkweave.settings import EngineSettings

        log_level = EngineSettings().log_level
    configure_logging(log_level)
    ctx.registry_path = registry
    ctx.data_path = data
    ctx.verbose = verbose


# Import and register subcommands
from linkweave.cli.render import collection, render
from linkweave.cli.validate import validate

cli.add_command(collection)
cli.add_command(render)
cli.add_command(validate)


@cli.command()
@pass_context
def info(ctx: Context) -> None:
    """Show registry summary."""
    from rich.table import Table

    try:
        registry = ctx.registry
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    console.print(f"\n[bold]Linkweave v{__version__}[/bold]\n")

    console.print("[bold cyan]Registry Summary[/bold cyan]")
    console.print(f"  Path: {ctx.registry_path}")
    console.print(f"  Types: {len(registry)}")
    relationship_count = sum(len(d.relationships) for d in registry)
    console.print(f"  Relationships: {relationship_count}")
    settings = registry.settings.model_dump(exclude_none=True)
    if settings:
        console.print(f"  Settings: {', '.join(f'{k}={v}' for k, v in settings.items())}")

    if len(registry) > 0:
        table = Table(title="Relationships by Cardinality")
        table.add_column("Cardinality", style="cyan")
        table.add_column("Count", justify="right")

        from linkweave.core.schema import Cardinality

        for cardinality in Cardinality:
            count = sum(1 for d in registry for r in d.relationships if r.cardinality == cardinality)
            if count > 0:
                table.add_row(cardinality.value, str(count))

        console.print(table)


@cli.command()
@pass_context
def types(ctx: Context) -> None:
    """List all resource types in registry."""
    from rich.table import Table

    try:
        registry = ctx.registry
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    table = Table(title="Resource Types")
    table.add_column("Type", style="cyan")
    table.add_column("URL")
    table.add_column("Attributes")
    table.add_column("Relationships")

    for descriptor in registry:
        relationships = ", ".join(
            f"{r.name}{'[]' if r.is_many else ''}->{r.target_type}" for r in descriptor.relationships
        )
        table.add_row(
            descriptor.type_name,
            descriptor.url_template,
            ", ".join(descriptor.attributes) or "-",
            relationships or "-",
        )

    console.print(table)


if __name__ == "__main__":
    cli()
