"""Document rendering CLI commands."""

from __future__ import annotations

import click
from rich.console import Console

from linkweave.cli.main import Context, pass_context
from linkweave.core.document import HypermediaDocument
from linkweave.core.errors import HypermediaError

console = Console()

format_option = click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["hal", "jsonapi"]),
    default=None,
    help="Output format (default from settings)",
)
include_option = click.option(
    "--include",
    "-i",
    default="",
    help="Comma-separated relationship paths to embed, e.g. items,items.product",
)
max_depth_option = click.option(
    "--max-depth",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum embedding depth",
)
base_url_option = click.option(
    "--base-url",
    default=None,
    help="Prefix for every generated URL",
)
pretty_option = click.option(
    "--pretty",
    is_flag=True,
    help="Syntax-highlight the output",
)


def emit(document: HypermediaDocument, pretty: bool) -> None:
    if pretty:
        console.print(f"[dim]Content-Type: {document.media_type}[/dim]")
        console.print_json(document.to_json())
    else:
        click.echo(document.to_json(indent=2))


@click.command()
@click.argument("type_name")
@click.argument("entity_id")
@format_option
@include_option
@max_depth_option
@base_url_option
@pretty_option
@pass_context
def render(
    ctx: Context,
    type_name: str,
    entity_id: str,
    output_format: str | None,
    include: str,
    max_depth: int | None,
    base_url: str | None,
    pretty: bool,
) -> None:
    """
    Render a single entity as a hypermedia document.

    Examples:

        # HAL, links only
        linkweave render order 123

        # JSON:API with embedded items and their products
        linkweave render order 123 -f jsonapi -i items.product
    """
    engine = ctx.engine(max_depth=max_depth, base_url=base_url)

    try:
        entity = ctx.store.get(type_name, entity_id)
        if entity is None:
            raise click.ClickException(f"Entity not found: {type_name}#{entity_id}")
        document = engine.render(entity, type_name, include, output_format)
    except (HypermediaError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    emit(document, pretty)


@click.command()
@click.argument("type_name")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Page offset")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Page size")
@format_option
@include_option
@max_depth_option
@base_url_option
@pretty_option
@pass_context
def collection(
    ctx: Context,
    type_name: str,
    offset: int,
    limit: int | None,
    output_format: str | None,
    include: str,
    max_depth: int | None,
    base_url: str | None,
    pretty: bool,
) -> None:
    """
    Render one page of a collection with pagination links.

    Examples:

        linkweave collection item --offset 20 --limit 10 -f jsonapi
    """
    from linkweave.core.pagination import OffsetPage

    engine = ctx.engine(max_depth=max_depth, base_url=base_url)
    limit = limit or engine.settings.page_size

    try:
        entities = ctx.store.all(type_name)
        page = OffsetPage(
            items=entities[offset : offset + limit],
            offset=offset,
            limit=limit,
            total=len(entities),
        )
        document = engine.render_collection(page, type_name, include, output_format)
    except (HypermediaError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    emit(document, pretty)
