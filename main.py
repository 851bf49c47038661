"""
Schema Loader - command line entry point

Introspects a database catalog and prints the generated entity model.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from dotenv import load_dotenv

from schemaloader.config import AppConfig
from schemaloader.exceptions import SchemaLoaderError
from schemaloader.loader import load_schema
from schemaloader.relationship_inferrer import build_relationship_graph, get_relationship_stats
from schemaloader.report_generator import ReportGenerator

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def parse_inflections(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated RAW=OVERRIDE options."""
    overrides = {}
    for value in values:
        raw, sep, override = value.partition("=")
        if not sep or not raw or not override:
            raise click.BadParameter(f"expected RAW=OVERRIDE, got '{value}'", param_hint="--inflect")
        overrides[raw.strip()] = override.strip()
    return overrides


@click.command()
# Database - defaults are None so .env values still apply
@click.option("--db-type", "-t", default=None, help="postgresql, mysql, sqlserver, sqlite, oracle or generic")
@click.option("--url", default=None, help="Full SQLAlchemy URL (overrides host/port/database/user/password)")
@click.option("--host", "-h", default=None, help="Database host")
@click.option("--port", "-p", default=None, type=int, help="Database port")
@click.option("--database", "-d", default=None, help="Database name, or file path for SQLite")
@click.option("--user", "-u", default=None, help="Database user")
@click.option("--password", "-P", default=None, help="Database password", hide_input=True)
@click.option("--schema", "-s", default=None, help="Schema to introspect")
# Loader
@click.option("--include", default=None, help="Only load tables matching this regex")
@click.option("--exclude", default=None, help="Skip tables matching this regex")
@click.option("--no-relationships", is_flag=True, help="Do not infer relationships")
@click.option("--qualify-schema", is_flag=True, help="Prefix monikers with the schema name")
@click.option("--inflect", "inflections", multiple=True, help="Relation name override RAW=OVERRIDE (repeatable)")
# Output
@click.option("--output", "-o", default="./output", help="Output directory")
@click.option("--json", "write_json", is_flag=True, help="Also write the registry as JSON")
# Environment
@click.option("--env-file", "-e", default=".env", help=".env file path")
# Misc
@click.option("--debug", is_flag=True, help="Trace every generated declaration")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(
    db_type: Optional[str],
    url: Optional[str],
    host: Optional[str],
    port: Optional[int],
    database: Optional[str],
    user: Optional[str],
    password: Optional[str],
    schema: Optional[str],
    include: Optional[str],
    exclude: Optional[str],
    no_relationships: bool,
    qualify_schema: bool,
    inflections: tuple[str, ...],
    output: str,
    write_json: bool,
    env_file: str,
    debug: bool,
    verbose: bool,
):
    """
    Schema Loader - derive an entity model from a database catalog.

    Reads tables, columns and keys, generates one entity per table and
    infers belongs_to / has_many pairs from the foreign keys.
    """
    setup_logging(verbose)

    if Path(env_file).exists():
        load_dotenv(env_file)

    try:
        config = AppConfig.from_args(
            db_type=db_type,
            url=url,
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            output_dir=output,
            schema_name=schema,
            table_include=include,
            table_exclude=exclude,
            infer_relationships=False if no_relationships else None,
            qualify_monikers_with_schema=True if qualify_schema else None,
            inflection_overrides=parse_inflections(inflections) or None,
            debug_logging=True if debug else None,
        )
    except ValidationError as e:
        console.print(f"[bold red]Invalid configuration:[/bold red]\n{e}")
        sys.exit(2)

    if write_json:
        config.output.generate_json = True

    console.print(Panel.fit(
        "[bold blue]Schema Loader[/bold blue]\n"
        "Catalog introspection and entity generation",
        border_style="blue"
    ))
    console.print(f"\n[cyan]Database type:[/cyan] {config.database.db_type}")
    if config.loader.schema_name:
        console.print(f"[cyan]Schema:[/cyan] {config.loader.schema_name}")
    console.print(f"[cyan]Output directory:[/cyan] {config.output.output_dir}\n")

    try:
        result = load_schema(config.database, config.loader)
    except (SchemaLoaderError, ValueError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)

    summary_table = Table(title="Entities", show_header=True)
    summary_table.add_column("Moniker", style="cyan")
    summary_table.add_column("Table", style="green")
    summary_table.add_column("Columns", justify="right")
    summary_table.add_column("Primary key")
    summary_table.add_column("Relationships", justify="right")

    for entity in result.registry.entities():
        summary_table.add_row(
            entity.moniker,
            entity.table.qualified_name,
            str(len(entity.columns)),
            ", ".join(entity.primary_key) or "[yellow]none[/yellow]",
            str(len(entity.relationships)),
        )
    console.print(summary_table)

    stats = get_relationship_stats(build_relationship_graph(result.registry))
    console.print(
        f"\n[green]✓[/green] {result.entity_count} entities, "
        f"{result.relationship_count} relationship declarations, "
        f"{stats['isolated_entities']} isolated, "
        f"{len(result.filtered_tables)} tables filtered"
    )
    if result.inference and result.inference.failures:
        console.print(f"[yellow]⚠ {result.inference.failure_count} relationships could not be declared[/yellow]")
        for failure in result.inference.failures:
            console.print(f"  - {failure.constraint_name} ({failure.table}): {failure.reason}")

    saved_paths = ReportGenerator(config.output).save_all_reports(
        result, database_name=config.database.database or config.database.db_type,
    )
    if saved_paths:
        console.print("\n[bold cyan]Generated files:[/bold cyan]")
        for path in saved_paths.values():
            console.print(f"  📄 {path}")


if __name__ == "__main__":
    main()
