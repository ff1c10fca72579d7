"""Command line interface for the Prisma schema toolkit."""

import asyncio
import logging
import sys
from collections.abc import Iterable
from json import dumps
from pathlib import Path
from typing import Literal

from cyclopts import App
from prisma_dsl import (
    AlignFormatter,
    Formatter,
    FormatterError,
    PrismaCliFormatter,
    Schema,
    SchemaError,
    load_definition,
    print_schema,
    read_only_sqlite,
    schema_to_definition,
    sqlite_to_schema,
)
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

app = App(help="Prisma schema toolkit CLI tool")

type FormatterName = Literal["builtin", "prisma"]

console = Console()
err_console = Console(stderr=True)

# Constants
DEFINITION_EXTENSIONS = {".toml", ".json"}
SQLITE_EXTENSIONS = {".sqlite", ".db", ".sqlite3"}


def configure_logging(*, verbose: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def validate_location(location: Path, file_extensions: Iterable[str]) -> None:
    """Validate that the input file exists and has a supported extension."""
    if not location.exists():
        print_error(f"File does not exist: {location}")
        sys.exit(1)
    if location.suffix.lower() not in file_extensions:
        print_error(
            f"File has invalid extension, expected one of: "
            f"{', '.join(sorted(file_extensions))}",
        )
        sys.exit(1)


def create_formatter(name: FormatterName, prisma: Path | None) -> Formatter:
    """Create the formatter selected on the command line."""
    if name == "prisma":
        return PrismaCliFormatter(prisma)
    return AlignFormatter()


def load_schema(definition: Path) -> Schema:
    """Load a definition file, exiting with an error message if it is invalid."""
    validate_location(definition, DEFINITION_EXTENSIONS)
    try:
        return load_definition(definition)
    except SchemaError as e:
        print_error(f"Invalid schema definition: {e}")
        sys.exit(1)


def write_schema(schema: Schema, formatter: Formatter) -> None:
    """Format the schema and write it to stdout."""
    try:
        schema_text = asyncio.run(print_schema(schema, formatter))
    except FormatterError as e:
        print_error(f"Formatting failed: {e}")
        sys.exit(1)
    sys.stdout.write(schema_text)


@app.command
def render(
    definition: Path,
    *,
    formatter: FormatterName = "builtin",
    prisma: Path | None = None,
    verbose: bool = False,
) -> None:
    """Render a TOML or JSON schema definition as Prisma schema code."""
    configure_logging(verbose=verbose)
    print_info(f"Definition: {definition}")

    schema = load_schema(definition)
    write_schema(schema, create_formatter(formatter, prisma))

    print_success("Schema rendered successfully")


@app.command
def pull(
    sqlite_location: Path,
    fmt: Literal["prisma", "json"] = "prisma",
    *,
    formatter: FormatterName = "builtin",
    prisma: Path | None = None,
    verbose: bool = False,
) -> None:
    """Generate a Prisma schema from an existing SQLite database."""
    configure_logging(verbose=verbose)
    validate_location(sqlite_location, SQLITE_EXTENSIONS)
    print_info(f"Source database: {sqlite_location}")
    print_info(f"Output format: {fmt}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
    ) as progress:
        progress.add_task("Reflecting database...", total=None)
        try:
            schema = sqlite_to_schema(read_only_sqlite(sqlite_location))
        except (SQLAlchemyError, SchemaError) as e:
            print_error(f"Reflection failed: {e}")
            sys.exit(1)

    if fmt == "json":
        sys.stdout.write(dumps(schema_to_definition(schema), indent=2))
    elif fmt == "prisma":
        write_schema(schema, create_formatter(formatter, prisma))

    print_success("Schema generation completed successfully")


@app.command
def check(definition: Path, *, verbose: bool = False) -> None:
    """Validate a schema definition and summarize its contents."""
    configure_logging(verbose=verbose)
    schema = load_schema(definition)

    table = Table(title=f"Schema definition {definition.name}")
    table.add_column("Block", style="bold cyan")
    table.add_column("Count", style="bold yellow", justify="right")
    table.add_row("Data sources", str(int(schema.data_source is not None)))
    table.add_row("Generators", str(len(schema.generators)))
    table.add_row("Models", str(len(schema.models)))
    table.add_row("Fields", str(sum(len(model.fields) for model in schema.models)))
    table.add_row("Enums", str(len(schema.enums)))
    console.print(table)

    print_success("Schema definition is valid")


if __name__ == "__main__":
    app()
