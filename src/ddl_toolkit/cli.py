"""Command line interface for DDL Toolkit."""

import logging
import sys
from json import JSONDecodeError, dumps, loads
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import App, Parameter
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from ddlschema import (
    DataTypeValue,
    SchemaError,
    ValidationError,
    database_to_sqlalchemy,
    database_to_typescript,
    init,
    read_schema,
    write_typescript,
)
from ddlschema.storage import dumps_database

app = App(help="DDL Toolkit CLI tool")

console = Console()
err_console = Console(stderr=True)

SCHEMA_EXTENSIONS = {".sql", ".ddl", ".txt"}


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def configure_logging(*, verbose: bool) -> None:
    """Send library logs to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def validate_schema_location(schema_location: Path) -> None:
    """Validate that the schema dump exists and looks like a SQL file."""
    if not schema_location.is_file():
        print_error(f"Schema file does not exist: {schema_location}")
        sys.exit(1)
    if schema_location.suffix.lower() not in SCHEMA_EXTENSIONS:
        print_error(
            "Schema file has invalid extension, expected one of: "
            f"{', '.join(sorted(SCHEMA_EXTENSIONS))}",
        )
        sys.exit(1)


def serializer(extracted: dict[str, DataTypeValue]) -> dict[str, object]:
    """Convert extracted values to JSON friendly data."""
    return {
        title: list(item.value) if isinstance(item.value, bytes) else item.value
        for title, item in extracted.items()
    }


@app.command
def schema(
    schema_location: Path,
    fmt: Literal["json", "typescript", "python"] = "json",
    *,
    verbose: bool = False,
) -> None:
    """Parse a MySQL dump and print it as a snapshot, TypeScript or SQLAlchemy."""
    configure_logging(verbose=verbose)
    validate_schema_location(schema_location)
    print_info(f"Source schema: {schema_location}")
    print_info(f"Output format: {fmt}")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=err_console,
        ) as progress:
            progress.add_task("Reading schema...", total=None)
            database = read_schema(schema_location)

            if fmt == "json":
                sys.stdout.write(dumps_database(database))
            elif fmt == "typescript":
                sys.stdout.write("\n".join(database_to_typescript(database).values()))
            elif fmt == "python":
                sys.stdout.write(database_to_sqlalchemy(database))
    except SchemaError as e:
        print_error(str(e))
        sys.exit(1)

    print_success("Schema generation completed successfully")


@app.command
def export(schema_location: Path, folder: Path, *, verbose: bool = False) -> None:
    """Write one TypeScript file per table into a folder."""
    configure_logging(verbose=verbose)
    validate_schema_location(schema_location)

    try:
        database = read_schema(schema_location)
        written = write_typescript(database, folder)
    except SchemaError as e:
        print_error(str(e))
        sys.exit(1)

    for path in written:
        print_info(f"Wrote {path}")
    print_success(f"Exported {len(written)} tables to {folder}")


@app.command
def validate(
    schema_location: Path,
    table: str,
    payload: Path,
    *,
    stored: Annotated[bool, Parameter(help="Validate a stored record.")] = False,
    verbose: bool = False,
) -> None:
    """Validate a JSON payload (an object or a list of objects) against a table."""
    configure_logging(verbose=verbose)
    validate_schema_location(schema_location)

    try:
        document = loads(payload.read_text(encoding="utf-8"))
    except (OSError, JSONDecodeError) as e:
        print_error(f"Cannot read payload {payload}: {e}")
        sys.exit(1)

    try:
        database = read_schema(schema_location)
        extracted = database.validate(table, document, is_input=not stored)
    except ValidationError as e:
        print_error(f"Payload rejected: {e}")
        sys.exit(1)
    except SchemaError as e:
        print_error(str(e))
        sys.exit(1)

    console.print_json(dumps(serializer(extracted)))
    print_success(f"Payload is valid for table {table}")


@app.command(name="init")
def initialize(
    *,
    config: Path | None = None,
    schema_location: Annotated[Path | None, Parameter(name="--schema")] = None,
    reload: bool = False,
    verbose: bool = False,
) -> None:
    """Load or parse the schema, save its snapshot and export its types."""
    configure_logging(verbose=verbose)
    try:
        database = init(config, schema_location, reload_schema=reload)
    except SchemaError as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Initialized {database.title} with {len(database)} tables")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
