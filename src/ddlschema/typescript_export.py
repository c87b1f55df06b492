"""TypeScript declarations generated from table designs."""

from __future__ import annotations

import json
import re
from functools import cache
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from jinja2 import Environment, FileSystemLoader, Template

from ddlschema.errors import InternalError, SchemaError, StorageError
from ddlschema.types import DataType

if TYPE_CHECKING:
    from ddlschema.database import Database
    from ddlschema.field import FieldDesign
    from ddlschema.table import TableDesign

logger = getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

TYPESCRIPT_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
# Member names starting like a number literal are rejected in TypeScript enums
NUMERIC_START = re.compile(r"[0-9+\-.]")

TYPESCRIPT_TYPES: dict[DataType, str] = {
    DataType.STRING: "string",
    DataType.BYTE_STRING: "number[]",
    DataType.JSON: "any",
    DataType.SIGNED64: "number",
    DataType.UNSIGNED64: "number",
    DataType.SIGNED32: "number",
    DataType.UNSIGNED32: "number",
    DataType.SIGNED16: "number",
    DataType.UNSIGNED16: "number",
    DataType.FLOAT64: "number",
    DataType.FLOAT32: "number",
    DataType.BOOLEAN: "boolean",
    DataType.BIT: "number",
    DataType.BYTE: "number",
    DataType.SET: "string",
}


class Member(NamedTuple):
    """One property shared by the stored and input interfaces."""

    name: str
    type: str
    stored_optional: bool
    input_optional: bool


class EnumDeclaration(NamedTuple):
    """A generated TypeScript enum."""

    name: str
    members: list[str]


def pascal_case(name: str) -> str:
    """Convert name to PascalCase, splitting on underscores and punctuation."""
    words = [word for word in re.split(r"[^0-9A-Za-z]+", name) if word]
    if not words:
        msg = f"cannot capitalize the empty identifier {name!r}"
        raise InternalError(msg)
    return "".join(word[0].upper() + word[1:] for word in words)


def enum_name(table_title: str, field_title: str) -> str:
    """Name the enum type generated for a table's enum field."""
    return f"{pascal_case(table_title)}{pascal_case(field_title)}Enum"


def quote_name(name: str) -> str:
    """Quote a property or enum member name unless it is a plain identifier."""
    return name if TYPESCRIPT_IDENTIFIER.fullmatch(name) else json.dumps(name)


def enum_members(name: str, labels: tuple[str, ...]) -> list[str]:
    """Render enum labels as member names, in label order.

    Labels that start like a number (``0``, ``-1``, ``.5``) get a ``_``
    prefix, since TypeScript does not allow numeric enum member names.

    Raises:
        InternalError: two labels render to the same member name.

    """
    members: list[str] = []
    for label in labels:
        member = quote_name(f"_{label}" if NUMERIC_START.match(label) else label)
        if member in members:
            msg = f"enum {name} has the member {member} twice"
            raise InternalError(msg)
        members.append(member)
    return members


@cache
def _template() -> Template:
    environment = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=False,  # noqa: S701 - TypeScript output, not HTML
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return environment.get_template("table.ts.jinja")


def _member(
    field_design: FieldDesign,
    table_title: str,
    enums: dict[tuple[str, ...], str],
) -> Member:
    """Build the interface property for a field, registering its enum."""
    if field_design.datatype == DataType.ENUM:
        if field_design.enum_set is None:
            msg = f"Field {field_design.title} does not have an associated enum set"
            raise InternalError(msg)
        # Identical label lists share the first field's enum
        type_name = enums.setdefault(
            tuple(field_design.enum_set),
            enum_name(table_title, field_design.title),
        )
    else:
        type_name = TYPESCRIPT_TYPES[field_design.datatype]

    return Member(
        name=quote_name(field_design.title),
        type=type_name,
        stored_optional=not field_design.required,
        input_optional=not field_design.required or field_design.generated,
    )


def table_to_typescript(table: TableDesign) -> str:
    """Render a table as a stored interface, an input interface and its enums.

    Fields that are not required are optional in both interfaces; generated
    fields are also optional in the input interface, since the server
    assigns them.
    """
    enums: dict[tuple[str, ...], str] = {}
    members = [_member(field_design, table.title, enums) for field_design in table]
    declarations = [
        EnumDeclaration(name, enum_members(name, labels))
        for labels, name in enums.items()
    ]
    return _template().render(
        table=table.title,
        interface=pascal_case(table.title),
        members=members,
        enums=declarations,
    )


def database_to_typescript(database: Database) -> dict[str, str]:
    """Render every table, keyed by the file name it is written to."""
    return {f"{table.title}.ts": table_to_typescript(table) for table in database}


def _write_table(table: TableDesign, path: Path) -> None:
    output = table_to_typescript(table)
    try:
        path.write_text(output, encoding="utf-8")
    except OSError as err:
        msg = f"failed to write {path}: {err.strerror or err}"
        raise StorageError(msg, str(path)) from err


def write_typescript(database: Database, folder: Path) -> list[Path]:
    """Write one ``<table>.ts`` file per table into the folder.

    Every table is attempted even if an earlier one fails; the last error
    is raised once all tables were processed.

    Returns:
        The paths that were written.

    """
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        msg = f"failed to create folder {folder}: {err.strerror or err}"
        raise StorageError(msg, str(folder)) from err

    written: list[Path] = []
    last_error: SchemaError | None = None
    for table in database:
        path = folder / f"{table.title}.ts"
        try:
            _write_table(table, path)
        except SchemaError as err:
            logger.error("Failed to export table %s: %s", table.title, err)
            last_error = err
        else:
            written.append(path)

    if last_error is not None:
        raise last_error
    logger.info("Exported %d tables to %s", len(written), folder)
    return written
