"""JSON snapshots of a parsed Database, so the DDL need not be re-read."""

from __future__ import annotations

import json
from logging import getLogger
from pathlib import Path
from typing import Any, NotRequired, TypedDict, cast

from ddlschema.database import Database
from ddlschema.errors import InternalError, StorageError
from ddlschema.field import FieldDesign
from ddlschema.table import TableDesign
from ddlschema.types import DataType

logger = getLogger(__name__)


class FieldSnapshot(TypedDict):
    """Serialized form of a FieldDesign; absent optional values are omitted."""

    title: str
    datatype: str
    bytes: NotRequired[int]
    characters: NotRequired[int]
    decimals: NotRequired[int]
    regex: NotRequired[str]
    primary: bool
    unique: bool
    required: bool
    foreign: NotRequired[str]
    increment: bool
    generated: bool
    enum_set: NotRequired[list[str]]
    set: NotRequired[list[str]]


class TableSnapshot(TypedDict):
    """Serialized form of a TableDesign."""

    title: str
    fields: list[FieldSnapshot]


class DatabaseSnapshot(TypedDict):
    """Root of a schema snapshot."""

    title: str
    tables: list[TableSnapshot]


def field_to_dict(field_design: FieldDesign) -> FieldSnapshot:
    """Serialize a field, leaving out optional values that are not set."""
    snapshot: dict[str, Any] = {
        "title": field_design.title,
        "datatype": field_design.datatype.value,
        "bytes": field_design.bytes,
        "characters": field_design.characters,
        "decimals": field_design.decimals,
        "regex": field_design.regex,
        "primary": field_design.primary,
        "unique": field_design.unique,
        "required": field_design.required,
        "foreign": field_design.foreign,
        "increment": field_design.increment,
        "generated": field_design.generated,
        "enum_set": field_design.enum_set,
        "set": sorted(field_design.set) if field_design.set is not None else None,
    }
    return cast(
        "FieldSnapshot",
        {key: value for key, value in snapshot.items() if value is not None},
    )


def field_from_dict(snapshot: FieldSnapshot) -> FieldDesign:
    """Deserialize a field, checking its enum and set data against its datatype."""
    set_values = snapshot.get("set")
    enum_set = snapshot.get("enum_set")
    field_design = FieldDesign(
        title=snapshot["title"],
        datatype=DataType(snapshot["datatype"]),
        bytes=snapshot.get("bytes"),
        characters=snapshot.get("characters"),
        decimals=snapshot.get("decimals"),
        regex=snapshot.get("regex"),
        primary=snapshot.get("primary", False),
        unique=snapshot.get("unique", False),
        required=snapshot.get("required", False),
        foreign=snapshot.get("foreign"),
        increment=snapshot.get("increment", False),
        generated=snapshot.get("generated", False),
        enum_set=list(enum_set) if enum_set is not None else None,
        set=frozenset(set_values) if set_values is not None else None,
    )
    field_design.check_consistency()
    return field_design


def database_to_dict(database: Database) -> DatabaseSnapshot:
    """Serialize a database, keeping table and field declaration order."""
    return {
        "title": database.title,
        "tables": [
            {
                "title": table.title,
                "fields": [field_to_dict(field_design) for field_design in table],
            }
            for table in database
        ],
    }


def database_from_dict(snapshot: DatabaseSnapshot) -> Database:
    """Deserialize a database snapshot.

    Raises:
        StorageError: the snapshot is missing keys, has unknown datatypes or
            attaches enum labels or set members to the wrong datatype.

    """
    try:
        database = Database(snapshot["title"])
        for table_snapshot in snapshot["tables"]:
            table = TableDesign(table_snapshot["title"])
            for field_snapshot in table_snapshot["fields"]:
                table.add(field_from_dict(field_snapshot))
            database.add(table)
    except (KeyError, TypeError, ValueError, InternalError) as err:
        msg = f"corrupt schema snapshot: {err!r}"
        raise StorageError(msg) from err
    return database


def dumps_database(database: Database) -> str:
    """Render a database snapshot as indented JSON."""
    return json.dumps(database_to_dict(database), indent=2)


def loads_database(text: str) -> Database:
    """Read a database snapshot from JSON text."""
    try:
        snapshot = json.loads(text)
    except json.JSONDecodeError as err:
        msg = f"schema snapshot is not valid JSON: {err}"
        raise StorageError(msg) from err
    return database_from_dict(snapshot)


def save_database(database: Database, snapshot_path: Path | str) -> Path:
    """Save a database snapshot for quick loading, creating parent folders."""
    path = Path(snapshot_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dumps_database(database), encoding="utf-8")
    except OSError as err:
        msg = f"failed to write snapshot <{path}>: {err.strerror or err}"
        raise StorageError(msg, str(path)) from err
    logger.info("Saved schema snapshot of %d tables to %s", len(database), path)
    return path


def load_database(snapshot_path: Path | str) -> Database:
    """Load a database snapshot saved by ``save_database``."""
    path = Path(snapshot_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as err:
        msg = f"failed to find file <{path}>: {err.strerror or err}"
        raise StorageError(msg, str(path)) from err
    try:
        database = loads_database(text)
    except StorageError as err:
        msg = f"{path}: {err}"
        raise StorageError(msg, str(path)) from err
    logger.info("Loaded schema snapshot of %d tables from %s", len(database), path)
    return database
