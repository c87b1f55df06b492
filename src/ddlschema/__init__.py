"""Schema compiler for MySQL dumps: JSON validation and TypeScript types."""

from ddlschema.database import Database
from ddlschema.errors import (
    BoundError,
    CastError,
    DomainError,
    InternalError,
    NarrowingError,
    ParseError,
    RequiredFieldError,
    SchemaError,
    StorageError,
    UnknownTableError,
    ValidationError,
)
from ddlschema.field import FieldDesign
from ddlschema.main import init
from ddlschema.parser import parse_schema, read_schema
from ddlschema.sqlalchemy_export import database_to_metadata, database_to_sqlalchemy
from ddlschema.storage import load_database, save_database
from ddlschema.table import TableDesign
from ddlschema.types import DataType, DataTypeValue
from ddlschema.typescript_export import (
    database_to_typescript,
    table_to_typescript,
    write_typescript,
)

__all__ = [
    "BoundError",
    "CastError",
    "DataType",
    "DataTypeValue",
    "Database",
    "DomainError",
    "FieldDesign",
    "InternalError",
    "NarrowingError",
    "ParseError",
    "RequiredFieldError",
    "SchemaError",
    "StorageError",
    "TableDesign",
    "UnknownTableError",
    "ValidationError",
    "database_to_metadata",
    "database_to_sqlalchemy",
    "database_to_typescript",
    "init",
    "load_database",
    "parse_schema",
    "read_schema",
    "save_database",
    "table_to_typescript",
    "write_typescript",
]
