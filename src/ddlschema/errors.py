"""Exception hierarchy for schema parsing, storage and payload validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ddlschema.types import DataType


class SchemaError(Exception):
    """Base exception for everything raised by ddlschema."""


class ParseError(SchemaError, ValueError):
    """Raised when DDL text cannot be read into a schema."""

    def __init__(self, message: str, line: str = "") -> None:
        """Store the offending line (or token) next to the message."""
        super().__init__(message)
        self.line = line


class StorageError(SchemaError, OSError):
    """Raised when a schema file, snapshot or config cannot be read or written."""

    def __init__(self, message: str, path: str = "") -> None:
        """Store the path that was attempted."""
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        """Return the plain message instead of the OSError tuple rendering."""
        return str(self.args[0]) if self.args else ""


class ValidationError(SchemaError, ValueError):
    """Raised when a JSON payload does not satisfy a field's design."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        datatype: DataType | None = None,
    ) -> None:
        """Store the field title and datatype the value was checked against."""
        super().__init__(message)
        self.field = field
        self.datatype = datatype


class CastError(ValidationError, TypeError):
    """Raised when a JSON value has the wrong shape for the field's datatype."""


class BoundError(ValidationError):
    """Raised when a value breaks a length, byte, digit or regex restriction."""


class NarrowingError(ValidationError):
    """Raised when a number does not fit the field's numeric width."""


class DomainError(ValidationError):
    """Raised when an enum index is out of range or a set value is not a member."""


class RequiredFieldError(ValidationError):
    """Raised when a required field is missing from a payload."""


class InternalError(SchemaError):
    """Raised when a schema was built inconsistently (not caused by input)."""


class UnknownTableError(SchemaError, LookupError):
    """Raised when a table is requested that the schema does not declare."""

    def __init__(self, title: str) -> None:
        """Build the message from the missing table title."""
        super().__init__(f"Table {title} does not exist in this database.")
        self.title = title
