"""The database schema: an ordered collection of table designs."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ddlschema.errors import UnknownTableError
from ddlschema.table import Payload, TableDesign
from ddlschema.typescript_export import write_typescript
from ddlschema.types import DataTypeValue


@dataclass
class Database:
    """A database schema that JSON payloads can be tested against.

    Tables are kept in the order they were added (declaration order for a
    parsed schema), which is also the order code generation walks them in.
    The schema is read-only once parsing has finished: reloading means
    building a new ``Database`` and swapping the reference.
    """

    title: str = "Database"
    tables: dict[str, TableDesign] = field(default_factory=dict)

    def __str__(self) -> str:
        """Render the database as ``title: (tables)``."""
        return f"{self.title}: ({', '.join(self.tables)})"

    def __iter__(self) -> Iterator[TableDesign]:
        """Iterate over the tables in declaration order."""
        return iter(self.tables.values())

    def __len__(self) -> int:
        """Return the number of tables."""
        return len(self.tables)

    def is_empty(self) -> bool:
        """Return true if the database has no tables."""
        return not self.tables

    def add(self, table: TableDesign) -> None:
        """Add a table at the end, replacing any table with the same title."""
        self.tables.pop(table.title, None)
        self.tables[table.title] = table

    def table(self, title: str) -> TableDesign | None:
        """Get a table by its title."""
        return self.tables.get(title)

    def validate(
        self,
        table_title: str,
        payload: Payload,
        *,
        is_input: bool,
    ) -> dict[str, DataTypeValue]:
        """Validate a payload against one of this database's tables."""
        table = self.table(table_title)
        if table is None:
            raise UnknownTableError(table_title)
        return table.validate(payload, is_input=is_input)

    def export(self, folder: Path | str) -> list[Path]:
        """Write TypeScript declarations for every table into a folder."""
        return write_typescript(self, Path(folder))
