"""Table designs and whole-payload validation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field

from ddlschema.errors import CastError, RequiredFieldError
from ddlschema.field import FieldDesign
from ddlschema.typescript_export import table_to_typescript
from ddlschema.types import DataTypeValue

type Payload = Mapping[str, object] | Sequence[object]


@dataclass
class TableDesign:
    """Describes a table as its fields, kept in declaration order."""

    title: str
    fields: dict[str, FieldDesign] = field(default_factory=dict)

    def __str__(self) -> str:
        """Render the table as ``title: (fields)``."""
        return f"{self.title}: ({', '.join(map(str, self))})"

    def __iter__(self) -> Iterator[FieldDesign]:
        """Iterate over the fields in declaration order."""
        return iter(self.fields.values())

    def __len__(self) -> int:
        """Return the number of fields."""
        return len(self.fields)

    def add(self, field_design: FieldDesign) -> None:
        """Add a field to this table, replacing any field with the same title."""
        self.fields[field_design.title] = field_design

    def field(self, title: str) -> FieldDesign | None:
        """Get a field by its title."""
        return self.fields.get(title)

    def validate(
        self,
        payload: Payload,
        *,
        is_input: bool,
    ) -> dict[str, DataTypeValue]:
        """Test JSON objects against this table's design and extract their values.

        The payload is one JSON object or a list of them (e.g. several form
        fragments). For every field the first object holding its title wins.
        Keys the table does not declare are ignored. When ``is_input`` is true
        the payload is about to be created, so required fields that the
        system generates itself may be missing.

        Returns:
            The extracted values by field title, in declaration order.

        Raises:
            CastError: the payload is neither an object nor a list.

        """
        if isinstance(payload, Mapping):
            objects: Sequence[object] = [payload]
        elif isinstance(payload, Sequence) and not isinstance(payload, str | bytes):
            objects = payload
        else:
            msg = (
                f"Payload for {self.title} must be an object or a list of objects, "
                f"got {type(payload).__name__}."
            )
            raise CastError(msg)

        extracted: dict[str, DataTypeValue] = {}

        for field_design in self:
            for fragment in objects:
                if isinstance(fragment, Mapping) and field_design.title in fragment:
                    extracted[field_design.title] = field_design.extract(
                        fragment[field_design.title],
                    )
                    break
            else:
                if field_design.required and not (is_input and field_design.generated):
                    msg = (
                        f"The {field_design.title} field is required in {self.title}, "
                        "but was not included in the request."
                    )
                    raise RequiredFieldError(
                        msg,
                        field_design.title,
                        field_design.datatype,
                    )

        return extracted

    def export(self) -> str:
        """Render this table as TypeScript interfaces and enums."""
        return table_to_typescript(self)
