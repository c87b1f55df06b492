"""Datatype tags and extracted values for schema fields."""

from __future__ import annotations

from enum import StrEnum, auto
from typing import Any, NamedTuple


class DataType(StrEnum):
    """Closed set of column types a field can be declared with."""

    STRING = auto()
    BYTE_STRING = auto()
    JSON = auto()
    SIGNED64 = auto()
    UNSIGNED64 = auto()
    SIGNED32 = auto()
    UNSIGNED32 = auto()
    SIGNED16 = auto()
    UNSIGNED16 = auto()
    FLOAT64 = auto()
    FLOAT32 = auto()
    BOOLEAN = auto()
    BIT = auto()
    BYTE = auto()
    ENUM = auto()
    SET = auto()


class IntegerRange(NamedTuple):
    """Inclusive bounds of an integer datatype."""

    minimum: int
    maximum: int

    def __contains__(self, value: object) -> bool:
        """Check whether an int lies within the bounds."""
        return isinstance(value, int) and self.minimum <= value <= self.maximum


SIGNED64_RANGE = IntegerRange(-(2**63), 2**63 - 1)
UNSIGNED64_RANGE = IntegerRange(0, 2**64 - 1)

# Ranges used when narrowing a 64-bit JSON integer into the declared width
INTEGER_RANGES: dict[DataType, IntegerRange] = {
    DataType.SIGNED64: SIGNED64_RANGE,
    DataType.UNSIGNED64: UNSIGNED64_RANGE,
    DataType.SIGNED32: IntegerRange(-(2**31), 2**31 - 1),
    DataType.UNSIGNED32: IntegerRange(0, 2**32 - 1),
    DataType.SIGNED16: IntegerRange(-(2**15), 2**15 - 1),
    DataType.UNSIGNED16: IntegerRange(0, 2**16 - 1),
    DataType.BYTE: IntegerRange(0, 2**8 - 1),
    DataType.BIT: IntegerRange(0, 2**8 - 1),
    DataType.ENUM: IntegerRange(0, 2**32 - 1),
}

SIGNED_TYPES = frozenset(
    (DataType.SIGNED64, DataType.SIGNED32, DataType.SIGNED16),
)


class DataTypeValue(NamedTuple):
    """A value that passed extraction, tagged with the datatype it was checked as.

    Only ``FieldDesign.extract`` produces these; the ``value`` is a plain
    Python object (``str``, ``bytes``, ``int``, ``float``, ``bool`` or ``dict``).
    """

    datatype: DataType
    value: Any
