"""Field designs and the extraction of typed values from JSON."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import assert_never

from ddlschema.casting import (
    decimal_places,
    digit_count,
    float32_repr,
    json_float,
    json_integer,
    narrow_float32,
    narrow_integer,
)
from ddlschema.errors import (
    BoundError,
    CastError,
    DomainError,
    InternalError,
    NarrowingError,
    ValidationError,
)
from ddlschema.types import SIGNED_TYPES, DataType, DataTypeValue


@lru_cache(maxsize=256)
def compile_regex(pattern: str) -> re.Pattern[str]:
    """Compile a field's regex restriction once per pattern."""
    return re.compile(pattern)


@dataclass
class FieldDesign:
    """Describes one column of a table and the values it accepts.

    ``enum_set`` is only set for ``DataType.ENUM`` fields and ``set`` only for
    ``DataType.SET`` fields. The set holds lower-case members.
    """

    title: str
    datatype: DataType = DataType.STRING
    bytes: int | None = None
    characters: int | None = None
    decimals: int | None = None
    regex: str | None = None
    primary: bool = False
    unique: bool = False
    required: bool = False
    foreign: str | None = None
    increment: bool = False
    generated: bool = False
    enum_set: list[str] | None = None
    set: frozenset[str] | None = None

    def __str__(self) -> str:
        """Render the field as ``title (datatype)``."""
        return f"{self.title} ({self.datatype})"

    def check_consistency(self) -> None:
        """Check that enum labels and set members belong to their datatype.

        ``enum_set`` must be present exactly for enum fields and ``set``
        exactly for set fields.

        Raises:
            InternalError: a field carries the wrong kind of domain data.

        """
        is_enum = self.datatype == DataType.ENUM
        if is_enum and self.enum_set is None:
            msg = f"Internal error: enum field {self.title} has no enum attached!"
            raise InternalError(msg)
        if not is_enum and self.enum_set is not None:
            msg = f"Internal error: {self} has an enum attached but is not an enum!"
            raise InternalError(msg)
        is_set = self.datatype == DataType.SET
        if is_set and self.set is None:
            msg = f"Internal error: set field {self.title} has no set attached!"
            raise InternalError(msg)
        if not is_set and self.set is not None:
            msg = f"Internal error: {self} has a set attached but is not a set!"
            raise InternalError(msg)

    def extract(self, raw_value: object) -> DataTypeValue:
        """Test a JSON value against this field's design and return it typed.

        Raises:
            CastError: the JSON value has the wrong shape for the datatype.
            NarrowingError: a number does not fit the declared width.
            BoundError: a length, byte, digit or regex restriction failed.
            DomainError: an enum index or set member is not allowed.
            InternalError: the field itself was built inconsistently.

        """
        self.check_consistency()
        extracted: object
        match self.datatype:
            case DataType.STRING:
                text = self._cast(raw_value, str)
                self._test_length(len(text))
                self._test_byte_length(len(text.encode()))
                self._test_regex(text)
                extracted = text
            case DataType.BYTE_STRING:
                items = self._cast(raw_value, list)
                byte_string = bytes(
                    self._narrow(self._integer(item, signed=False), DataType.BYTE)
                    for item in items
                )
                self._test_byte_length(len(byte_string), "Bytestring")
                extracted = byte_string
            case DataType.JSON:
                extracted = dict(self._cast(raw_value, Mapping))
            case (
                DataType.SIGNED64
                | DataType.UNSIGNED64
                | DataType.SIGNED32
                | DataType.UNSIGNED32
                | DataType.SIGNED16
                | DataType.UNSIGNED16
                | DataType.BYTE
            ):
                number = self._integer(
                    raw_value,
                    signed=self.datatype in SIGNED_TYPES,
                )
                number = self._narrow(number, self.datatype)
                self._test_digits(str(number))
                extracted = number
            case DataType.FLOAT64:
                double = self._float(raw_value)
                self._test_digits(repr(double))
                extracted = double
            case DataType.FLOAT32:
                single = self._float32(self._float(raw_value))
                self._test_digits(float32_repr(single))
                extracted = single
            case DataType.BOOLEAN:
                extracted = self._cast(raw_value, bool)
            case DataType.BIT:
                extracted = self._bit(raw_value)
            case DataType.ENUM:
                extracted = self._enum(raw_value)
            case DataType.SET:
                extracted = self._set_member(raw_value)
            case _:
                assert_never(self.datatype)
        return DataTypeValue(self.datatype, extracted)

    def _error[E: ValidationError](self, error: type[E], message: str) -> E:
        """Build a validation error tagged with this field."""
        return error(message, self.title, self.datatype)

    def _cast[T](self, raw_value: object, kind: type[T]) -> T:
        """Check the JSON shape of a value."""
        if kind is not bool and isinstance(raw_value, bool):
            raise self._cast_error()
        if not isinstance(raw_value, kind):
            raise self._cast_error()
        return raw_value

    def _cast_error(self) -> CastError:
        return self._error(
            CastError,
            f"Field {self.title} is not of type {self.datatype}. (JSON cast failed).",
        )

    def _integer(self, raw_value: object, *, signed: bool) -> int:
        try:
            return json_integer(raw_value, signed=signed)
        except TypeError as err:
            raise self._cast_error() from err

    def _float(self, raw_value: object) -> float:
        try:
            return json_float(raw_value)
        except TypeError as err:
            raise self._cast_error() from err

    def _narrow(self, value: int, datatype: DataType) -> int:
        """Narrow an integer to the given width or fail."""
        try:
            return narrow_integer(value, datatype)
        except OverflowError as err:
            raise self._error(
                NarrowingError,
                f"Field {self.title} is over the byte limit for type "
                f"{self.datatype}: {err}.",
            ) from err

    def _float32(self, value: float) -> float:
        try:
            return narrow_float32(value)
        except OverflowError as err:
            raise self._error(
                NarrowingError,
                f"Field {self.title} is over the byte limit for type "
                f"{self.datatype}: {err}.",
            ) from err

    def _test_length(self, length: int) -> None:
        """Test a character or digit length against ``characters``."""
        if self.characters is not None and length > self.characters:
            raise self._error(
                BoundError,
                f"Field {self.title} is over the size limit of {self.characters}. "
                f"(Size: {length}).",
            )

    def _test_byte_length(self, length: int, label: str = "Field") -> None:
        if self.bytes is not None and length > self.bytes:
            raise self._error(
                BoundError,
                f"{label} {self.title} is over the byte limit of {self.bytes}. "
                f"(Bytes: {length}).",
            )

    def _test_digits(self, text: str) -> None:
        """Test the digit count and decimal places of a number's text."""
        self._test_length(digit_count(text))
        places = decimal_places(text)
        if self.decimals is not None and places > self.decimals:
            raise self._error(
                BoundError,
                f"Field {self.title} has {places} decimal places; "
                f"the limit is {self.decimals}.",
            )

    def _test_regex(self, text: str) -> None:
        if self.regex is None:
            return
        try:
            pattern = compile_regex(self.regex)
        except re.error as err:
            msg = f"Field {self.title} has an invalid regex {self.regex!r}: {err}"
            raise InternalError(msg) from err
        if pattern.fullmatch(text) is None:
            raise self._error(
                BoundError,
                f"Field {self.title} failed to match the regex restriction "
                f"of {self.regex}.",
            )

    def _bit(self, raw_value: object) -> int:
        bit = self._integer(raw_value, signed=False)
        if bit not in (0, 1):
            raise self._error(
                BoundError,
                f"Expected {self.title} to be a bit (0 or 1), but got {bit}.",
            )
        return self._narrow(bit, DataType.BIT)

    def _enum(self, raw_value: object) -> int:
        index = self._narrow(self._integer(raw_value, signed=False), DataType.ENUM)
        if self.enum_set is None:
            msg = f"Internal error: enum field {self.title} has no enum attached!"
            raise InternalError(msg)
        if index >= len(self.enum_set):
            raise self._error(
                DomainError,
                f"Expected {index} to be within the enum range "
                f"0..{len(self.enum_set)} of field {self.title}.",
            )
        return index

    def _set_member(self, raw_value: object) -> str:
        member = self._cast(raw_value, str).lower()
        if self.set is None:
            msg = f"Internal error: set field {self.title} has no set attached!"
            raise InternalError(msg)
        if member not in self.set:
            raise self._error(
                DomainError,
                f"Value {member} is not an element of the set of field {self.title}.",
            )
        return member
