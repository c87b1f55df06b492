"""Tests for extracting typed values from JSON with field designs."""

import pytest

from ddlschema import (
    BoundError,
    CastError,
    DataType,
    DataTypeValue,
    DomainError,
    FieldDesign,
    InternalError,
    NarrowingError,
    ValidationError,
)
from ddlschema.casting import decimal_places, digit_count

WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
    "holiday",
]


def test_extract_string_within_limit() -> None:
    """Test that a string up to the character limit is accepted."""
    registered = FieldDesign("registered", characters=10)

    assert registered.extract("2021-01-01") == DataTypeValue(
        DataType.STRING,
        "2021-01-01",
    )


def test_extract_string_over_limit() -> None:
    """Test that one character too many is a bound error."""
    registered = FieldDesign("registered", characters=10)

    with pytest.raises(BoundError, match="over the size limit of 10") as excinfo:
        registered.extract("2021-01-001")

    assert excinfo.value.field == "registered"
    assert excinfo.value.datatype == DataType.STRING


def test_extract_string_counts_characters_not_bytes() -> None:
    """Test that characters and bytes are limited separately."""
    assert FieldDesign("name", characters=4).extract("café").value == "café"

    with pytest.raises(BoundError, match="byte limit of 4"):
        FieldDesign("name", bytes=4).extract("café")


def test_extract_string_regex() -> None:
    """Test that the whole string has to match the regex."""
    code = FieldDesign("code", regex="[a-z]+")

    assert code.extract("abc").value == "abc"
    with pytest.raises(BoundError, match="regex restriction"):
        code.extract("abc1")


def test_extract_string_invalid_regex() -> None:
    """Test that a broken regex is reported as an internal error."""
    with pytest.raises(InternalError, match="invalid regex"):
        FieldDesign("code", regex="(").extract("abc")


@pytest.mark.parametrize("raw_value", [5, None, True, ["a"], {"a": 1}])
def test_extract_string_cast_errors(raw_value: object) -> None:
    """Test that non-string JSON values are cast errors."""
    with pytest.raises(CastError, match="is not of type string"):
        FieldDesign("name").extract(raw_value)


def test_extract_byte_string() -> None:
    """Test that a list of byte values becomes bytes."""
    blob = FieldDesign("blob", DataType.BYTE_STRING, bytes=3)

    assert blob.extract([0, 127, 255]) == DataTypeValue(
        DataType.BYTE_STRING,
        b"\x00\x7f\xff",
    )
    with pytest.raises(BoundError, match="Bytestring blob is over the byte limit"):
        blob.extract([1, 2, 3, 4])


@pytest.mark.parametrize(
    ("raw_value", "error"),
    [
        ([256], NarrowingError),
        ([-1], CastError),
        (["a"], CastError),
        ("abc", CastError),
    ],
)
def test_extract_byte_string_errors(
    raw_value: object,
    error: type[ValidationError],
) -> None:
    """Test that only lists of byte sized integers are byte strings."""
    with pytest.raises(error):
        FieldDesign("blob", DataType.BYTE_STRING).extract(raw_value)


def test_extract_json_object() -> None:
    """Test that JSON fields accept objects only."""
    settings = FieldDesign("settings", DataType.JSON)

    assert settings.extract({"theme": "dark"}).value == {"theme": "dark"}
    with pytest.raises(CastError):
        settings.extract(["theme"])


def test_extract_unsigned16_narrowing() -> None:
    """Test that a value over the 16-bit range fails to narrow."""
    port = FieldDesign("port", DataType.UNSIGNED16)

    assert port.extract(100) == DataTypeValue(DataType.UNSIGNED16, 100)
    with pytest.raises(NarrowingError, match="over the byte limit"):
        port.extract(70000)


@pytest.mark.parametrize(
    ("datatype", "valid", "invalid"),
    [
        (DataType.SIGNED64, -(2**63), 2**63),
        (DataType.UNSIGNED64, 2**64 - 1, -1),
        (DataType.SIGNED32, -(2**31), 2**31),
        (DataType.UNSIGNED32, 2**32 - 1, 2**32),
        (DataType.SIGNED16, -(2**15), -(2**15) - 1),
        (DataType.BYTE, 255, 256),
    ],
)
def test_extract_integer_limits(
    datatype: DataType,
    valid: int,
    invalid: int,
) -> None:
    """Test the edges of every integer width."""
    field_design = FieldDesign("number", datatype)

    assert field_design.extract(valid).value == valid
    with pytest.raises((NarrowingError, CastError)):
        field_design.extract(invalid)


@pytest.mark.parametrize("raw_value", [True, 1.5, "1", None])
def test_extract_integer_cast_errors(raw_value: object) -> None:
    """Test that booleans, floats and strings are not integers."""
    with pytest.raises(CastError):
        FieldDesign("count", DataType.SIGNED32).extract(raw_value)


def test_extract_integer_digit_limit() -> None:
    """Test that integer digits count against the character limit."""
    year = FieldDesign("year", DataType.SIGNED32, characters=4)

    assert year.extract(-2024).value == -2024
    with pytest.raises(BoundError):
        year.extract(20240)


def test_extract_float64() -> None:
    """Test that doubles accept JSON ints and floats."""
    price = FieldDesign("price", DataType.FLOAT64, decimals=2)

    assert price.extract(3) == DataTypeValue(DataType.FLOAT64, 3.0)
    assert price.extract(9.99).value == 9.99
    with pytest.raises(BoundError, match="decimal places"):
        price.extract(9.999)


@pytest.mark.parametrize("raw_value", [True, "1.0", float("nan"), float("inf")])
def test_extract_float64_cast_errors(raw_value: object) -> None:
    """Test that non-numbers and non-finite values are rejected."""
    with pytest.raises(CastError):
        FieldDesign("price", DataType.FLOAT64).extract(raw_value)


def test_extract_float32_rounds_to_single_precision() -> None:
    """Test that doubles are rounded to the nearest single precision value."""
    ratio = FieldDesign("ratio", DataType.FLOAT32, decimals=1)

    extracted = ratio.extract(0.1)

    assert extracted.datatype == DataType.FLOAT32
    assert extracted.value != 0.1
    assert extracted.value == pytest.approx(0.1)


def test_extract_float32_overflow() -> None:
    """Test that values beyond single precision fail to narrow."""
    with pytest.raises(NarrowingError):
        FieldDesign("ratio", DataType.FLOAT32).extract(1e39)


def test_extract_boolean() -> None:
    """Test that only JSON true and false are booleans."""
    flag = FieldDesign("flag", DataType.BOOLEAN)

    assert flag.extract(False) == DataTypeValue(DataType.BOOLEAN, False)
    with pytest.raises(CastError):
        flag.extract(1)


def test_extract_bit() -> None:
    """Test that bits are 0 or 1."""
    bit = FieldDesign("bit", DataType.BIT)

    assert bit.extract(1).value == 1
    assert bit.extract(0).value == 0
    with pytest.raises(BoundError, match="to be a bit"):
        bit.extract(2)
    with pytest.raises(CastError):
        bit.extract(True)


def test_extract_enum_index() -> None:
    """Test that an enum of eight labels accepts indexes 0 through 7."""
    day = FieldDesign("day", DataType.ENUM, enum_set=WEEKDAYS)

    assert day.extract(7) == DataTypeValue(DataType.ENUM, 7)
    with pytest.raises(DomainError, match=r"within the enum range 0\.\.8 of field day"):
        day.extract(8)


def test_extract_enum_rejects_labels() -> None:
    """Test that enum values are indexes, not labels."""
    day = FieldDesign("day", DataType.ENUM, enum_set=WEEKDAYS)

    with pytest.raises(CastError):
        day.extract("monday")


def test_extract_enum_over_32_bits() -> None:
    """Test that enum indexes are narrowed to 32 bits first."""
    day = FieldDesign("day", DataType.ENUM, enum_set=WEEKDAYS)

    with pytest.raises(NarrowingError):
        day.extract(2**32)


def test_extract_enum_without_labels() -> None:
    """Test that an enum field without labels is an internal error."""
    with pytest.raises(InternalError, match="no enum attached"):
        FieldDesign("day", DataType.ENUM).extract(0)


def test_extract_set_member() -> None:
    """Test that set members are matched case-insensitively."""
    color = FieldDesign("color", DataType.SET, set=frozenset({"red", "blue"}))

    assert color.extract("Red") == DataTypeValue(DataType.SET, "red")
    with pytest.raises(DomainError, match="not an element of the set"):
        color.extract("green")


def test_extract_set_without_members() -> None:
    """Test that a set field without members is an internal error."""
    with pytest.raises(InternalError, match="no set attached"):
        FieldDesign("color", DataType.SET).extract("red")


def test_field_design_str() -> None:
    """Test the display form of a field."""
    assert str(FieldDesign("email")) == "email (string)"


@pytest.mark.parametrize(
    "field_design",
    [
        FieldDesign("kind", DataType.STRING, enum_set=["a", "b"]),
        FieldDesign("count", DataType.SIGNED32, bytes=32, set=frozenset({"a"})),
        FieldDesign("role", DataType.SET, set=frozenset({"a"}), enum_set=["a"]),
    ],
)
def test_extract_labels_on_wrong_datatype(field_design: FieldDesign) -> None:
    """Test that enum labels or set members on another datatype are rejected."""
    with pytest.raises(InternalError, match="attached but is not"):
        field_design.extract("a")


@pytest.mark.parametrize("raw_value", [0, 0.0, -0.0])
def test_extract_float64_zero_within_digit_limits(raw_value: float) -> None:
    """Test that zero is a single digit without decimal places."""
    field_design = FieldDesign("x", DataType.FLOAT64, characters=1, decimals=0)

    assert field_design.extract(raw_value).value == 0.0


@pytest.mark.parametrize(
    ("text", "digits", "places"),
    [
        ("0", 1, 0),
        ("0.0", 1, 0),
        ("-0.0", 1, 0),
        ("0E-7", 1, 0),
        ("1.50", 2, 1),
        ("100.0", 3, 0),
        ("0.25", 3, 2),
    ],
)
def test_digit_count_and_places(text: str, digits: int, places: int) -> None:
    """Test digit counting on the text of a number."""
    assert digit_count(text) == digits
    assert decimal_places(text) == places
