"""Checked numeric conversions for JSON values.

Every conversion either returns a value that represents the input exactly
(or, for single precision floats, the nearest representable value) or raises:
``TypeError`` when the JSON value has the wrong shape and ``OverflowError``
when it does not fit the requested width. Nothing is silently truncated.
"""

import math
import struct
from decimal import Decimal

from ddlschema.types import (
    INTEGER_RANGES,
    SIGNED64_RANGE,
    UNSIGNED64_RANGE,
    DataType,
)

FLOAT32 = struct.Struct("<f")


def json_integer(raw_value: object, *, signed: bool) -> int:
    """Read a JSON integer as a signed or unsigned 64-bit number."""
    # bool is an int subclass, but JSON true/false are not numbers
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        msg = f"Cannot convert {type(raw_value).__name__} to integer: {raw_value!r}"
        raise TypeError(msg)
    limits = SIGNED64_RANGE if signed else UNSIGNED64_RANGE
    if raw_value not in limits:
        kind = "signed" if signed else "unsigned"
        msg = f"{raw_value} is not a {kind} 64-bit integer"
        raise TypeError(msg)
    return raw_value


def narrow_integer(value: int, datatype: DataType) -> int:
    """Check that a 64-bit integer fits the width of the given datatype."""
    limits = INTEGER_RANGES[datatype]
    if value not in limits:
        msg = f"{value} is outside {limits.minimum}..={limits.maximum}"
        raise OverflowError(msg)
    return value


def json_float(raw_value: object) -> float:
    """Read a JSON number as a double precision float."""
    if isinstance(raw_value, bool) or not isinstance(raw_value, int | float):
        msg = f"Cannot convert {type(raw_value).__name__} to float: {raw_value!r}"
        raise TypeError(msg)
    value = float(raw_value)
    if not math.isfinite(value):
        msg = f"{raw_value!r} is not a finite number"
        raise TypeError(msg)
    return value


def narrow_float32(value: float) -> float:
    """Round a double to the nearest single precision value.

    Rounding is IEEE 754 round-half-to-even. Finite values too large for
    single precision raise ``OverflowError`` instead of becoming infinity.
    """
    try:
        packed = FLOAT32.pack(value)
    except OverflowError as err:
        msg = f"{value!r} is too large for a 32-bit float"
        raise OverflowError(msg) from err
    narrowed: float = FLOAT32.unpack(packed)[0]
    return narrowed


def float32_repr(value: float) -> str:
    """Return the shortest decimal text that reads back as the same float32."""
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if narrow_float32(float(text)) == value:
            return text
    return repr(value)


def _digit_split(text: str) -> tuple[int, int]:
    """Split decimal text into (integer digits, fractional digits)."""
    _sign, digit_tuple, exponent = Decimal(text).as_tuple()
    digits = list(digit_tuple)
    if not isinstance(exponent, int):
        return 0, 0
    # Zero is one digit however it is written (0, 0.0, -0.0, 0E-7)
    if not any(digits):
        return 1, 0
    # Trailing fractional zeros (1.50, 100.0) do not count
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    if exponent >= 0:
        return len(digits) + exponent, 0
    places = -exponent
    return max(len(digits) - places, 1), places


def digit_count(text: str) -> int:
    """Count the decimal digits of a number, ignoring sign, point and exponent."""
    whole, fraction = _digit_split(text)
    return whole + fraction


def decimal_places(text: str) -> int:
    """Count the digits after the decimal point of a number."""
    return _digit_split(text)[1]
