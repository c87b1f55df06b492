"""Module for converting field designs into SQLAlchemy types."""

import json
from typing import Any, NamedTuple, assert_never

from sqlalchemy.types import (
    JSON,
    BigInteger,
    Boolean,
    Double,
    Enum,
    Float,
    Integer,
    LargeBinary,
    SmallInteger,
    String,
    TypeEngine,
)

from ddlschema.errors import InternalError
from ddlschema.field import FieldDesign
from ddlschema.types import DataType


class TypeInfo(NamedTuple):
    """Holds information about a SQLAlchemy type for code generation."""

    module: str
    name: str
    expression: str


def data_type_to_sql(field_design: FieldDesign) -> TypeEngine[Any]:
    """Convert a field's datatype and bounds to a SQLAlchemy TypeEngine.

    Examples:
        varchar(110) -> String(110)
        int unsigned -> BigInteger
        enum('a','b') -> Enum("a", "b")

    """
    sql_type: TypeEngine[Any]

    match field_design.datatype:
        case DataType.STRING | DataType.SET:
            sql_type = String(field_design.characters)
        case DataType.BYTE_STRING:
            sql_type = LargeBinary(field_design.bytes)
        case DataType.JSON:
            sql_type = JSON()
        case DataType.SIGNED64 | DataType.UNSIGNED64:
            sql_type = BigInteger()
        case DataType.SIGNED32 | DataType.UNSIGNED32:
            sql_type = Integer()
        case DataType.SIGNED16 | DataType.UNSIGNED16 | DataType.BYTE:
            sql_type = SmallInteger()
        case DataType.FLOAT64:
            sql_type = Double()
        case DataType.FLOAT32:
            sql_type = Float()
        case DataType.BOOLEAN | DataType.BIT:
            sql_type = Boolean()
        case DataType.ENUM:
            if field_design.enum_set is None:
                msg = f"Field {field_design.title} does not have an associated enum set"
                raise InternalError(msg)
            sql_type = Enum(*field_design.enum_set)
        case _:
            assert_never(field_design.datatype)

    return sql_type


def sql_to_string(sql_type: TypeEngine[Any]) -> str:
    """Convert a SQLAlchemy type to its string representation for code generation."""
    match sql_type:
        # Enum subclasses String, so it has to match first
        case Enum():
            values: list[str] = (
                sql_type.enums
            )  # pyright: ignore [reportUnknownMemberType]
            values_string = ", ".join(json.dumps(v) for v in values)
            return f"Enum({values_string})"
        case String() if sql_type.length:
            return f"String({sql_type.length})"
        case LargeBinary() if sql_type.length:
            return f"LargeBinary({sql_type.length})"
        case _:
            return sql_type.__class__.__name__


def sql_to_python(sql_type: TypeEngine[Any]) -> TypeInfo:
    """Get the 3 components needed for code generation from SQLAlchemy type.

    Returns module, import_name, and expression.
    Enums become ``Literal`` hints over their labels, in declaration order.
    """
    match sql_type:
        case Enum():
            values: list[str] = (
                sql_type.enums
            )  # pyright: ignore [reportUnknownMemberType]
            values_string = ", ".join(json.dumps(v) for v in values)
            return TypeInfo(
                module="typing",
                name="Literal",
                expression=f"Literal[{values_string}]",
            )
        case JSON():
            return TypeInfo(module="typing", name="Any", expression="dict[str, Any]")
        case _:
            py_type = sql_type.python_type
            type_name = py_type.__name__
            module_name = py_type.__module__

            return TypeInfo(
                module=module_name,
                name=type_name,
                expression=type_name,
            )


def data_type_to_python(field_design: FieldDesign) -> str:
    """Get the Python type expression for a field, for code generation."""
    return sql_to_python(data_type_to_sql(field_design)).expression
