"""SQLAlchemy metadata and model code generated from a parsed schema."""

import keyword
from collections import defaultdict
from re import sub

from sqlalchemy import Column, ForeignKey, MetaData, Table

from ddlschema.database import Database
from ddlschema.field import FieldDesign
from ddlschema.table import TableDesign
from ddlschema.type_conversion import data_type_to_sql, sql_to_python, sql_to_string
from ddlschema.typescript_export import pascal_case

type Imports = dict[str, set[str]]

BASE_CLASS = "Base"


def snake_case(name: str) -> str:
    """Convert name to snake_case, avoiding Python keywords."""
    name = sub("([a-z0-9])([A-Z])|([A-Z])([A-Z][a-z])", r"\1\3_\2\4", name).lower()
    name = sub(r"\W", "_", name)
    if keyword.iskeyword(name) or name[:1].isdigit():
        name = f"{name}_" if keyword.iskeyword(name) else f"_{name}"
    return name


def foreign_target(database: Database, field_design: FieldDesign) -> str | None:
    """Resolve a field's foreign table to ``table.column`` of its primary key."""
    if field_design.foreign is None:
        return None
    target = database.table(field_design.foreign)
    if target is None:
        return None
    primary = [column.title for column in target if column.primary]
    if len(primary) != 1:
        return None
    return f"{target.title}.{primary[0]}"


def table_to_sqlalchemy(
    database: Database,
    table: TableDesign,
    metadata: MetaData,
) -> Table:
    """Build a SQLAlchemy Table for a table design."""
    columns: list[Column[object]] = []
    for field_design in table:
        args: list[object] = [data_type_to_sql(field_design)]
        if target := foreign_target(database, field_design):
            args.append(ForeignKey(target))
        columns.append(
            Column(
                field_design.title,
                *args,
                primary_key=field_design.primary,
                nullable=not field_design.required and not field_design.primary,
                unique=field_design.unique or None,
                autoincrement=field_design.increment or "auto",
            ),
        )
    return Table(table.title, metadata, *columns)


def database_to_metadata(database: Database) -> MetaData:
    """Build SQLAlchemy MetaData holding one Table per table design."""
    metadata = MetaData()
    for table in database:
        table_to_sqlalchemy(database, table, metadata)
    return metadata


def generate_column_definition(
    database: Database,
    field_design: FieldDesign,
    imports: Imports,
) -> str:
    """Generate mapped_column definition for a field."""
    sql_type = data_type_to_sql(field_design)
    type_info = sql_to_python(sql_type)
    if type_info.module != "builtins":
        imports[type_info.module].add(type_info.name)

    python_type = (
        type_info.expression
        if field_design.required or field_design.primary
        else f"{type_info.expression} | None"
    )

    sql_string = sql_to_string(sql_type)
    imports["sqlalchemy"].add(sql_string.split("(")[0])
    args = [f'"{field_design.title}"', sql_string]

    if target := foreign_target(database, field_design):
        imports["sqlalchemy"].add("ForeignKey")
        args.append(f'ForeignKey("{target}")')
    if field_design.primary:
        args.append("primary_key=True")
    if field_design.increment:
        args.append("autoincrement=True")
    if field_design.unique:
        args.append("unique=True")

    imports["sqlalchemy.orm"].update(("Mapped", "mapped_column"))

    column_name = snake_case(field_design.title)
    args_str = ", ".join(args)

    return f"    {column_name}: Mapped[{python_type}] = mapped_column({args_str})"


def generate_class_definition(
    database: Database,
    table: TableDesign,
    imports: Imports,
) -> str:
    """Generate a declarative class for a table with a primary key."""
    class_name = pascal_case(table.title)

    lines = [
        f"class {class_name}({BASE_CLASS}):",
        f'    """Auto-generated model for the {table.title} table."""',
        "",
        f'    __tablename__ = "{table.title}"',
        "",
    ]
    lines.extend(
        generate_column_definition(database, field_design, imports)
        for field_design in table
    )
    return "\n".join(lines)


def generate_table_definition(table: TableDesign, imports: Imports) -> str:
    """Generate SQLAlchemy Table definition for tables without primary keys."""
    table_name = pascal_case(table.title)

    args = [
        f'"{table.title}"',
        f"{BASE_CLASS}.metadata",
    ]

    for field_design in table:
        sql_string = sql_to_string(data_type_to_sql(field_design))
        imports["sqlalchemy"].update(("Column", sql_string.split("(")[0]))
        args.append(
            f'Column("{field_design.title}", {sql_string}, '
            f"nullable={not field_design.required})",
        )

    imports["sqlalchemy"].add("Table")
    args_str = ",\n    ".join(args)

    return f"{table_name} = Table(\n    {args_str},\n)"


def generate_imports(imports: Imports) -> str:
    """Generate import statements from collected imports."""
    lines = [
        f"from {module} import {', '.join(sorted(names))}"
        for module, names in imports.items()
        if names
    ]
    return "\n".join(lines)


def generate_base_class() -> str:
    """Generate the declarative base class definition."""
    return f'''class {BASE_CLASS}(DeclarativeBase):
    """Base class for all generated models."""'''


def database_to_sqlalchemy(database: Database) -> str:
    """Generate SQLAlchemy models for every table in the database."""
    imports: Imports = defaultdict(set)
    imports["__future__"].add("annotations")
    imports["sqlalchemy.orm"].add("DeclarativeBase")

    # Force evaluation before rendering imports, generation fills them in
    models = [
        (
            generate_class_definition(database, table, imports)
            if any(field_design.primary for field_design in table)
            else generate_table_definition(table, imports)
        )
        for table in database
    ]

    parts = (
        f'"""SQLAlchemy models generated from the {database.title} schema."""',
        generate_imports(imports),
        generate_base_class(),
        *models,
    )

    return "\n\n\n".join(parts) + "\n"
