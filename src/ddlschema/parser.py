"""Read a MySQL schema dump into a Database design."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path

from ddlschema.database import Database
from ddlschema.errors import ParseError, StorageError
from ddlschema.field import FieldDesign
from ddlschema.lexer import (
    Token,
    TokenKind,
    extract_csl,
    tokenize,
    unwrap_backticks,
    unwrap_parentheses,
)
from ddlschema.table import TableDesign
from ddlschema.types import DataType

logger = getLogger(__name__)

CREATE_TABLE = re.compile(r"\bCREATE\s+TABLE\b", re.IGNORECASE)
COMMENT_MARKERS = ("--", "#", "/*")


@dataclass(frozen=True)
class Outside:
    """Between tables: column lines are not expected."""


@dataclass(frozen=True)
class InsideTable:
    """Inside a CREATE TABLE block: every line describes the open table."""

    table: TableDesign


type ParserState = Outside | InsideTable


def read_schema(schema_path: Path | str, title: str = "Database") -> Database:
    """Read and parse the schema dump at the given path."""
    path = Path(schema_path)
    try:
        schema = path.read_text(encoding="utf-8")
    except OSError as err:
        msg = f"failed to find file <{path}>: {err.strerror or err}"
        raise StorageError(msg, str(path)) from err
    return parse_schema(schema, title)


def parse_schema(schema: str, title: str = "Database") -> Database:
    """Parse schema text into a Database.

    Lines are read in order. A ``CREATE TABLE`` line opens a new table (closing
    any open one), a line starting with ``)`` and containing ``;`` closes it,
    and every non-blank line in between is read as a column declaration.
    Any malformed line aborts the whole parse.
    """
    database = Database(title)
    state: ParserState = Outside()

    for number, raw_line in enumerate(schema.splitlines(), start=1):
        try:
            state = advance(state, raw_line.strip(), database)
        except ParseError as err:
            msg = f"line {number}: {err}"
            raise ParseError(msg, raw_line) from err

    if isinstance(state, InsideTable):
        logger.debug("Schema ended inside table %s", state.table.title)
    return database


def advance(state: ParserState, line: str, database: Database) -> ParserState:
    """Apply one trimmed schema line and return the next parser state."""
    if CREATE_TABLE.search(line):
        table = TableDesign(read_table_name(line))
        if table.title in database.tables:
            logger.warning("Table %s is declared twice, keeping the last", table.title)
        database.add(table)
        logger.debug("Reading table %s", table.title)
        return InsideTable(table)

    match state:
        case InsideTable(table) if line.startswith(")") and ";" in line:
            logger.debug("Read %d fields for table %s", len(table), table.title)
            return Outside()
        case InsideTable(table) if line:
            parse_column_line(line, table)
        case _:
            pass
    return state


def read_table_name(line: str) -> str:
    """Read the backtick-quoted table name from a CREATE TABLE line."""
    for token in line.split():
        if token.startswith("`"):
            # `schema`.`table` names the table by its last part
            if "`.`" in token:
                token = "`" + token.rsplit("`.`", 1)[1]
            if title := unwrap_backticks(token):
                return title
            break
    msg = f"no table name found in schema line: {line}"
    raise ParseError(msg, line)


def parse_column_line(line: str, table: TableDesign) -> None:
    """Read one line of a table body into the table.

    Column declarations add a field; primary key, unique key and foreign key
    lines update existing fields. Anything else (indexes, comments) is
    ignored.
    """
    if line.startswith(COMMENT_MARKERS):
        return
    tokens = tokenize(line)
    if not tokens:
        return
    first = tokens[0]

    if first.is_word("primary"):
        read_primary_key(tokens, line, table)
    elif first.is_word("unique"):
        read_unique_key(tokens, table)
    elif first.is_word("constraint", "foreign"):
        read_foreign_key(tokens, table)
    elif first.kind == TokenKind.IDENTIFIER:
        field_design = read_column(tokens, line)
        if field_design.title in table.fields:
            msg = f"field {field_design.title} is declared twice in {table.title}"
            raise ParseError(msg, line)
        table.add(field_design)
    else:
        logger.debug("Ignoring line in table %s: %s", table.title, line)


def read_column(tokens: list[Token], line: str) -> FieldDesign:
    """Build a field from the tokens of a column declaration."""
    title = tokens[0].value.lower()
    if not title:
        msg = f"table field cannot have empty name, line: {line}"
        raise ParseError(msg, line)
    if len(tokens) < 2 or tokens[1].kind != TokenKind.WORD:
        msg = f"failed to read schema, field {title} has no type"
        raise ParseError(msg, line)

    descriptor = tokens[1].value.lower()
    group_end = _group_end(tokens, 2, line)
    span = line[tokens[1].start : tokens[group_end - 1].end]
    has_group = group_end > 2
    flags = [
        token.value.lower()
        for token in tokens[group_end:]
        if token.kind == TokenKind.WORD
    ]

    field_design = FieldDesign(title)
    if descriptor == "int":
        unsigned = "unsigned" in flags
        field_design.datatype = DataType.UNSIGNED64 if unsigned else DataType.SIGNED64
        field_design.bytes = 64
        field_design.increment = "auto_increment" in flags
        field_design.generated = field_design.increment
    elif descriptor == "varchar" and has_group:
        field_design.datatype = DataType.STRING
        size = unwrap_parentheses(span).strip()
        if not size.isdecimal():
            msg = f"schema line {line} has invalid characters in varchar"
            raise ParseError(msg, line)
        field_design.characters = int(size)
    elif descriptor == "enum" and has_group:
        field_design.datatype = DataType.ENUM
        field_design.enum_set = extract_csl(span)
    elif descriptor == "set" and has_group:
        field_design.datatype = DataType.SET
        field_design.set = frozenset(extract_csl(span))
    elif "tinyint" in descriptor:
        field_design.datatype = DataType.BYTE
    elif "json" in descriptor:
        field_design.datatype = DataType.JSON
    else:
        msg = f"failed to read schema, {span.lower()} is not a valid token"
        raise ParseError(msg, line)

    field_design.required = _has_words(flags, "not", "null")
    field_design.primary = _has_words(flags, "primary", "key")
    field_design.unique = "unique" in flags
    return field_design


def read_primary_key(tokens: list[Token], line: str, table: TableDesign) -> None:
    """Mark the columns named by a PRIMARY KEY line as primary."""
    # tokens[1] is the KEY keyword
    columns = _identifiers(tokens[2:])
    if not columns:
        msg = "primary key statement found, but end of line reached"
        raise ParseError(msg, line)
    for column in columns:
        field_design = table.field(column)
        if field_design is None:
            msg = (
                f"corrupt primary key formation: {column} does not exist "
                f"in table {table.title}"
            )
            raise ParseError(msg, line)
        field_design.primary = True


def read_unique_key(tokens: list[Token], table: TableDesign) -> None:
    """Mark the column of a single-column UNIQUE KEY line as unique."""
    opening = _index_of(tokens, TokenKind.LPAREN)
    if opening is None:
        return
    columns = _identifiers(tokens[opening:])
    if len(columns) != 1:
        return
    if field_design := table.field(columns[0]):
        field_design.unique = True
    else:
        logger.warning("Unique key on unknown field %s in %s", columns[0], table.title)


def read_foreign_key(tokens: list[Token], table: TableDesign) -> None:
    """Record the referenced table on the columns of a FOREIGN KEY line."""
    foreign = next((i for i, t in enumerate(tokens) if t.is_word("foreign")), None)
    references = next(
        (i for i, t in enumerate(tokens) if t.is_word("references")),
        None,
    )
    if foreign is None or references is None or references < foreign:
        return
    target = next(
        (t.value for t in tokens[references:] if t.kind == TokenKind.IDENTIFIER),
        None,
    )
    if target is None:
        return
    for column in _identifiers(tokens[foreign:references]):
        if field_design := table.field(column):
            field_design.foreign = target
        else:
            logger.warning("Foreign key on unknown field %s in %s", column, table.title)


def _group_end(tokens: list[Token], start: int, line: str) -> int:
    """Return the index after a parenthesized group starting at ``start``."""
    if start >= len(tokens) or tokens[start].kind != TokenKind.LPAREN:
        return start
    closing = _index_of(tokens[start:], TokenKind.RPAREN)
    if closing is None:
        msg = f"could not unwrap parenthesis, line {line} had no end"
        raise ParseError(msg, line)
    return start + closing + 1


def _index_of(tokens: list[Token], kind: TokenKind) -> int | None:
    return next((i for i, token in enumerate(tokens) if token.kind == kind), None)


def _identifiers(tokens: list[Token]) -> list[str]:
    """Collect the lower-cased identifiers of the first parenthesized list."""
    names: list[str] = []
    for token in tokens:
        if token.kind == TokenKind.IDENTIFIER:
            names.append(token.value.lower())
        elif token.kind == TokenKind.RPAREN:
            break
    return names


def _has_words(words: list[str], *sequence: str) -> bool:
    """Check whether the words contain the sequence consecutively."""
    size = len(sequence)
    return any(
        tuple(words[i : i + size]) == sequence for i in range(len(words) - size + 1)
    )
