"""Tokenizer and lexical helpers for MySQL column declarations."""

import re
from enum import StrEnum, auto
from typing import NamedTuple

from ddlschema.errors import ParseError

# Reusable regex components, one named group per token kind
IDENTIFIER = r"`(?P<identifier>[^`]*)`"  # Captures identifier inside backticks
STRING = r"'(?P<string>(?:[^'\\]|\\.|'')*)'"  # Captures quoted literal content
DQSTRING = r'"(?P<dqstring>(?:[^"\\]|\\.|"")*)"'  # Double-quoted literal content
NUMBER = r"(?P<number>[+-]?\d+(?:\.\d+)?)"
WORD = r"(?P<word>[A-Za-z_][\w$]*)"
LPAREN = r"(?P<lparen>\()"
RPAREN = r"(?P<rparen>\))"
COMMA = r"(?P<comma>,)"
WHITESPACE = r"(?P<whitespace>\s+)"
UNTERMINATED = r"(?P<unterminated>[`'\"].*)"
SYMBOL = r"(?P<symbol>.)"

TOKEN_PATTERN = re.compile(
    "|".join(
        (
            WHITESPACE,
            IDENTIFIER,
            STRING,
            DQSTRING,
            NUMBER,
            WORD,
            LPAREN,
            RPAREN,
            COMMA,
            UNTERMINATED,
            SYMBOL,
        ),
    ),
    re.DOTALL,
)

ESCAPE = re.compile(r"\\(.)")


class TokenKind(StrEnum):
    """Kinds of tokens found in a column declaration."""

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    WORD = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    SYMBOL = auto()


class Token(NamedTuple):
    """A token with its value and its position in the scanned text."""

    kind: TokenKind
    value: str
    start: int
    end: int

    def is_word(self, *words: str) -> bool:
        """Check whether this is a bare word matching one of the given words."""
        return self.kind == TokenKind.WORD and self.value.lower() in words


def tokenize(text: str) -> list[Token]:
    """Split a line of DDL into tokens.

    Backtick identifiers and quoted strings are returned without their
    delimiters. An opening backtick or quote without its closing partner
    raises ``ParseError``.
    """
    tokens: list[Token] = []
    for match in TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup
        if kind == "whitespace":
            continue
        if kind == "unterminated":
            msg = f"string {match.group()} does not have two instances of its quote"
            raise ParseError(msg, text)
        value = match.group(kind)
        if kind == "string":
            value = ESCAPE.sub(r"\1", value.replace("''", "'"))
        elif kind == "dqstring":
            kind = "string"
            value = ESCAPE.sub(r"\1", value.replace('""', '"'))
        tokens.append(Token(TokenKind(kind), value, match.start(), match.end()))
    return tokens


def unwrap_backticks(token: str) -> str:
    """Pull the identifier out of a backtick-wrapped token.

    >>> unwrap_backticks("I wrapped (`this`)...")
    'this'
    """
    first = token.find("`")
    if first == -1:
        msg = f"string slice does not match the format `val`: {token}"
        raise ParseError(msg, token)
    second = token.find("`", first + 1)
    if second == -1:
        msg = f"string {token} does not have two instances of `'s"
        raise ParseError(msg, token)
    return token[first + 1 : second]


def unwrap_parentheses(text: str) -> str:
    """Return the lower-cased content between the first ``(`` and first ``)``."""
    start = text.find("(")
    if start == -1:
        msg = f"could not unwrap parenthesis, line {text} had no start"
        raise ParseError(msg, text)
    end = text.find(")")
    if end == -1:
        msg = f"could not unwrap parenthesis, line {text} had no end"
        raise ParseError(msg, text)
    if end < start:
        msg = f"could not unwrap parenthesis, line {text} has invalid parenthesis"
        raise ParseError(msg, text)
    return text[start + 1 : end].lower()


def extract_csl(text: str) -> list[str]:
    """Extract the comma separated list from the first parenthesized group.

    Elements are trimmed and lower-cased; quoted elements lose their quotes
    and may contain commas. An empty element (``(,a)`` or ``(a,,b)``) or a
    missing closing parenthesis raises ``ParseError``.
    """
    tokens = tokenize(text)
    kinds = [token.kind for token in tokens]
    opening = kinds.index(TokenKind.LPAREN) if TokenKind.LPAREN in kinds else None
    closing = kinds.index(TokenKind.RPAREN) if TokenKind.RPAREN in kinds else None
    if opening is None:
        msg = f"could not unwrap parenthesis, line {text} had no start"
        raise ParseError(msg, text)
    if closing is None:
        msg = f"could not unwrap parenthesis, line {text} had no end"
        raise ParseError(msg, text)
    if closing < opening:
        msg = f"could not unwrap parenthesis, line {text} has invalid parenthesis"
        raise ParseError(msg, text)

    elements: list[str] = []
    group: list[Token] = []
    for token in [*tokens[opening + 1 : closing], None]:
        if token is not None and token.kind != TokenKind.COMMA:
            group.append(token)
            continue
        if not group:
            msg = f"comma separated list in {text} has an empty element"
            raise ParseError(msg, text)
        if len(group) == 1 and group[0].kind == TokenKind.STRING:
            element = group[0].value
        else:
            element = text[group[0].start : group[-1].end]
        elements.append(element.strip().lower())
        group = []
    return elements
