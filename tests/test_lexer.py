"""Tests for the DDL tokenizer and its lexical helpers."""

import pytest

from ddlschema import ParseError
from ddlschema.lexer import (
    TokenKind,
    extract_csl,
    tokenize,
    unwrap_backticks,
    unwrap_parentheses,
)


def test_tokenize_column_declaration() -> None:
    """Test that a column line splits into identifier, words and a group."""
    tokens = tokenize("`email` varchar(110) NOT NULL,")

    assert [token.kind for token in tokens] == [
        TokenKind.IDENTIFIER,
        TokenKind.WORD,
        TokenKind.LPAREN,
        TokenKind.NUMBER,
        TokenKind.RPAREN,
        TokenKind.WORD,
        TokenKind.WORD,
        TokenKind.COMMA,
    ]
    assert tokens[0].value == "email"
    assert tokens[6].is_word("null")


def test_tokenize_unescapes_strings() -> None:
    """Test that doubled and backslash-escaped quotes become plain quotes."""
    tokens = tokenize(r"'it''s' 'don\'t'")

    assert [token.value for token in tokens] == ["it's", "don't"]
    assert all(token.kind == TokenKind.STRING for token in tokens)


def test_tokenize_double_quoted_strings() -> None:
    """Test that double-quoted literals may hold single quotes."""
    tokens = tokenize(r'COMMENT "it' + "'" + r's" "say ""hi""" "a\"b"')

    assert [token.kind for token in tokens[1:]] == [TokenKind.STRING] * 3
    assert [token.value for token in tokens[1:]] == ["it's", 'say "hi"', 'a"b']


def test_tokenize_keeps_positions() -> None:
    """Test that token positions slice back into the scanned text."""
    text = "enum('a','b')"
    tokens = tokenize(text)

    assert text[tokens[0].start : tokens[-1].end] == text


@pytest.mark.parametrize(
    "text",
    ["`unterminated int", "enum('a,'b)x'", 'COMMENT "abc'],
)
def test_tokenize_rejects_unterminated_quotes(text: str) -> None:
    """Test that an opening quote without its partner is a parse error."""
    with pytest.raises(ParseError):
        tokenize(text)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("I wrapped (`this`)...", "this"),
        ("``", ""),
        ("`e`", "e"),
        ("`user`.`id`", "user"),
    ],
)
def test_unwrap_backticks(token: str, expected: str) -> None:
    """Test that the first backtick pair is unwrapped."""
    assert unwrap_backticks(token) == expected


def test_unwrap_backticks_without_backticks() -> None:
    """Test the error for a token without any backtick."""
    with pytest.raises(ParseError, match="does not match the format"):
        unwrap_backticks("plain")


def test_unwrap_backticks_without_closing_backtick() -> None:
    """Test the error for a token with a single backtick."""
    with pytest.raises(ParseError, match="does not have two instances"):
        unwrap_backticks("`half")


def test_unwrap_parentheses() -> None:
    """Test that the group content is returned lower-cased."""
    assert unwrap_parentheses("VARCHAR(110)") == "110"
    assert unwrap_parentheses("ENUM('A','B')") == "'a','b'"


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("varchar", "had no start"),
        ("varchar(110", "had no end"),
        ("varchar)110(", "invalid parenthesis"),
    ],
)
def test_unwrap_parentheses_errors(text: str, reason: str) -> None:
    """Test that malformed groups are rejected."""
    with pytest.raises(ParseError, match=reason):
        unwrap_parentheses(text)


def test_extract_csl_strips_quotes_and_lowercases() -> None:
    """Test that quoted labels lose their quotes and keep inner commas."""
    assert extract_csl("enum('Red', 'Dark, Blue' ,'x''s')") == [
        "red",
        "dark, blue",
        "x's",
    ]


def test_extract_csl_bare_elements() -> None:
    """Test that unquoted elements are trimmed."""
    assert extract_csl("(one, Two ,three)") == ["one", "two", "three"]


@pytest.mark.parametrize("text", ["(,a)", "(a,,b)", "(a,)", "()"])
def test_extract_csl_rejects_empty_elements(text: str) -> None:
    """Test that empty list elements are a parse error."""
    with pytest.raises(ParseError, match="empty element"):
        extract_csl(text)


@pytest.mark.parametrize("text", ["'a','b'", "('a','b'", "'a')('b'"])
def test_extract_csl_rejects_broken_groups(text: str) -> None:
    """Test that missing or misordered parentheses are a parse error."""
    with pytest.raises(ParseError, match="could not unwrap parenthesis"):
        extract_csl(text)
