"""Shared fixtures for the ddlschema tests."""

from pathlib import Path

import pytest

from ddlschema import Database, read_schema

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


@pytest.fixture(name="schema_path")
def sample_schema_path() -> Path:
    """Path to a small MySQL dump with a user and an order table."""
    return SCHEMA_PATH


@pytest.fixture(name="database")
def sample_database(schema_path: Path) -> Database:
    """The sample dump, parsed."""
    return read_schema(schema_path, "shop")
