"""Shared fixtures."""

import duckdb
import pytest

from relql.schema import TableContextBuilder

from example_schemas import (
    FOUR_TABLE_REFERENCES,
    FakeSchemaReader,
    column,
    create_four_table_database,
    four_tables,
    id_column,
)


@pytest.fixture
def four_table_reader():
    return FakeSchemaReader(four_tables(), references=FOUR_TABLE_REFERENCES)


@pytest.fixture
def table_t_columns():
    """Table t: INT primary key plus a nullable VARCHAR(100)."""
    return [id_column(), column('name', 'VARCHAR(100)')]


@pytest.fixture
def table_t(table_t_columns):
    return TableContextBuilder().build('t', table_t_columns)


@pytest.fixture
def four_table_db():
    conn = create_four_table_database(duckdb.connect(":memory:"))
    yield conn
    conn.close()
