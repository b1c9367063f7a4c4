"""Schema introspection and GraphQL type generation."""

from .introspection import (
    ColumnDescription,
    DuckDBSchemaReader,
    KeyRole,
    SchemaReader,
)
from .types import sql_to_graphql_type
from .context import TableContext, TableContextBuilder
from .assembler import SchemaAssembler, build_graphql_schema, print_schema

__all__ = [
    "ColumnDescription",
    "DuckDBSchemaReader",
    "KeyRole",
    "SchemaReader",
    "sql_to_graphql_type",
    "TableContext",
    "TableContextBuilder",
    "SchemaAssembler",
    "build_graphql_schema",
    "print_schema",
]
