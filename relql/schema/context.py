"""Per-table GraphQL type definitions built from column metadata."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import logging
import re

from graphql import InputObjectTypeDefinitionNode, ObjectTypeDefinitionNode

from ..exceptions import PrimaryKeyError, SchemaError
from .introspection import ColumnDescription
from .nodes import (
    field_definition,
    input_object_type_definition,
    input_value_definition,
    named_type,
    non_null_type,
    object_type_definition,
)
from .types import normalize_sql_type, sql_to_graphql_type

logger = logging.getLogger(__name__)

GRAPHQL_NAME = re.compile(r'^[_A-Za-z][_0-9A-Za-z]*$')


def connection_type_name(table_name: str) -> str:
    return f"{table_name}Connection"


def create_input_name(table_name: str) -> str:
    return f"Create{table_name}Input"


def update_input_name(table_name: str) -> str:
    return f"Update{table_name}Input"


@dataclass(frozen=True)
class TableContext:
    """
    Everything generated for one table.

    Holds the entity type, the create and update mutation inputs, and the
    primary key metadata used to key queries and mutations. The key fields
    are None only for tables accepted without a single primary key.
    """
    table_name: str
    table_type_definition: ObjectTypeDefinitionNode
    create_type_definition: InputObjectTypeDefinitionNode
    update_type_definition: InputObjectTypeDefinitionNode
    primary_key_field: Optional[str] = None
    primary_key_type: Optional[str] = None

    @property
    def has_primary_key(self) -> bool:
        return self.primary_key_field is not None

    @property
    def column_names(self) -> List[str]:
        """Column names in declaration order (the create input's fields)."""
        return [f.name.value for f in self.create_type_definition.fields]


class TableContextBuilder:
    """Builds TableContext values from reader output."""

    def __init__(self, strict_primary_keys: bool = True,
                 type_overrides: Optional[Dict[str, str]] = None):
        self.strict_primary_keys = strict_primary_keys
        self.type_overrides = {
            normalize_sql_type(sql_type): scalar
            for sql_type, scalar in (type_overrides or {}).items()
        }

    def build(self, table_name: str, columns: Sequence[ColumnDescription],
              foreign_references: Sequence[str] = ()) -> TableContext:
        """Build the entity, create-input and update-input types for a table.

        Args:
            table_name: Table name, used verbatim as the GraphQL type name
            columns: Column rows in declaration order
            foreign_references: Tables with a foreign key pointing at this one
        """
        self._check_name(table_name, table_name)

        key_columns = [c.field for c in columns if c.is_primary_key]
        primary_key_field = None
        primary_key_type = None

        if len(key_columns) == 1:
            primary_key_field = key_columns[0]
        elif self.strict_primary_keys:
            problem = "has no primary key" if not key_columns else "has a composite primary key"
            raise PrimaryKeyError(
                f"Table '{table_name}' {problem}; expected exactly one primary key column",
                table_name=table_name,
                key_columns=key_columns
            )
        else:
            logger.warning(
                f"Table '{table_name}' has {len(key_columns)} primary key columns; "
                f"get/update/delete operations will not be generated"
            )

        table_fields = []
        create_fields = []
        update_fields = []

        for column in columns:
            self._check_name(table_name, column.field, column=True)
            scalar = sql_to_graphql_type(column.type, self.type_overrides)
            base_type = named_type(scalar)

            if column.is_primary_key or not column.nullable:
                field_type = non_null_type(base_type)
            else:
                field_type = base_type

            # Partial updates: only the key is required
            if column.is_primary_key:
                update_type = non_null_type(named_type(scalar))
            else:
                update_type = named_type(scalar)

            if column.field == primary_key_field:
                primary_key_type = scalar

            table_fields.append(field_definition(column.field, field_type))
            create_fields.append(input_value_definition(column.field, field_type))
            update_fields.append(input_value_definition(column.field, update_type))

        # One-to-many nesting, entity type only
        for referencing_table in foreign_references:
            self._check_name(table_name, referencing_table)
            table_fields.append(
                field_definition(referencing_table, named_type(connection_type_name(referencing_table)))
            )

        return TableContext(
            table_name=table_name,
            table_type_definition=object_type_definition(table_name, table_fields),
            create_type_definition=input_object_type_definition(create_input_name(table_name), create_fields),
            update_type_definition=input_object_type_definition(update_input_name(table_name), update_fields),
            primary_key_field=primary_key_field,
            primary_key_type=primary_key_type,
        )

    @staticmethod
    def _check_name(table_name: str, name: str, column: bool = False) -> None:
        if GRAPHQL_NAME.match(name):
            return
        raise SchemaError(
            f"'{name}' is not a valid GraphQL name",
            table_name=table_name,
            column_name=name if column else None,
            suggestions=[
                "Names must start with a letter or underscore",
                "Only letters, digits and underscores are allowed",
                "Rename the table or column"
            ]
        )
