"""Assembly of table contexts into a complete GraphQL schema document."""

from typing import Sequence
import logging

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    ObjectTypeDefinitionNode,
    OperationType,
    SchemaDefinitionNode,
    build_ast_schema,
    parse,
    print_ast,
)

from ..exceptions import SchemaError
from .context import TableContext, connection_type_name
from .nodes import (
    field_definition,
    input_value_definition,
    list_type,
    named_type,
    non_null_type,
    object_type_definition,
    operation_type_definition,
    subscribe_directive,
)
from .types import AWS_SCALARS

logger = logging.getLogger(__name__)

# Declarations the managed API provides implicitly
AWS_PRELUDE = "\n".join(
    [f"scalar {scalar}" for scalar in AWS_SCALARS]
    + ["directive @aws_subscribe(mutations: [String]) on FIELD_DEFINITION"]
)


def get_field_name(table_name: str) -> str:
    return f"get{table_name}"


def list_field_name(table_name: str) -> str:
    return f"list{table_name}s"


def create_field_name(table_name: str) -> str:
    return f"create{table_name}"


def update_field_name(table_name: str) -> str:
    return f"update{table_name}"


def delete_field_name(table_name: str) -> str:
    return f"delete{table_name}"


def on_create_field_name(table_name: str) -> str:
    return f"onCreate{table_name}"


class SchemaAssembler:
    """Combines table contexts into one schema document.

    Output order is fixed so repeated builds print identical SDL: per table
    the connection, create input, entity and update input, then Mutation,
    Query, Subscription and the schema definition.
    """

    def assemble(self, contexts: Sequence[TableContext]) -> DocumentNode:
        definitions = []
        for context in contexts:
            definitions.append(self.get_connection_type(context.table_name))
            definitions.append(context.create_type_definition)
            definitions.append(context.table_type_definition)
            definitions.append(context.update_type_definition)

        definitions.append(self.get_mutations(contexts))
        definitions.append(self.get_queries(contexts))
        definitions.append(self.get_subscriptions(contexts))
        definitions.append(self.get_schema_type())

        logger.debug(f"Assembled {len(definitions)} definitions for {len(contexts)} tables")
        return DocumentNode(definitions=tuple(definitions))

    @staticmethod
    def get_connection_type(table_name: str) -> ObjectTypeDefinitionNode:
        """Paginated wrapper ``{items: [T], nextToken: String}`` for a table."""
        return object_type_definition(
            connection_type_name(table_name),
            [
                field_definition('items', list_type(named_type(table_name))),
                field_definition('nextToken', named_type('String')),
            ]
        )

    @staticmethod
    def _key_argument(context: TableContext):
        return input_value_definition(
            context.primary_key_field,
            non_null_type(named_type(context.primary_key_type))
        )

    def get_mutations(self, contexts: Sequence[TableContext]) -> ObjectTypeDefinitionNode:
        """Create, delete and update for each table."""
        fields = []
        for context in contexts:
            name = context.table_name
            if context.has_primary_key:
                fields.append(field_definition(
                    delete_field_name(name),
                    named_type(name),
                    arguments=[self._key_argument(context)]
                ))
            fields.append(field_definition(
                create_field_name(name),
                named_type(name),
                arguments=[input_value_definition(
                    f"create{name}Input",
                    non_null_type(named_type(context.create_type_definition.name.value))
                )]
            ))
            if context.has_primary_key:
                fields.append(field_definition(
                    update_field_name(name),
                    named_type(name),
                    arguments=[input_value_definition(
                        f"update{name}Input",
                        non_null_type(named_type(context.update_type_definition.name.value))
                    )]
                ))
        return object_type_definition('Mutation', fields)

    def get_queries(self, contexts: Sequence[TableContext]) -> ObjectTypeDefinitionNode:
        """Get and list for each table."""
        fields = []
        for context in contexts:
            name = context.table_name
            if context.has_primary_key:
                fields.append(field_definition(
                    get_field_name(name),
                    named_type(name),
                    arguments=[self._key_argument(context)]
                ))
            fields.append(field_definition(
                list_field_name(name),
                named_type(connection_type_name(name)),
                arguments=[input_value_definition('nextToken', named_type('String'))]
            ))
        return object_type_definition('Query', fields)

    def get_subscriptions(self, contexts: Sequence[TableContext]) -> ObjectTypeDefinitionNode:
        """An onCreate subscription for each table, fired by its create mutation."""
        fields = [
            field_definition(
                on_create_field_name(context.table_name),
                named_type(context.table_name),
                directives=[subscribe_directive([create_field_name(context.table_name)])]
            )
            for context in contexts
        ]
        return object_type_definition('Subscription', fields)

    @staticmethod
    def get_schema_type() -> SchemaDefinitionNode:
        return SchemaDefinitionNode(
            description=None,
            directives=(),
            operation_types=(
                operation_type_definition(OperationType.QUERY, 'Query'),
                operation_type_definition(OperationType.MUTATION, 'Mutation'),
                operation_type_definition(OperationType.SUBSCRIPTION, 'Subscription'),
            )
        )


def print_schema(document: DocumentNode) -> str:
    """Render a schema document as SDL text."""
    return print_ast(document)


def build_graphql_schema(document: DocumentNode) -> GraphQLSchema:
    """Build an executable schema from a generated document.

    Raises:
        SchemaError: If the document does not form a valid schema, e.g. two
            tables produce the same type name or a table is named ``Query``
    """
    prelude = parse(AWS_PRELUDE, no_location=True)
    full_document = DocumentNode(definitions=tuple(prelude.definitions) + tuple(document.definitions))
    try:
        return build_ast_schema(full_document)
    except (GraphQLError, TypeError) as e:
        raise SchemaError(
            "Generated schema is not valid GraphQL",
            context={"original_error": str(e)},
            suggestions=[
                "Check for tables whose names collide with generated type names",
                "Check for tables named Query, Mutation or Subscription"
            ]
        ) from e

