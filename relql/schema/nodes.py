"""Constructors for the graphql-core AST nodes used in generated schemas."""

from typing import List, Sequence

from graphql import (
    ArgumentNode,
    DirectiveNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputValueDefinitionNode,
    ListTypeNode,
    ListValueNode,
    NamedTypeNode,
    NameNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    OperationType,
    OperationTypeDefinitionNode,
    StringValueNode,
    TypeNode,
)


def name_node(value: str) -> NameNode:
    return NameNode(value=value)


def named_type(name: str) -> NamedTypeNode:
    return NamedTypeNode(name=name_node(name))


def non_null_type(type_: TypeNode) -> NonNullTypeNode:
    return NonNullTypeNode(type=type_)


def list_type(type_: TypeNode) -> ListTypeNode:
    return ListTypeNode(type=type_)


def field_definition(
    name: str,
    type_: TypeNode,
    arguments: Sequence[InputValueDefinitionNode] = (),
    directives: Sequence[DirectiveNode] = (),
) -> FieldDefinitionNode:
    return FieldDefinitionNode(
        description=None,
        name=name_node(name),
        arguments=tuple(arguments),
        type=type_,
        directives=tuple(directives),
    )


def input_value_definition(name: str, type_: TypeNode) -> InputValueDefinitionNode:
    return InputValueDefinitionNode(
        description=None,
        name=name_node(name),
        type=type_,
        default_value=None,
        directives=(),
    )


def object_type_definition(name: str, fields: Sequence[FieldDefinitionNode]) -> ObjectTypeDefinitionNode:
    return ObjectTypeDefinitionNode(
        description=None,
        name=name_node(name),
        interfaces=(),
        directives=(),
        fields=tuple(fields),
    )


def input_object_type_definition(
    name: str, fields: Sequence[InputValueDefinitionNode]
) -> InputObjectTypeDefinitionNode:
    return InputObjectTypeDefinitionNode(
        description=None,
        name=name_node(name),
        directives=(),
        fields=tuple(fields),
    )


def subscribe_directive(mutation_names: List[str]) -> DirectiveNode:
    """``@aws_subscribe(mutations: [...])`` for push notifications on mutations."""
    return DirectiveNode(
        name=name_node('aws_subscribe'),
        arguments=(
            ArgumentNode(
                name=name_node('mutations'),
                value=ListValueNode(
                    values=tuple(StringValueNode(value=m, block=False) for m in mutation_names)
                ),
            ),
        ),
    )


def operation_type_definition(operation: OperationType, type_name: str) -> OperationTypeDefinitionNode:
    return OperationTypeDefinitionNode(operation=operation, type=named_type(type_name))
