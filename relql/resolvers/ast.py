"""Mapping template expression tree and its VTL renderer.

Templates are built as plain data and rendered separately by
``print_template``, so generated programs can be inspected in tests
without string matching.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union
import json

from ..exceptions import TemplateError


@dataclass(frozen=True)
class StringNode:
    value: str


@dataclass(frozen=True)
class IntNode:
    value: int


@dataclass(frozen=True)
class FloatNode:
    value: float


@dataclass(frozen=True)
class BooleanNode:
    value: bool


@dataclass(frozen=True)
class NullNode:
    pass


@dataclass(frozen=True)
class ReferenceNode:
    """A VTL reference, rendered as ``$value``."""
    value: str


@dataclass(frozen=True)
class QuietReferenceNode:
    """A reference evaluated for its side effect only."""
    value: str


@dataclass(frozen=True)
class RawNode:
    value: str


@dataclass(frozen=True)
class CommentNode:
    text: str


@dataclass(frozen=True)
class ObjectNode:
    attributes: Tuple[Tuple[str, "Expression"], ...]


@dataclass(frozen=True)
class ListNode:
    values: Tuple["Expression", ...]


@dataclass(frozen=True)
class SetNode:
    key: ReferenceNode
    value: "Expression"


@dataclass(frozen=True)
class CompoundExpressionNode:
    expressions: Tuple["Expression", ...]


@dataclass(frozen=True)
class ForEachNode:
    key: ReferenceNode
    collection: "Expression"
    expressions: Tuple["Expression", ...]


@dataclass(frozen=True)
class IfNode:
    predicate: "Expression"
    then: "Expression"
    otherwise: Union["Expression", None] = field(default=None)


Expression = Union[
    StringNode, IntNode, FloatNode, BooleanNode, NullNode,
    ReferenceNode, QuietReferenceNode, RawNode, CommentNode,
    ObjectNode, ListNode, SetNode, CompoundExpressionNode, ForEachNode, IfNode,
]


# Builders

def str_(value: str) -> StringNode:
    return StringNode(value)


def null() -> NullNode:
    return NullNode()


def ref(value: str) -> ReferenceNode:
    return ReferenceNode(value)


def qref(value: str) -> QuietReferenceNode:
    return QuietReferenceNode(value)


def raw(value: str) -> RawNode:
    return RawNode(value)


def comment(text: str) -> CommentNode:
    return CommentNode(text)


def obj(attributes: dict) -> ObjectNode:
    return ObjectNode(tuple(attributes.items()))


def list_(values: List[Expression]) -> ListNode:
    return ListNode(tuple(values))


def set_(key: ReferenceNode, value: Expression) -> SetNode:
    return SetNode(key, value)


def compound(expressions: List[Expression]) -> CompoundExpressionNode:
    return CompoundExpressionNode(tuple(expressions))


def for_each(key: ReferenceNode, collection: Expression, expressions: List[Expression]) -> ForEachNode:
    return ForEachNode(key, collection, tuple(expressions))


def iff(predicate: Expression, then: Expression) -> IfNode:
    return IfNode(predicate, then)


# Rendering

INDENT = "  "


def print_template(node: Expression) -> str:
    """Render a template tree to VTL text."""
    return _print(node, 0)


def _print(node: Expression, depth: int) -> str:
    indent = INDENT * depth

    if isinstance(node, StringNode):
        return json.dumps(node.value)
    if isinstance(node, BooleanNode):
        return "true" if node.value else "false"
    if isinstance(node, (IntNode, FloatNode)):
        return repr(node.value)
    if isinstance(node, NullNode):
        return "null"
    if isinstance(node, ReferenceNode):
        return f"${node.value}"
    if isinstance(node, QuietReferenceNode):
        return f"$util.qr({node.value})"
    if isinstance(node, RawNode):
        return node.value
    if isinstance(node, CommentNode):
        return f"## {node.text} **"
    if isinstance(node, ObjectNode):
        if not node.attributes:
            return "{}"
        inner = INDENT * (depth + 1)
        attributes = ",\n".join(
            f"{inner}{json.dumps(key)}: {_print(value, depth + 1)}"
            for key, value in node.attributes
        )
        return "{\n" + attributes + "\n" + indent + "}"
    if isinstance(node, ListNode):
        return "[" + ", ".join(_print(value, depth) for value in node.values) + "]"
    if isinstance(node, SetNode):
        return f"#set( {_print(node.key, depth)} = {_print(node.value, depth)} )"
    if isinstance(node, CompoundExpressionNode):
        return ("\n" + indent).join(_print(expression, depth) for expression in node.expressions)
    if isinstance(node, ForEachNode):
        body = _print_block(node.expressions, depth + 1)
        return (
            f"#foreach( {_print(node.key, depth)} in {_print(node.collection, depth)} )\n"
            f"{body}\n{indent}#end"
        )
    if isinstance(node, IfNode):
        then = _print_block((node.then,), depth + 1)
        text = f"#if( {_print(node.predicate, depth)} )\n{then}\n"
        if node.otherwise is not None:
            otherwise = _print_block((node.otherwise,), depth + 1)
            text += f"{indent}#else\n{otherwise}\n"
        return text + f"{indent}#end"

    raise TemplateError(f"Cannot render template node of type {type(node).__name__}")


def _print_block(expressions, depth: int) -> str:
    indent = INDENT * depth
    return "\n".join(indent + _print(expression, depth) for expression in expressions)
