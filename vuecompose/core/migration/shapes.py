"""Declaration shape classification.

Every option value is matched against a closed set of shapes keyed on
the tree-sitter node type.  Anything outside the set lands in
``ShapeKind.UNRECOGNIZED`` and callers report it; nothing is guessed
from loose property probing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..ast_parser.toolkit import (
    Node,
    has_child_token,
    line_indent,
    named_children,
    node_text,
    property_name,
    unwrap_parenthesized,
)
from .models import ObjectMember


class ShapeKind(Enum):
    OBJECT = "object"
    FUNCTION = "function"
    ARRAY = "array"
    STRING = "string"
    IDENTIFIER = "identifier"
    CALL = "call"
    TAGGED_TEMPLATE = "tagged_template"
    LITERAL = "literal"
    UNRECOGNIZED = "unrecognized"


_SHAPES_BY_TYPE = {
    "object": ShapeKind.OBJECT,
    "function_expression": ShapeKind.FUNCTION,
    "function": ShapeKind.FUNCTION,
    "generator_function": ShapeKind.FUNCTION,
    "arrow_function": ShapeKind.FUNCTION,
    "method_definition": ShapeKind.FUNCTION,
    "array": ShapeKind.ARRAY,
    "string": ShapeKind.STRING,
    "template_string": ShapeKind.STRING,
    "identifier": ShapeKind.IDENTIFIER,
    "shorthand_property_identifier": ShapeKind.IDENTIFIER,
    "number": ShapeKind.LITERAL,
    "true": ShapeKind.LITERAL,
    "false": ShapeKind.LITERAL,
    "null": ShapeKind.LITERAL,
    "undefined": ShapeKind.LITERAL,
}


def shape_of(node: Optional[Node]) -> ShapeKind:
    if node is None:
        return ShapeKind.UNRECOGNIZED
    node = unwrap_parenthesized(node)
    if node.type == "call_expression":
        arguments = node.child_by_field_name("arguments")
        if arguments is not None and arguments.type == "template_string":
            return ShapeKind.TAGGED_TEMPLATE
        return ShapeKind.CALL
    return _SHAPES_BY_TYPE.get(node.type, ShapeKind.UNRECOGNIZED)


@dataclass
class FunctionShape:
    """Uniform view over methods, function expressions and arrows."""
    node: Node
    params: Optional[Node]  # formal_parameters, or the bare identifier of `x => ...`
    body: Node  # statement_block, or an expression for concise arrows
    is_async: bool = False
    is_generator: bool = False
    is_arrow: bool = False

    @property
    def parameters(self) -> List[Node]:
        if self.params is None:
            return []
        if self.params.type == "formal_parameters":
            return named_children(self.params)
        return [self.params]

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def has_block_body(self) -> bool:
        return self.body.type == "statement_block"


def as_function(node: Optional[Node]) -> Optional[FunctionShape]:
    """Return a FunctionShape for function-like nodes, else None."""
    if node is None:
        return None
    node = unwrap_parenthesized(node)
    if node.type not in ("method_definition", "function_expression", "function",
                         "generator_function", "arrow_function"):
        return None

    body = node.child_by_field_name("body")
    if body is None:
        return None

    if node.type == "arrow_function":
        params = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
        return FunctionShape(
            node=node,
            params=params,
            body=body,
            is_async=has_child_token(node, "async"),
            is_arrow=True,
        )

    return FunctionShape(
        node=node,
        params=node.child_by_field_name("parameters"),
        body=body,
        is_async=has_child_token(node, "async"),
        is_generator=node.type == "generator_function" or has_child_token(node, "*"),
    )


def object_members(node: Node, source: bytes) -> List[ObjectMember]:
    """Keyed entries of an object literal, in source order.

    Spread elements and computed keys come back with ``name=None`` so the
    caller can report them.
    """
    members: List[ObjectMember] = []
    for child in named_children(node):
        name: Optional[str] = None
        value = child
        if child.type == "pair":
            name = property_name(child.child_by_field_name("key"), source)
            value = child.child_by_field_name("value") or child
        elif child.type == "method_definition":
            name = property_name(child.child_by_field_name("name"), source)
        elif child.type == "shorthand_property_identifier":
            name = node_text(child, source)
        members.append(ObjectMember(
            name=name,
            node=child,
            value=value,
            indent=line_indent(child, source),
        ))
    return members


@dataclass
class ReturnedObject:
    """Object literal produced by a function, plus the statements around it."""
    obj: Optional[Node]
    other_statements: List[Node] = field(default_factory=list)


def returned_object(shape: FunctionShape) -> ReturnedObject:
    """Find the object literal a function returns.

    Concise arrows return their (parenthesized) body; block bodies return
    the argument of their first top-level ``return``.  Nested returns
    (inside ifs or callbacks) are not considered.
    """
    if not shape.has_block_body:
        body = unwrap_parenthesized(shape.body)
        return ReturnedObject(obj=body if body.type == "object" else None)

    statements = named_children(shape.body)
    for statement in statements:
        if statement.type != "return_statement":
            continue
        others = [s for s in statements if s.id != statement.id]
        argument = named_children(statement)
        if not argument:
            return ReturnedObject(obj=None, other_statements=others)
        value = unwrap_parenthesized(argument[0])
        return ReturnedObject(obj=value if value.type == "object" else None, other_statements=others)
    return ReturnedObject(obj=None, other_statements=statements)
