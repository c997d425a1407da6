"""Source-fragment builders for generated declarations.

Nodes are constructed as text and only ever validated by re-parsing the
assembled file, so every builder must produce syntactically complete
fragments on its own.
"""

from typing import List, Optional, Sequence, Tuple

from ..ast_parser.toolkit import indent, node_text
from .shapes import FunctionShape

INDENT = "  "
_INLINE_OBJECT_LIMIT = 80


def const_decl(name: str, init: str) -> str:
    return f"const {name} = {init};"


def call(callee: str, *args: str) -> str:
    return f"{callee}({', '.join(args)})"


def call_statement(callee: str, *args: str) -> str:
    return f"{call(callee, *args)};"


def member(obj: str, prop: str) -> str:
    return f"{obj}.{prop}"


def arrow(params: str, body: str, is_async: bool = False) -> str:
    prefix = "async " if is_async else ""
    return f"{prefix}{params} => {body}"


def expression_body(expression: str) -> str:
    """Concise-arrow body; object literals need parentheses."""
    return f"({expression})" if expression.lstrip().startswith("{") else expression


def params_text(shape: FunctionShape, source: bytes, rewritten: Optional[str] = None) -> str:
    """Parenthesized parameter list of ``shape``."""
    if shape.params is None:
        return "()"
    text = rewritten if rewritten is not None else node_text(shape.params, source)
    if shape.params.type == "formal_parameters":
        return text
    return f"({text})"


def function_value(shape: FunctionShape, params: str, body: str) -> str:
    """Callable expression equivalent to ``shape`` with new params/body text.

    Arrows cannot be generators, so generator methods stay ``function*``.
    """
    if shape.is_generator:
        prefix = "async " if shape.is_async else ""
        return f"{prefix}function* {params} {body}"
    return arrow(params, body, shape.is_async)


def object_literal(entries: Sequence[Tuple[str, str]]) -> str:
    """``{ key: value, ... }``; multi-line when long or when a value spans lines."""
    if not entries:
        return "{}"
    parts = [f"{key}: {value}" for key, value in entries]
    inline = "{ " + ", ".join(parts) + " }"
    if "\n" not in inline and len(inline) <= _INLINE_OBJECT_LIMIT:
        return inline
    lines: List[str] = [INDENT + indent(part, INDENT) + "," for part in parts]
    return "{\n" + "\n".join(lines) + "\n}"
