"""Component export discovery.

Finds ``export default {...}`` / ``export default defineComponent({...})``
and exposes the options object as a ComponentDescription.
"""

import logging
from typing import Optional

from ..ast_parser.models import ParseResult
from ..ast_parser.toolkit import Node, has_child_token, named_children, unwrap_parenthesized
from .models import ComponentDescription
from .shapes import object_members

logger = logging.getLogger(__name__)

# TypeScript wrappers around the exported object: `{...} as X`, `{...} satisfies X`
_TYPE_WRAPPERS = ("as_expression", "satisfies_expression", "type_assertion")


def _default_export(root: Node) -> Optional[Node]:
    for child in root.children:
        if child.type == "export_statement" and has_child_token(child, "default"):
            return child
    return None


def _exported_value(export_node: Node) -> Optional[Node]:
    value = export_node.child_by_field_name("value")
    if value is None:
        candidates = [c for c in named_children(export_node) if c.type != "decorator"]
        value = candidates[-1] if candidates else None
    return value


def _options_object(value: Node) -> Optional[Node]:
    """The options object literal, unwrapping one call and TS type wrappers."""
    value = unwrap_parenthesized(value)
    while value.type in _TYPE_WRAPPERS:
        inner = named_children(value)
        if not inner:
            return None
        value = unwrap_parenthesized(inner[0])

    if value.type == "call_expression":
        arguments = value.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            return None
        args = named_children(arguments)
        if not args:
            return None
        value = unwrap_parenthesized(args[0])

    return value if value.type == "object" else None


def find_component(parsed: ParseResult) -> Optional[ComponentDescription]:
    """Locate the component options in a parsed file.

    Args:
        parsed: ParseResult of a script

    Returns:
        ComponentDescription, or None if the file has no default export
        carrying an options object (the file is then left untouched)
    """
    export_node = _default_export(parsed.root)
    if export_node is None:
        logger.debug(f"No default export in {parsed.file_path}")
        return None

    value = _exported_value(export_node)
    options = _options_object(value) if value is not None else None
    if options is None:
        logger.debug(f"Default export of {parsed.file_path} is not an options object")
        return None

    return ComponentDescription(
        file_path=parsed.file_path,
        source=parsed.source,
        export_node=export_node,
        options_node=options,
        entries=object_members(options, parsed.source),
    )
