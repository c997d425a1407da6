"""Declaration assembly.

Orders transformer output, swaps the component export for the generated
declarations and adds the supporting imports and injections.
"""

import logging
from typing import List, Sequence

from ..ast_parser import get_parser
from ..ast_parser.toolkit import SourceEdit, find_all, named_children, node_text, splice
from ..constants import EMIT_BINDING, PROPS_BINDING
from .models import ComponentDescription, OutputDeclaration
from .support import SupportingDeclarations

logger = logging.getLogger(__name__)

# Generated bindings that are dropped when nothing reads them
_ELIDABLE_BINDINGS = {
    PROPS_BINDING: "defineProps",
    EMIT_BINDING: "defineEmits",
}


def order_declarations(declarations: Sequence[OutputDeclaration]) -> List[OutputDeclaration]:
    """Stable sort by emission priority; ties keep document order."""
    return sorted(declarations, key=lambda d: d.priority)


def render_block(declarations: Sequence[OutputDeclaration], injections: Sequence[str]) -> str:
    """Text replacing the export statement."""
    pieces: List[str] = []
    if injections:
        pieces.append("\n".join(injections))

    previous = None
    for declaration in declarations:
        if previous is not None and pieces:
            compact = (
                previous.priority == declaration.priority
                and "\n" not in previous.text
                and "\n" not in declaration.text
            )
            pieces.append("\n" if compact else "\n\n")
        elif pieces:
            pieces.append("\n\n")
        pieces.append(declaration.text)
        previous = declaration
    return "".join(pieces)


class DeclarationAssembler:
    """Builds the migrated source text of one component."""

    def __init__(self, language: str = "javascript"):
        self.language = language

    def assemble(
        self,
        component: ComponentDescription,
        declarations: Sequence[OutputDeclaration],
        support: SupportingDeclarations,
    ) -> str:
        """Replace the component export with ``declarations``.

        Args:
            component: The component being migrated
            declarations: Transformer output, in document order
            support: Imports and injections requested while transforming

        Returns:
            Full migrated source text (not yet validated)
        """
        ordered = order_declarations(declarations)
        block = render_block(ordered, support.injections)

        source = component.source
        export = component.export_node
        edits: List[SourceEdit] = support.import_edits()
        edits.append(SourceEdit(export.start_byte, export.end_byte, block))

        text = splice(source, 0, len(source), edits)
        return self.elide_unused_bindings(text)

    def elide_unused_bindings(self, text: str) -> str:
        """Turn ``const props = defineProps(...)`` into a bare call when ``props`` is never read."""
        parsed = get_parser(self.language).parse_source(text)
        if parsed.has_errors:
            return text

        edits: List[SourceEdit] = []
        for statement in named_children(parsed.root):
            if statement.type != "lexical_declaration":
                continue
            declarators = [d for d in named_children(statement) if d.type == "variable_declarator"]
            if len(declarators) != 1:
                continue
            name_node = declarators[0].child_by_field_name("name")
            value = declarators[0].child_by_field_name("value")
            if name_node is None or value is None or value.type != "call_expression":
                continue
            binding = node_text(name_node, parsed.source)
            macro = _ELIDABLE_BINDINGS.get(binding)
            callee = value.child_by_field_name("function")
            if macro is None or callee is None or node_text(callee, parsed.source) != macro:
                continue
            if self._is_read(parsed.root, statement, binding, parsed.source):
                continue
            logger.debug(f"Binding '{binding}' is never read; keeping the bare {macro}() call")
            edits.append(SourceEdit(statement.start_byte, statement.end_byte, node_text(value, parsed.source) + ";"))

        if not edits:
            return text
        return splice(parsed.source, 0, len(parsed.source), edits)

    @staticmethod
    def _is_read(root, declaration, binding: str, source: bytes) -> bool:
        def reads(node) -> bool:
            if node.type not in ("identifier", "shorthand_property_identifier"):
                return False
            if declaration.start_byte <= node.start_byte < declaration.end_byte:
                return False
            return node_text(node, source) == binding

        return bool(find_all(root, reads))
