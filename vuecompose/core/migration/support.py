"""Supporting declarations: helper imports and reserved-accessor injections.

One instance per migration.  It is seeded from what the file already
imports or declares at top level, so nothing already present is added
again, and each helper or injection is added at most once however many
declarations ask for it.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from ..ast_parser.toolkit import Node, SourceEdit, has_child_token, named_children, node_text, string_value
from ..config import MigrationConfig
from ..constants import COMPILER_MACROS

logger = logging.getLogger(__name__)

_DECLARATION_TYPES = ("lexical_declaration", "variable_declaration")


@dataclass
class ImportSite:
    """An existing import statement new specifiers can join."""
    node: Node
    module: str
    named: Optional[Node] = None  # named_imports
    default: Optional[Node] = None
    namespace: bool = False
    type_only: bool = False

    @property
    def extendable(self) -> bool:
        return not self.namespace and not self.type_only and (self.named is not None or self.default is not None)


def _scan_import(node: Node, source: bytes, bound: Set[str]) -> Optional[ImportSite]:
    source_node = node.child_by_field_name("source")
    module = string_value(source_node, source) if source_node is not None else None
    if module is None:
        return None
    site = ImportSite(node=node, module=module, type_only=has_child_token(node, "type"))
    for clause in named_children(node):
        if clause.type != "import_clause":
            continue
        for part in named_children(clause):
            if part.type == "identifier":
                site.default = part
                bound.add(node_text(part, source))
            elif part.type == "namespace_import":
                site.namespace = True
                bound.update(node_text(n, source) for n in named_children(part) if n.type == "identifier")
            elif part.type == "named_imports":
                site.named = part
                for spec in named_children(part):
                    if spec.type != "import_specifier":
                        continue
                    local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if local is not None:
                        bound.add(node_text(local, source))
    return site


def _scan_declaration(node: Node, source: bytes, bound: Set[str]) -> None:
    if node.type in _DECLARATION_TYPES:
        for declarator in named_children(node):
            name = declarator.child_by_field_name("name") if declarator.type == "variable_declarator" else None
            if name is not None and name.type == "identifier":
                bound.add(node_text(name, source))
    elif node.type in ("function_declaration", "generator_function_declaration", "class_declaration"):
        name = node.child_by_field_name("name")
        if name is not None:
            bound.add(node_text(name, source))


class SupportingDeclarations:
    """Per-migration record of the imports and injections the output needs."""

    def __init__(self, root: Node, source: bytes, config: MigrationConfig, typed: bool = False):
        self.config = config
        self.typed = typed
        self._sites: List[ImportSite] = []
        self._bound: Set[str] = set()
        self._first_statement: Optional[Node] = None
        # module → specifiers to add, in request order
        self._pending: Dict[str, List[str]] = {}
        self._injections: List[str] = []

        for child in named_children(root):
            if self._first_statement is None:
                self._first_statement = child
            if child.type == "import_statement":
                site = _scan_import(child, source, self._bound)
                if site is not None:
                    self._sites.append(site)
            else:
                _scan_declaration(child, source, self._bound)

    # ── Requests ─────────────────────────────────────────────────

    def require_helper(self, helper: str) -> None:
        if helper in COMPILER_MACROS or helper in self._bound:
            return
        module = self.config.module_for(helper)
        if module is None:
            logger.warning(f"No module configured for helper '{helper}'; not imported")
            return
        self._add_specifier(module, helper, helper)

    def require_accessor(self, name: str) -> None:
        accessor = self.config.reserved_accessors.get(name)
        if accessor is None or accessor.target in self._bound:
            return
        self.require_helper("inject")
        if self.typed and accessor.type_name and accessor.type_module:
            if accessor.type_name not in self._bound:
                self._add_specifier(accessor.type_module, f"type {accessor.type_name}", accessor.type_name)
            injection = f'const {accessor.target} = inject<{accessor.type_name}>("{accessor.key}");'
        else:
            injection = f'const {accessor.target} = inject("{accessor.key}");'
        self._injections.append(injection)
        self._bound.add(accessor.target)

    def _add_specifier(self, module: str, specifier: str, local: str) -> None:
        self._pending.setdefault(module, []).append(specifier)
        self._bound.add(local)

    # ── Results ──────────────────────────────────────────────────

    @property
    def injections(self) -> List[str]:
        return list(self._injections)

    def import_edits(self) -> List[SourceEdit]:
        """Edits that add every pending specifier to the original source."""
        if not self.config.auto_import or not self._pending:
            return []

        edits: List[SourceEdit] = []
        new_lines: List[str] = []
        for module, specifiers in self._pending.items():
            specifiers = sorted(specifiers, key=lambda s: s[len("type "):] if s.startswith("type ") else s)
            site = next((s for s in self._sites if s.module == module and s.extendable), None)
            if site is None:
                new_lines.append(f'import {{ {", ".join(specifiers)} }} from "{module}";')
            else:
                edits.append(self._extend(site, specifiers))

        if new_lines:
            anchor = self._sites[0].node if self._sites else self._first_statement
            position = anchor.start_byte if anchor is not None else 0
            edits.append(SourceEdit(position, position, "\n".join(new_lines) + "\n"))
        return edits

    def _extend(self, site: ImportSite, specifiers: List[str]) -> SourceEdit:
        joined = ", ".join(specifiers)
        if site.named is not None:
            existing = [s for s in named_children(site.named) if s.type == "import_specifier"]
            if existing:
                end = existing[-1].end_byte
                return SourceEdit(end, end, f", {joined}")
            return SourceEdit(site.named.start_byte, site.named.end_byte, f"{{ {joined} }}")
        end = site.default.end_byte
        return SourceEdit(end, end, f", {{ {joined} }}")
