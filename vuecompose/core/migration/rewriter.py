"""Self-reference rewriting.

Resolves every ``this.<name>`` inside a subtree to its composition form:

    reserved accessor      this.$user      → user          (needs injection)
    other "$" names        this.$router    → $router       (pending)
    accessor target taken  this.$user      left as is, reported
    input                  this.title      → props.title
    state / derived        this.count      → count.value
    action, called         this.save(...)  → save(...)
    anything else          left as is, reported

The rewriter never mutates a tree; it returns new text.  Running it again
over its own output changes nothing, since every resolved form no longer
starts with ``this``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Sequence

from ..ast_parser import get_parser
from ..ast_parser.toolkit import Node, SourceEdit, find_all, node_text, render
from ..constants import PROPS_BINDING, RESERVED_MARKER, SELF_ACCESSOR
from .models import Diagnostic, DiagnosticCode, RewriteContext, Severity, SymbolRole

logger = logging.getLogger(__name__)


class ResolutionKind(Enum):
    RESERVED = "reserved"
    PENDING = "pending"
    STRIPPED = "stripped"
    INPUT = "input"
    REACTIVE = "reactive"
    ACTION = "action"
    CONFLICT = "conflict"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    text: Optional[str] = None  # None: keep the original expression

    @property
    def resolved(self) -> bool:
        return self.kind not in (
            ResolutionKind.UNRESOLVED,
            ResolutionKind.PENDING,
            ResolutionKind.CONFLICT,
        )


@dataclass
class RewriteOutcome:
    """Rewritten text plus everything the caller must act on."""
    text: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    accessors: FrozenSet[str] = frozenset()
    replacements: int = 0

    @property
    def clean(self) -> bool:
        return not self.diagnostics


def is_self_reference(node: Node) -> bool:
    if node.type != "member_expression":
        return False
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    return (
        obj is not None
        and obj.type == SELF_ACCESSOR
        and prop is not None
        and prop.type == "property_identifier"
    )


def _in_call_position(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type != "call_expression":
        return False
    callee = parent.child_by_field_name("function")
    return callee is not None and callee.id == node.id


def _top_level_label(node: Node, source: bytes) -> str:
    """Name of the top-level statement enclosing ``node``, for diagnostics."""
    current = node
    while current.parent is not None and current.parent.type != "program":
        current = current.parent
    if current.type in ("lexical_declaration", "variable_declaration"):
        for child in current.named_children:
            if child.type == "variable_declarator":
                name = child.child_by_field_name("name")
                if name is not None:
                    return node_text(name, source)
    if current.type == "expression_statement":
        expression = current.named_children[0] if current.named_children else None
        if expression is not None and expression.type == "call_expression":
            callee = expression.child_by_field_name("function")
            if callee is not None:
                return node_text(callee, source)
    if current.type in ("function_declaration", "class_declaration"):
        name = current.child_by_field_name("name")
        if name is not None:
            return node_text(name, source)
    return "<top level>"


class ReferenceRewriter:
    """Rewrites self-references against one RewriteContext."""

    def __init__(self, context: RewriteContext):
        self.context = context

    def is_taken(self, name: str) -> bool:
        """Whether the output already declares ``name``."""
        return self.context.symbols.role_of(name) is not None or name in self.context.bindings

    def resolve(self, name: str, call_position: bool = False) -> Resolution:
        """Target form for ``this.<name>``."""
        accessor = self.context.reserved_accessors.get(name)
        if accessor is not None:
            if self.is_taken(accessor.target):
                return Resolution(ResolutionKind.CONFLICT, accessor.target)
            return Resolution(ResolutionKind.RESERVED, accessor.target)

        if name.startswith(RESERVED_MARKER):
            if self.context.strip_marker:
                return Resolution(ResolutionKind.STRIPPED, name[len(RESERVED_MARKER):])
            return Resolution(ResolutionKind.PENDING, name)

        role = self.context.symbols.role_of(name)
        if role == SymbolRole.INPUT:
            return Resolution(ResolutionKind.INPUT, f"{PROPS_BINDING}.{name}")
        if role in (SymbolRole.STATE, SymbolRole.DERIVED):
            return Resolution(ResolutionKind.REACTIVE, f"{name}.value")
        if role == SymbolRole.ACTION and call_position:
            return Resolution(ResolutionKind.ACTION, name)
        return Resolution(ResolutionKind.UNRESOLVED)

    def rewrite(
        self,
        node: Node,
        source: bytes,
        *,
        owner: Optional[str] = None,
        category: Optional[str] = None,
        dedent: int = 0,
        extra_edits: Sequence[SourceEdit] = (),
        track_lines: bool = True,
    ) -> RewriteOutcome:
        """Rewrite every self-reference within ``node``.

        Args:
            node: Subtree to rewrite (nested functions included)
            source: Bytes the subtree was parsed from
            owner: Declaration name used in diagnostics; derived from the
                enclosing top-level statement when omitted
            category: Category name used in diagnostics
            dedent: Columns to strip from continuation lines
            extra_edits: Additional non-overlapping edits inside ``node``
            track_lines: Attach source line numbers to diagnostics

        Returns:
            RewriteOutcome with the new text of ``node``
        """
        edits: List[SourceEdit] = list(extra_edits)
        diagnostics: List[Diagnostic] = []
        accessors = set()
        replacements = 0

        for ref in find_all(node, is_self_reference):
            name = node_text(ref.child_by_field_name("property"), source)
            resolution = self.resolve(name, call_position=_in_call_position(ref))
            label = owner or _top_level_label(ref, source)
            line = ref.start_point.row + 1 if track_lines else None

            if resolution.kind == ResolutionKind.RESERVED:
                accessors.add(name)
            elif resolution.kind == ResolutionKind.STRIPPED:
                if resolution.text not in self.context.bindings:
                    diagnostics.append(Diagnostic(
                        code=DiagnosticCode.PENDING_ACCESSOR,
                        message=f'Found "this.{name}" usage in "{label}" - "{resolution.text}" is not declared',
                        file_path=self.context.file_path,
                        category=category,
                        symbol=name,
                        severity=Severity.WARNING,
                        line=line,
                    ))
            elif resolution.kind == ResolutionKind.CONFLICT:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.NAME_COLLISION,
                    message=(
                        f'Can\'t replace "this.{name}" in "{label}": '
                        f'its target "{resolution.text}" is also declared by the component'
                    ),
                    file_path=self.context.file_path,
                    category=category,
                    symbol=name,
                    severity=Severity.ERROR,
                    line=line,
                ))
                continue
            elif resolution.kind == ResolutionKind.PENDING:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.PENDING_ACCESSOR,
                    message=f'Found "this.{name}" usage in "{label}" - transformation pending',
                    file_path=self.context.file_path,
                    category=category,
                    symbol=name,
                    severity=Severity.WARNING,
                    line=line,
                ))
            elif resolution.kind == ResolutionKind.UNRESOLVED:
                if self.context.symbols.role_of(name) == SymbolRole.ACTION:
                    message = f'Can\'t replace "this.{name}" in "{label}": method used outside a call'
                else:
                    message = f'Can\'t replace "this.{name}" expression in "{label}"'
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.UNRESOLVED_REFERENCE,
                    message=message,
                    file_path=self.context.file_path,
                    category=category,
                    symbol=name,
                    severity=Severity.WARNING,
                    line=line,
                ))
                continue

            edits.append(SourceEdit(ref.start_byte, ref.end_byte, resolution.text))
            replacements += 1

        return RewriteOutcome(
            text=render(node, source, edits, dedent=dedent),
            diagnostics=diagnostics,
            accessors=frozenset(accessors),
            replacements=replacements,
        )

    def rewrite_text(
        self,
        text: str,
        language: str = "javascript",
        *,
        owner: Optional[str] = None,
        category: Optional[str] = None,
    ) -> RewriteOutcome:
        """Parse a standalone snippet and rewrite it as a whole.

        Used by the global pass over already-emitted declarations, whose
        line numbers no longer match the original file.
        """
        parsed = get_parser(language).parse_source(text, self.context.file_path)
        root = parsed.root
        outcome = self.rewrite(
            root,
            parsed.source,
            owner=owner,
            category=category,
            track_lines=False,
        )
        # The program node does not cover leading/trailing blanks
        leading = parsed.source[:root.start_byte].decode("utf-8")
        trailing = parsed.source[root.end_byte:].decode("utf-8")
        outcome.text = f"{leading}{outcome.text}{trailing}"
        return outcome
