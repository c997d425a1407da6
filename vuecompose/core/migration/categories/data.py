"""State category: ``data`` → ``const k = ref(v)``."""

import logging
from typing import List, Optional, Tuple

from ...ast_parser.toolkit import Node, node_text
from ..emit import call, const_decl
from ..models import Category, DeclarationResult, Diagnostic, DiagnosticCode, ObjectMember, SymbolRole
from ..shapes import ShapeKind, as_function, object_members, returned_object, shape_of
from .base import CategoryTransformer, TransformContext

logger = logging.getLogger(__name__)


class DataTransformer(CategoryTransformer):
    """Every state slot becomes a reference cell.

    Initializers are emitted unrewritten and resolved by the global pass,
    so ``this.someProp`` in a default value ends up as ``props.someProp``.
    """

    category = Category.STATE
    declares = SymbolRole.STATE

    def _state_object(self, entry: ObjectMember) -> Tuple[Optional[Node], List[Node], bool]:
        """(object literal, statements around its return, shape recognized).

        No object is returned when data() runs other statements too.
        """
        kind = shape_of(entry.value)
        if kind == ShapeKind.OBJECT:
            return entry.value, [], True
        if kind == ShapeKind.FUNCTION:
            found = returned_object(as_function(entry.value))
            if found.other_statements:
                return None, found.other_statements, True
            return found.obj, [], True
        return None, [], False

    def declared_names(self, entry: ObjectMember, source: bytes) -> List[str]:
        obj, _, _ = self._state_object(entry)
        if obj is None:
            return []
        return [m.name for m in object_members(obj, source) if m.name]

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        obj, others, recognized = self._state_object(entry)
        if obj is None:
            if others:
                statements = ", ".join(node_text(s, ctx.source).split("\n")[0] for s in others)
                reason = (
                    f"data() was not migrated: {len(others)} statement(s) besides the returned "
                    f"object ({statements}) may be read by its values"
                )
            elif recognized:
                reason = "data() does not return an object literal"
            else:
                reason = f"data must be an object or a function, got {entry.value.type}"
            return [self.failure("data", self.diagnostic(
                ctx, DiagnosticCode.UNSUPPORTED_SHAPE, reason, symbol="data", node=entry.value,
            ))]

        results: List[DeclarationResult] = []
        for member in object_members(obj, ctx.source):
            if member.name is None:
                results.append(self.failure("data", self._unkeyed(ctx, member)))
                continue
            results.append(self.guarded(
                member.name, ctx, lambda m=member: self._state_slot(m, ctx, priority),
            ))
        return results

    def _unkeyed(self, ctx: TransformContext, member: ObjectMember) -> Diagnostic:
        return self.diagnostic(
            ctx,
            DiagnosticCode.UNSUPPORTED_SHAPE,
            f"Unsupported data entry: {node_text(member.node, ctx.source)}",
            node=member.node,
        )

    def _state_slot(self, member: ObjectMember, ctx: TransformContext, priority: int) -> DeclarationResult:
        if member.node.type == "shorthand_property_identifier":
            initial = member.name
        elif member.node.type == "method_definition":
            initial, _ = self.function_text(
                as_function(member.node), ctx, owner=member.name, dedent=member.indent,
            )
        else:
            initial = self.raw(member.value, ctx, dedent=member.indent)

        return self.declaration(
            member.name,
            const_decl(member.name, call("ref", initial)),
            priority,
            helpers=("ref",),
            resolved=False,
        )
