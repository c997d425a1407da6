"""Derived-value category: ``computed`` → ``const k = computed(() => ...)``."""

import logging
from typing import List, Tuple

from ...ast_parser.toolkit import node_text
from ..emit import arrow, call, const_decl, expression_body, object_literal, params_text
from ..models import Category, DeclarationResult, DiagnosticCode, ObjectMember, SymbolRole
from ..rewriter import RewriteOutcome
from ..shapes import FunctionShape, ShapeKind, as_function, object_members, shape_of
from .base import CategoryTransformer, TransformContext

logger = logging.getLogger(__name__)


class ComputedTransformer(CategoryTransformer):
    """Zero-argument getters, and ``{ get, set }`` pairs, become derived computations."""

    category = Category.DERIVED
    declares = SymbolRole.DERIVED
    consumes_names = True

    def declared_names(self, entry: ObjectMember, source: bytes) -> List[str]:
        if shape_of(entry.value) != ShapeKind.OBJECT:
            return []
        return [m.name for m in object_members(entry.value, source) if m.name]

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        if shape_of(entry.value) != ShapeKind.OBJECT:
            return [self.failure("computed", self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"computed must be an object, got {entry.value.type}",
                node=entry.value,
            ))]

        results = []
        for member in object_members(entry.value, ctx.source):
            if member.name is None:
                results.append(self.failure("computed", self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f"Unsupported computed entry: {node_text(member.node, ctx.source)}",
                    node=member.node,
                )))
                continue
            results.append(self.guarded(
                member.name,
                ctx,
                lambda m=member: self._derived(m, ctx, priority, rewrite=True),
                fallback=lambda m=member: self._derived(m, ctx, priority, rewrite=False),
            ))
        return results

    def _derived(
        self, member: ObjectMember, ctx: TransformContext, priority: int, rewrite: bool
    ) -> DeclarationResult:
        kind = shape_of(member.value)
        if kind == ShapeKind.FUNCTION:
            shape = as_function(member.value)
            if shape.arity:
                return self._skip(member, ctx, "derived values take no parameters")
            getter, outcomes = self._accessor(shape, member, ctx, member.indent, rewrite)
            return self.declaration(
                member.name,
                const_decl(member.name, call("computed", getter)),
                priority,
                helpers=("computed",),
                outcomes=outcomes,
            )

        if kind == ShapeKind.OBJECT:
            parts = {m.name: m for m in object_members(member.value, ctx.source) if m.name}
            getter = as_function(parts["get"].value) if "get" in parts else None
            if getter is None:
                return self._skip(member, ctx, "object form needs a get function")
            entries: List[Tuple[str, str]] = []
            outcomes: List[RewriteOutcome] = []
            for key in ("get", "set"):
                shape = as_function(parts[key].value) if key in parts else None
                if shape is None:
                    continue
                text, produced = self._accessor(shape, member, ctx, parts[key].indent, rewrite)
                entries.append((key, text))
                outcomes.extend(produced)
            return self.declaration(
                member.name,
                const_decl(member.name, call("computed", object_literal(entries))),
                priority,
                helpers=("computed",),
                outcomes=outcomes,
            )

        return self._skip(member, ctx, f"expected a function, got {member.value.type}")

    def _accessor(
        self,
        shape: FunctionShape,
        member: ObjectMember,
        ctx: TransformContext,
        dedent: int,
        rewrite: bool,
    ) -> Tuple[str, List[RewriteOutcome]]:
        """Arrow for a getter or setter; bodies are rewritten only when ``rewrite``."""
        if not rewrite:
            body = self.raw(shape.body, ctx, dedent=dedent)
            outcomes: List[RewriteOutcome] = []
        else:
            outcome = ctx.rewriter.rewrite(
                shape.body, ctx.source, owner=member.name, category=self.category.value, dedent=dedent,
            )
            body = outcome.text
            outcomes = [outcome]
        if not shape.has_block_body:
            body = expression_body(body)
        return arrow(params_text(shape, ctx.source), body, shape.is_async), outcomes

    def _skip(self, member: ObjectMember, ctx: TransformContext, reason: str) -> DeclarationResult:
        return self.failure(member.name, self.diagnostic(
            ctx,
            DiagnosticCode.UNSUPPORTED_SHAPE,
            f'Skipped computed "{member.name}": {reason}',
            symbol=member.name,
            node=member.value,
        ))
