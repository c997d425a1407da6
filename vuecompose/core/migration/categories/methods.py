"""Action category: ``methods`` → ``const k = (params) => body``."""

import logging
from typing import List

from ...ast_parser.toolkit import node_text
from ..emit import const_decl
from ..models import Category, DeclarationResult, DiagnosticCode, ObjectMember, SymbolRole
from ..shapes import ShapeKind, as_function, object_members, shape_of
from .base import CategoryTransformer, TransformContext

logger = logging.getLogger(__name__)


class MethodsTransformer(CategoryTransformer):
    """Each method becomes a top-level callable bound to its name.

    A method whose rewrite fails is emitted with its original body so one
    bad method never costs the rest of the component.
    """

    category = Category.ACTIONS
    declares = SymbolRole.ACTION
    consumes_names = True

    def declared_names(self, entry: ObjectMember, source: bytes) -> List[str]:
        if shape_of(entry.value) != ShapeKind.OBJECT:
            return []
        return [m.name for m in object_members(entry.value, source) if m.name]

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        if shape_of(entry.value) != ShapeKind.OBJECT:
            return [self.failure("methods", self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"methods must be an object, got {entry.value.type}",
                node=entry.value,
            ))]

        results = []
        for member in object_members(entry.value, ctx.source):
            if member.name is None:
                results.append(self.failure("methods", self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f"Unsupported methods entry: {node_text(member.node, ctx.source)}",
                    node=member.node,
                )))
                continue
            # `{ helper }` names a binding that already exists at module scope
            if member.node.type == "shorthand_property_identifier":
                logger.debug(f"Method '{member.name}' already bound at module scope")
                continue
            results.append(self.guarded(
                member.name,
                ctx,
                lambda m=member: self._action(m, ctx, priority, rewrite=True),
                fallback=lambda m=member: self._action(m, ctx, priority, rewrite=False),
            ))
        return results

    def _action(self, member: ObjectMember, ctx: TransformContext, priority: int, rewrite: bool) -> DeclarationResult:
        kind = shape_of(member.value)
        rewriter = ctx.rewriter if rewrite else None

        if kind == ShapeKind.FUNCTION:
            value, outcomes = self.function_text(
                as_function(member.value), ctx, owner=member.name, dedent=member.indent, rewriter=rewriter,
            )
        elif kind in (ShapeKind.CALL, ShapeKind.IDENTIFIER):
            # debounce(function () {...}, 300) and friends are rewritten as a whole
            if rewriter is not None:
                outcome = rewriter.rewrite(
                    member.value, ctx.source, owner=member.name, category=self.category.value, dedent=member.indent,
                )
                value, outcomes = outcome.text, [outcome]
            else:
                value, outcomes = self.raw(member.value, ctx, dedent=member.indent), []
        else:
            return self.failure(member.name, self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f'Skipped method "{member.name}": expected a function, got {member.value.type}',
                symbol=member.name,
                node=member.value,
            ))

        return self.declaration(
            member.name,
            const_decl(member.name, value),
            priority,
            outcomes=outcomes,
        )
