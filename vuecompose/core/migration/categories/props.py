"""Input-parameter category: ``props`` → ``const props = defineProps(...)``."""

from typing import List

from ...ast_parser.toolkit import named_children, node_text, string_value
from ...constants import PROPS_BINDING
from ..emit import call, const_decl
from ..models import Category, DeclarationResult, DiagnosticCode, ObjectMember, Severity, SymbolRole
from ..shapes import ShapeKind, object_members, shape_of
from .base import CategoryTransformer, TransformContext

_ACCEPTED_SHAPES = (ShapeKind.OBJECT, ShapeKind.ARRAY, ShapeKind.IDENTIFIER)


class PropsTransformer(CategoryTransformer):
    """The declaration object is carried over unchanged.

    Whether the ``props`` binding survives is decided after assembly,
    once it is known if anything outside the declarator reads it.
    """

    category = Category.INPUTS
    declares = SymbolRole.INPUT

    def declared_names(self, entry: ObjectMember, source: bytes) -> List[str]:
        kind = shape_of(entry.value)
        if kind == ShapeKind.OBJECT:
            return [m.name for m in object_members(entry.value, source) if m.name]
        if kind == ShapeKind.ARRAY:
            names = [string_value(element, source) for element in named_children(entry.value)]
            return [name for name in names if name]
        return []

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        kind = shape_of(entry.value)
        if kind not in _ACCEPTED_SHAPES:
            return [self.failure(PROPS_BINDING, self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"props must be an object, an array of names or an identifier, got {entry.value.type}",
                symbol=PROPS_BINDING,
                node=entry.value,
            ))]

        diagnostics = []
        if kind == ShapeKind.IDENTIFIER:
            diagnostics.append(self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"props declared by reference ({node_text(entry.value, ctx.source)}); "
                "prop names are unknown and this.<prop> accesses stay unresolved",
                symbol=PROPS_BINDING,
                node=entry.value,
                severity=Severity.INFO,
            ))

        text = self.raw(entry.value, ctx, dedent=entry.indent)
        return [self.declaration(
            PROPS_BINDING,
            const_decl(PROPS_BINDING, call("defineProps", text)),
            priority,
            helpers=("defineProps",),
            diagnostics=diagnostics,
        )]
