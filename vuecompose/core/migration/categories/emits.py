"""Emits category: ``emits`` → ``const emit = defineEmits(...)``."""

from typing import List

from ...constants import EMIT_BINDING
from ..emit import call, const_decl
from ..models import Category, DeclarationResult, DiagnosticCode, ObjectMember
from ..shapes import ShapeKind, shape_of
from .base import CategoryTransformer, TransformContext


class EmitsTransformer(CategoryTransformer):
    category = Category.EMITS

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        if shape_of(entry.value) not in (ShapeKind.ARRAY, ShapeKind.OBJECT, ShapeKind.IDENTIFIER):
            return [self.failure(EMIT_BINDING, self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"emits must be an array, an object or an identifier, got {entry.value.type}",
                symbol=EMIT_BINDING,
                node=entry.value,
            ))]

        text = self.raw(entry.value, ctx, dedent=entry.indent)
        return [self.declaration(
            EMIT_BINDING,
            const_decl(EMIT_BINDING, call("defineEmits", text)),
            priority,
            helpers=("defineEmits",),
        )]
