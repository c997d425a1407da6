"""Lifecycle hooks: ``mounted() {...}`` → ``onMounted(() => {...})``."""

from typing import List

from ...constants import LIFECYCLE_HOOKS
from ..emit import call_statement
from ..models import Category, DeclarationResult, DiagnosticCode, ObjectMember
from ..shapes import ShapeKind, as_function, shape_of
from .base import CategoryTransformer, TransformContext


class LifecycleTransformer(CategoryTransformer):
    """Wraps a hook body verbatim in its registration call.

    Bodies are left to the global rewrite pass.
    """

    category = Category.LIFECYCLE

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        hook = LIFECYCLE_HOOKS[entry.name]
        kind = shape_of(entry.value)

        if kind == ShapeKind.FUNCTION:
            handler, _ = self.function_text(
                as_function(entry.value), ctx, owner=entry.name, dedent=entry.indent,
            )
        elif kind == ShapeKind.IDENTIFIER:
            handler = self.raw(entry.value, ctx)
        else:
            return [self.failure(entry.name, self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"Lifecycle hook {entry.name} must be a function, got {entry.value.type}",
                symbol=entry.name,
                node=entry.value,
            ))]

        return [self.declaration(
            entry.name,
            call_statement(hook, handler),
            priority,
            helpers=(hook,),
            resolved=False,
        )]
