"""Existing ``setup()`` option: its body is inlined at top level."""

from typing import List

from ...ast_parser.toolkit import line_indent, named_children, node_text, render, unwrap_parenthesized
from ..emit import const_decl
from ..models import Category, DeclarationResult, DiagnosticCode, ObjectMember, Severity
from ..shapes import ShapeKind, as_function, object_members, shape_of
from .base import CategoryTransformer, TransformContext


class SetupTransformer(CategoryTransformer):
    """Inline ``setup()``.

    Statements other than the top-level ``return`` are kept verbatim.
    Each ``k: expr`` entry of the returned object becomes ``const k = expr``;
    shorthand entries are already bound by the inlined statements.
    """

    category = Category.SETUP

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        if shape_of(entry.value) != ShapeKind.FUNCTION:
            return [self.failure("setup", self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"setup must be a function, got {entry.value.type}",
                symbol="setup",
                node=entry.value,
            ))]

        shape = as_function(entry.value)
        results: List[DeclarationResult] = []
        if shape.arity:
            params = node_text(shape.params, ctx.source)
            results.append(self.failure("setup", self.diagnostic(
                ctx,
                DiagnosticCode.DROPPED_CODE,
                f"setup{params if params.startswith('(') else f'({params})'} parameters are not available "
                "in <script setup>; use the props binding and defineEmits instead",
                symbol="setup",
                node=shape.params,
                severity=Severity.INFO,
            )))

        if not shape.has_block_body:
            returned = unwrap_parenthesized(shape.body)
            statements = []
        else:
            returned = None
            statements = []
            for statement in named_children(shape.body):
                if statement.type == "return_statement" and returned is None:
                    argument = named_children(statement)
                    returned = unwrap_parenthesized(argument[0]) if argument else statement
                    continue
                statements.append(statement)

        if statements:
            body = "\n".join(
                render(s, ctx.source, dedent=line_indent(s, ctx.source)) for s in statements
            )
            results.append(self.declaration("setup", body, priority))

        if returned is None or returned.type == "return_statement":
            return results
        if returned.type != "object":
            results.append(self.failure("setup", self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                "setup() returns something other than an object literal (render function?); "
                "the return value was not migrated",
                symbol="setup",
                node=returned,
            )))
            return results

        for member in object_members(returned, ctx.source):
            if member.node.type == "shorthand_property_identifier":
                continue
            if member.name is None:
                results.append(self.failure("setup", self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f"Unsupported setup() return entry: {node_text(member.node, ctx.source)}",
                    symbol="setup",
                    node=member.node,
                )))
                continue
            if member.node.type == "method_definition":
                value, _ = self.function_text(
                    as_function(member.node), ctx, owner=member.name, dedent=member.indent,
                )
            else:
                value = self.raw(member.value, ctx, dedent=member.indent)
            results.append(self.declaration(member.name, const_decl(member.name, value), priority))
        return results
