"""Reactive observers: ``watch`` → ``watch(() => source, handler[, options])``."""

import logging
from typing import List, Optional, Tuple

from ...ast_parser.toolkit import Node, node_text, string_value
from ...constants import WATCH_FLAGS
from ..emit import arrow, call_statement, object_literal
from ..models import Category, DeclarationResult, Diagnostic, DiagnosticCode, ObjectMember, Severity
from ..rewriter import ReferenceRewriter, ResolutionKind, RewriteOutcome
from ..shapes import ShapeKind, as_function, object_members, shape_of
from .base import CategoryTransformer, TransformContext

logger = logging.getLogger(__name__)


class WatchTransformer(CategoryTransformer):
    """One ``watch(...)`` call per observed path.

    Handlers are rewritten with the "$" marker stripped, so
    ``this.$emit('x')`` becomes ``emit('x')``.
    """

    category = Category.OBSERVERS
    consumes_names = True

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        if shape_of(entry.value) != ShapeKind.OBJECT:
            return [self.failure("watch", self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"watch must be an object, got {entry.value.type}",
                node=entry.value,
            ))]

        observer = ctx.observer_rewriter()
        results = []
        for member in object_members(entry.value, ctx.source):
            if member.name is None:
                results.append(self.failure("watch", self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f"Unsupported watch entry: {node_text(member.node, ctx.source)}",
                    node=member.node,
                )))
                continue
            results.append(self.guarded(
                member.name,
                ctx,
                lambda m=member: self._observer(m, ctx, observer, priority, rewrite=True),
                fallback=lambda m=member: self._observer(m, ctx, observer, priority, rewrite=False),
            ))
        return results

    def _observer(
        self,
        member: ObjectMember,
        ctx: TransformContext,
        observer: ReferenceRewriter,
        priority: int,
        rewrite: bool,
    ) -> DeclarationResult:
        diagnostics: List[Diagnostic] = []
        outcomes: List[RewriteOutcome] = []

        source_fn, accessor_outcome = self._source(member, ctx, observer, diagnostics)
        outcomes.append(accessor_outcome)

        flags: List[Tuple[str, str]] = []
        if shape_of(member.value) == ShapeKind.OBJECT and member.node.type != "method_definition":
            handler_member: Optional[ObjectMember] = None
            for sub in object_members(member.value, ctx.source):
                if sub.name == "handler":
                    handler_member = sub
                elif sub.name in WATCH_FLAGS:
                    flags.append((sub.name, self.raw(sub.value, ctx, dedent=sub.indent)))
                else:
                    diagnostics.append(self.diagnostic(
                        ctx,
                        DiagnosticCode.IGNORED_OPTION,
                        f'Watch option "{sub.name or node_text(sub.node, ctx.source)}" of "{member.name}" '
                        "is not migrated",
                        symbol=member.name,
                        node=sub.node,
                    ))
            if handler_member is None:
                return self.failure(member.name, *diagnostics, self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f'Watcher "{member.name}" has no handler',
                    symbol=member.name,
                    node=member.value,
                ))
            handler_node, handler_indent = handler_member.value, handler_member.indent
        else:
            handler_node, handler_indent = member.value, member.indent

        handler = self._handler(
            member.name,
            handler_node,
            handler_indent,
            ctx,
            observer if rewrite else None,
            outcomes,
            diagnostics,
        )
        if handler is None:
            return self.failure(member.name, *diagnostics)

        args = [source_fn, handler]
        if flags:
            args.append(object_literal(flags))
        return self.declaration(
            member.name,
            call_statement("watch", *args),
            priority,
            helpers=("watch",),
            outcomes=outcomes,
            diagnostics=diagnostics,
        )

    def _source(
        self,
        member: ObjectMember,
        ctx: TransformContext,
        observer: ReferenceRewriter,
        diagnostics: List[Diagnostic],
    ) -> Tuple[str, RewriteOutcome]:
        """Accessor arrow for a watched path such as ``user.id``."""
        root, _, rest = member.name.partition(".")
        resolution = observer.resolve(root)
        accessors = frozenset()
        if resolution.resolved and resolution.kind != ResolutionKind.ACTION:
            path = resolution.text
            if resolution.kind == ResolutionKind.RESERVED:
                accessors = frozenset({root})
            elif resolution.kind == ResolutionKind.STRIPPED and path not in observer.context.bindings:
                diagnostics.append(self.diagnostic(
                    ctx,
                    DiagnosticCode.PENDING_ACCESSOR,
                    f'Watched path "{member.name}" reads "{path}", which is not declared',
                    symbol=root,
                    node=member.node,
                ))
        elif resolution.kind == ResolutionKind.CONFLICT:
            path = root
            diagnostics.append(self.diagnostic(
                ctx,
                DiagnosticCode.NAME_COLLISION,
                f'Watched path "{member.name}" can\'t use "{resolution.text}": also declared by the component',
                symbol=root,
                node=member.node,
                severity=Severity.ERROR,
            ))
        else:
            path = root
            diagnostics.append(self.diagnostic(
                ctx,
                DiagnosticCode.UNRESOLVED_REFERENCE,
                f'Watched path "{member.name}" does not start with a known prop, data or computed name',
                symbol=root,
                node=member.node,
            ))
        if rest:
            path = f"{path}.{rest}"
        return arrow("()", path), RewriteOutcome(text=path, accessors=accessors)

    def _handler(
        self,
        owner: str,
        node: Node,
        indent: int,
        ctx: TransformContext,
        observer: Optional[ReferenceRewriter],
        outcomes: List[RewriteOutcome],
        diagnostics: List[Diagnostic],
    ) -> Optional[str]:
        kind = shape_of(node)

        if kind == ShapeKind.FUNCTION:
            text, produced = self.function_text(
                as_function(node), ctx, owner=owner, dedent=indent, rewriter=observer,
            )
            outcomes.extend(produced)
            return text

        if kind == ShapeKind.STRING:
            name = string_value(node, ctx.source)
            if name is None:
                diagnostics.append(self._bad_handler(ctx, owner, node))
                return None
            if name not in ctx.symbols.action_names:
                diagnostics.append(self.diagnostic(
                    ctx,
                    DiagnosticCode.UNRESOLVED_REFERENCE,
                    f'Watch handler "{name}" of "{owner}" is not a known method',
                    symbol=name,
                    node=node,
                ))
            return name

        if kind == ShapeKind.IDENTIFIER:
            return node_text(node, ctx.source)

        if kind == ShapeKind.CALL:
            # debounce(function (value) {...}, 300) is kept as a whole
            if observer is None:
                return self.raw(node, ctx, dedent=indent)
            outcome = observer.rewrite(node, ctx.source, owner=owner, category=self.category.value, dedent=indent)
            outcomes.append(outcome)
            return outcome.text

        diagnostics.append(self._bad_handler(ctx, owner, node))
        return None

    def _bad_handler(self, ctx: TransformContext, owner: str, node: Node) -> Diagnostic:
        return self.diagnostic(
            ctx,
            DiagnosticCode.UNSUPPORTED_SHAPE,
            f'Unsupported handler for watcher "{owner}": {node.type}',
            symbol=owner,
            node=node,
        )
