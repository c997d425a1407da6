"""Category transformer base class and shared context.

A category transformer owns one component option (``data``, ``methods``,
``apollo``, ...): it reports which names the option declares and turns
the option's raw declaration into output declarations.  Core stays
orchestration -- transformers own the knowledge of one option's shape.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from ...ast_parser.toolkit import Node, render
from ...config import MigrationConfig
from ..models import (
    Category,
    ComponentDescription,
    DeclarationResult,
    Diagnostic,
    DiagnosticCode,
    ObjectMember,
    OutputDeclaration,
    Severity,
    SymbolRole,
    SymbolTable,
)
from ..emit import expression_body, function_value, params_text
from ..rewriter import ReferenceRewriter, RewriteOutcome
from ..shapes import FunctionShape

logger = logging.getLogger(__name__)


# ── Transform Context ────────────────────────────────────────────────


@dataclass
class TransformContext:
    """Read-only inputs shared by every transformer of one component."""

    component: ComponentDescription
    symbols: SymbolTable
    rewriter: ReferenceRewriter
    config: MigrationConfig
    language: str = "javascript"

    @property
    def source(self) -> bytes:
        return self.component.source

    @property
    def file_path(self) -> str:
        return self.component.file_path

    def observer_rewriter(self) -> ReferenceRewriter:
        """Rewriter variant for watch handlers ("$" marker stripped)."""
        return ReferenceRewriter(self.rewriter.context.observing())


# ── Abstract Base Class ──────────────────────────────────────────────


class CategoryTransformer(ABC):
    """Abstract base for category transformers.

    Subclasses set ``category`` and, when the option declares names
    reachable through ``this``, ``declares``.
    """

    category: Category
    declares: Optional[SymbolRole] = None
    consumes_names: bool = False

    def declared_names(self, entry: ObjectMember, source: bytes) -> List[str]:
        """Names ``entry`` declares, in document order.

        Must not report diagnostics: shape problems are reported once, by
        :meth:`transform`.
        """
        return []

    @abstractmethod
    def transform(
        self, entry: ObjectMember, ctx: TransformContext, priority: int
    ) -> List[DeclarationResult]:
        """Turn one option into declaration results (document order)."""
        ...

    # ── Result helpers ───────────────────────────────────────────

    def diagnostic(
        self,
        ctx: TransformContext,
        code: DiagnosticCode,
        message: str,
        *,
        symbol: Optional[str] = None,
        node: Optional[Node] = None,
        severity: Severity = Severity.WARNING,
    ) -> Diagnostic:
        return Diagnostic(
            code=code,
            message=message,
            file_path=ctx.file_path,
            category=self.category.value,
            symbol=symbol,
            severity=severity,
            line=node.start_point.row + 1 if node is not None else None,
        )

    def declaration(
        self,
        symbol: str,
        text: str,
        priority: int,
        *,
        helpers: Iterable[str] = (),
        outcomes: Iterable[RewriteOutcome] = (),
        resolved: bool = True,
        diagnostics: Iterable[Diagnostic] = (),
    ) -> DeclarationResult:
        """Successful result; diagnostics and accessors of ``outcomes`` are carried along."""
        outcomes = list(outcomes)
        accessors = frozenset().union(*(o.accessors for o in outcomes)) if outcomes else frozenset()
        collected = list(diagnostics)
        for outcome in outcomes:
            collected.extend(outcome.diagnostics)
        return DeclarationResult(
            symbol=symbol,
            category=self.category,
            declaration=OutputDeclaration(
                text=text,
                category=self.category,
                symbol=symbol,
                priority=priority,
                helpers=frozenset(helpers),
                accessors=accessors,
                resolved=resolved,
            ),
            diagnostics=collected,
        )

    def failure(self, symbol: str, *diagnostics: Diagnostic) -> DeclarationResult:
        """Result with no declaration."""
        return DeclarationResult(symbol=symbol, category=self.category, diagnostics=list(diagnostics))

    def guarded(
        self,
        symbol: str,
        ctx: TransformContext,
        build: Callable[[], DeclarationResult],
        fallback: Optional[Callable[[], DeclarationResult]] = None,
    ) -> DeclarationResult:
        """Run ``build``; on an unexpected error use ``fallback`` (or nothing).

        Confines a failure to the one declaration being built.
        """
        try:
            return build()
        except Exception as e:
            logger.warning(
                f"Failed to transform {self.category.value} '{symbol}' in {ctx.file_path}: {e}",
                exc_info=True,
            )
            problem = self.diagnostic(
                ctx,
                DiagnosticCode.REWRITE_FAILED,
                f'Failed to transform {self.category.value} "{symbol}": {e}'
                + ("; kept original body" if fallback else ""),
                symbol=symbol,
                severity=Severity.ERROR if fallback is None else Severity.WARNING,
            )
            if fallback is None:
                return self.failure(symbol, problem)
            result = fallback()
            result.diagnostics.insert(0, problem)
            return result

    @staticmethod
    def raw(node: Node, ctx: TransformContext, dedent: int = 0) -> str:
        """Original text of ``node``, dedented but not rewritten."""
        return render(node, ctx.source, dedent=dedent)

    def function_text(
        self,
        shape: FunctionShape,
        ctx: TransformContext,
        *,
        owner: str,
        dedent: int = 0,
        rewriter: Optional[ReferenceRewriter] = None,
    ) -> Tuple[str, List[RewriteOutcome]]:
        """Callable expression for ``shape`` with its parameters and body rewritten.

        With ``rewriter=None`` the original text is kept.

        Returns:
            (expression text, rewrite outcomes to carry into the result)
        """
        outcomes: List[RewriteOutcome] = []
        params_rewritten: Optional[str] = None
        if rewriter is not None:
            if shape.params is not None:
                outcome = rewriter.rewrite(
                    shape.params, ctx.source, owner=owner, category=self.category.value, dedent=dedent
                )
                outcomes.append(outcome)
                params_rewritten = outcome.text
            outcome = rewriter.rewrite(
                shape.body, ctx.source, owner=owner, category=self.category.value, dedent=dedent
            )
            outcomes.append(outcome)
            body = outcome.text
        else:
            body = render(shape.body, ctx.source, dedent=dedent)

        if not shape.has_block_body:
            body = expression_body(body)
        params = params_text(shape, ctx.source, params_rewritten)
        return function_value(shape, params, body), outcomes
