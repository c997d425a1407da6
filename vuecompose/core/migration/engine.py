"""Migration Engine — options-API component to composition-API declarations.

Pipeline for one source text:

  1. Parse               unparsable input is skipped with a diagnostic
  2. Find component      no ``export default {...}`` → unchanged, no diagnostic
  3. Classify            names declared by data/props/computed/methods
  4. Transform           each option, in document order, by its category
  5. Global rewrite      self-references left in emitted data/lifecycle bodies
  6. Assemble            ordered declarations + imports + injections
  7. Validate            output must parse, otherwise the original is returned

Every invocation builds its own symbol table and supporting-declaration
record; an engine instance holds only read-only configuration and can be
shared across threads.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Iterable, List, Optional

from ..ast_parser import detect_language, find_script_block, get_parser, parse_source
from ..config import MigrationConfig
from ..constants import EMIT_BINDING, IGNORED_OPTIONS, PROPS_BINDING
from .assembler import DeclarationAssembler
from .categories import CategoryRegistry, TransformContext, emission_priority
from .classifier import SymbolClassifier
from .component import find_component
from .models import (
    Category,
    DeclarationResult,
    Diagnostic,
    DiagnosticCode,
    MigrationResult,
    MigrationStatus,
    OutputDeclaration,
    RewriteContext,
    Severity,
)
from .rewriter import ReferenceRewriter
from .support import SupportingDeclarations
from .validator import OutputValidator

logger = logging.getLogger(__name__)

# Categories whose declarations bind a name; a repeated name is emitted once
_NAMING_CATEGORIES = frozenset({Category.STATE, Category.DERIVED, Category.ACTIONS})

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def log_diagnostic(diagnostic: Diagnostic) -> None:
    logger.log(_LOG_LEVELS[diagnostic.severity], f"[{diagnostic.code.value}] {diagnostic}")


class MigrationEngine:
    """Migrates options-API components to top-level composition declarations."""

    def __init__(self, config: Optional[MigrationConfig] = None):
        self.config = config or MigrationConfig()
        self.classifier = SymbolClassifier()

    # ── Single source text ───────────────────────────────────────

    def migrate(
        self,
        source_text: str,
        file_path: str = "<memory>",
        language: Optional[str] = None,
    ) -> MigrationResult:
        """Migrate one script.

        Args:
            source_text: JavaScript or TypeScript source
            file_path: Identifier used in diagnostics
            language: "javascript" or "typescript"; detected from
                ``file_path`` when omitted

        Returns:
            MigrationResult; ``output`` equals ``source_text`` unless the
            status is MIGRATED
        """
        if language is None:
            detected = detect_language(file_path)
            language = detected if detected in ("javascript", "typescript") else "javascript"

        parsed = parse_source(source_text, file_path, language)
        if parsed.has_errors:
            error = parsed.errors[0]
            diagnostic = Diagnostic(
                code=DiagnosticCode.INVALID_INPUT,
                message=f"Source does not parse ({error.message}); skipped",
                file_path=file_path,
                severity=Severity.WARNING,
                line=error.line or None,
            )
            log_diagnostic(diagnostic)
            return self._unchanged(source_text, file_path, language, [diagnostic])

        component = find_component(parsed)
        if component is None:
            return self._unchanged(source_text, file_path, language, [])

        classification = self.classifier.classify(component)
        symbols = classification.symbols
        bindings = frozenset(
            binding
            for option, binding in (("props", PROPS_BINDING), ("emits", EMIT_BINDING))
            if component.get(option) is not None
        )
        rewriter = ReferenceRewriter(RewriteContext(
            symbols=symbols,
            reserved_accessors=self.config.reserved_accessors,
            file_path=file_path,
            bindings=bindings,
        ))
        ctx = TransformContext(
            component=component,
            symbols=symbols,
            rewriter=rewriter,
            config=self.config,
            language=language,
        )

        diagnostics: List[Diagnostic] = list(classification.diagnostics)
        results = self._transform_options(ctx, diagnostics)

        declarations: List[OutputDeclaration] = []
        emitted = set()
        for result in results:
            diagnostics.extend(result.diagnostics)
            if result.declaration is None:
                continue
            key = (result.category, result.symbol)
            if key in classification.shadowed:
                continue
            if result.category in _NAMING_CATEGORIES:
                if key in emitted:
                    continue
                emitted.add(key)
            declarations.append(self._resolve(result.declaration, rewriter, language, diagnostics))

        support = SupportingDeclarations(
            parsed.root,
            parsed.source,
            self.config,
            typed=get_parser(language).supports_type_syntax(),
        )
        for declaration in sorted(declarations, key=lambda d: d.priority):
            for helper in sorted(declaration.helpers):
                support.require_helper(helper)
            for accessor in sorted(declaration.accessors):
                support.require_accessor(accessor)

        output = DeclarationAssembler(language).assemble(component, declarations, support)

        problem = OutputValidator(language).validate(output, file_path)
        if problem is not None:
            diagnostics.append(problem)
            for diagnostic in diagnostics:
                log_diagnostic(diagnostic)
            logger.error(f"Rolled back migration of {file_path}")
            return MigrationResult(
                file_path=file_path,
                language=language,
                original=source_text,
                output=source_text,
                status=MigrationStatus.ROLLED_BACK,
                diagnostics=diagnostics,
                symbols=symbols,
            )

        for diagnostic in diagnostics:
            log_diagnostic(diagnostic)
        logger.info(
            f"Migrated {file_path}: {len(declarations)} declarations, {len(diagnostics)} diagnostics"
        )
        return MigrationResult(
            file_path=file_path,
            language=language,
            original=source_text,
            output=output,
            status=MigrationStatus.MIGRATED,
            diagnostics=diagnostics,
            symbols=symbols,
        )

    def _transform_options(self, ctx: TransformContext, diagnostics: List[Diagnostic]) -> List[DeclarationResult]:
        """Run every option through its category transformer, in document order."""
        ignored = set(IGNORED_OPTIONS) | set(self.config.ignored_options)
        results: List[DeclarationResult] = []

        for entry in ctx.component.entries:
            if entry.name is None:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.UNSUPPORTED_SHAPE,
                    message="Spread or computed component option is not migrated",
                    file_path=ctx.file_path,
                    line=entry.line,
                ))
                continue
            if entry.name in ignored:
                logger.debug(f"Dropping option '{entry.name}' in {ctx.file_path}")
                continue

            spec = CategoryRegistry.lookup(entry.name)
            if spec is None:
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.IGNORED_OPTION,
                    message=f'Unknown option "{entry.name}" is not migrated',
                    file_path=ctx.file_path,
                    symbol=entry.name,
                    line=entry.line,
                ))
                continue

            try:
                results.extend(spec.transformer.transform(entry, ctx, emission_priority(entry.name)))
            except Exception as e:
                logger.warning(f"Option '{entry.name}' failed in {ctx.file_path}: {e}", exc_info=True)
                diagnostics.append(Diagnostic(
                    code=DiagnosticCode.REWRITE_FAILED,
                    message=f'Failed to transform option "{entry.name}": {e}',
                    file_path=ctx.file_path,
                    category=spec.category.value,
                    symbol=entry.name,
                    severity=Severity.ERROR,
                    line=entry.line,
                ))
        return results

    @staticmethod
    def _resolve(
        declaration: OutputDeclaration,
        rewriter: ReferenceRewriter,
        language: str,
        diagnostics: List[Diagnostic],
    ) -> OutputDeclaration:
        """Global pass: rewrite self-references a transformer left in place."""
        if declaration.resolved:
            return declaration
        try:
            outcome = rewriter.rewrite_text(
                declaration.text,
                language,
                owner=declaration.symbol,
                category=declaration.category.value,
            )
        except Exception as e:
            logger.warning(f"Global rewrite of '{declaration.symbol}' failed: {e}", exc_info=True)
            diagnostics.append(Diagnostic(
                code=DiagnosticCode.REWRITE_FAILED,
                message=f'Failed to rewrite "{declaration.symbol}": {e}; kept original body',
                file_path=rewriter.context.file_path,
                category=declaration.category.value,
                symbol=declaration.symbol,
            ))
            return declaration
        diagnostics.extend(outcome.diagnostics)
        return replace(
            declaration,
            text=outcome.text,
            accessors=declaration.accessors | outcome.accessors,
            resolved=True,
        )

    @staticmethod
    def _unchanged(
        source_text: str, file_path: str, language: str, diagnostics: List[Diagnostic]
    ) -> MigrationResult:
        return MigrationResult(
            file_path=file_path,
            language=language,
            original=source_text,
            output=source_text,
            status=MigrationStatus.SKIPPED,
            diagnostics=diagnostics,
        )

    # ── Files ────────────────────────────────────────────────────

    def migrate_file(self, file_path: str) -> MigrationResult:
        """Migrate a script file or the script block of a ``.vue`` file.

        Raises:
            ValueError: If the file type is not supported
            OSError: If the file cannot be read
        """
        language = detect_language(file_path)
        if language is None:
            raise ValueError(f"Unsupported file type: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            text = f.read()

        if language != "vue":
            return self.migrate(text, file_path, language)

        block = find_script_block(text)
        if block is None:
            logger.debug(f"No options-API script block in {file_path}")
            return self._unchanged(text, file_path, "vue", [])

        result = self.migrate(block.content, file_path, block.language)
        result.original = text
        result.output = block.rebuild(text, result.output) if result.status == MigrationStatus.MIGRATED else text
        return result

    def migrate_files(self, file_paths: Iterable[str], jobs: Optional[int] = None) -> List[MigrationResult]:
        """Migrate many files in a thread pool; results keep input order.

        A file that cannot be read is reported as skipped rather than
        stopping the batch.
        """
        paths = list(file_paths)
        workers = max(1, jobs or self.config.jobs)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self._migrate_file_safely, paths))

    def _migrate_file_safely(self, file_path: str) -> MigrationResult:
        try:
            return self.migrate_file(file_path)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.error(f"Cannot migrate {file_path}: {e}")
            return self._unchanged("", file_path, detect_language(file_path) or "", [Diagnostic(
                code=DiagnosticCode.INVALID_INPUT,
                message=f"Cannot read file: {e}",
                file_path=file_path,
                severity=Severity.ERROR,
            )])
