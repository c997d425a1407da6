"""Base interface for language-specific AST parsers.

Defines the Strategy pattern base class that all language parsers implement.
Shared parsing and validation logic lives here; language-specific details
(grammar, import/injection syntax) are delegated.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import tree_sitter

from .models import ParseError, ParseResult

logger = logging.getLogger(__name__)


class BaseLanguageParser(ABC):
    """Abstract base for language-specific tree-sitter parsers.

    Subclasses implement:
    - get_language(): returns language name string
    - get_tree_sitter_language(): returns tree-sitter Language object
    - supports_type_syntax(): whether type-only imports and generic
      calls may be emitted into sources of this language
    """

    @abstractmethod
    def get_language(self) -> str:
        """Return the language identifier (e.g., 'javascript')."""
        ...

    @abstractmethod
    def get_tree_sitter_language(self) -> tree_sitter.Language:
        """Return the tree-sitter Language object for this language."""
        ...

    def supports_type_syntax(self) -> bool:
        return False

    def parse_file(self, file_path: str) -> ParseResult:
        """Read and parse a source file.

        Args:
            file_path: Path to the source file

        Returns:
            ParseResult for the file contents

        Raises:
            OSError: If the file cannot be read
        """
        with open(file_path, "r", encoding="utf-8") as f:
            source_text = f.read()
        return self.parse_source(source_text, file_path)

    def parse_source(self, source_text: str, file_path: str = "<memory>") -> ParseResult:
        """Parse source code string into a ParseResult.

        Args:
            source_text: Source code as string
            file_path: File path (for diagnostics)

        Returns:
            ParseResult with the tree and any parse errors
        """
        source_bytes = source_text.encode("utf-8")
        line_count = source_text.count("\n") + (1 if source_text and not source_text.endswith("\n") else 0)

        parser = tree_sitter.Parser(self.get_tree_sitter_language())
        tree = parser.parse(source_bytes)

        errors: List[ParseError] = []
        if tree.root_node.has_error:
            errors.append(self._describe_error(tree.root_node, file_path))

        return ParseResult(
            file_path=file_path,
            language=self.get_language(),
            tree=tree,
            source=source_bytes,
            line_count=line_count,
            errors=errors,
        )

    def validate(self, source_text: str, file_path: str = "<memory>") -> Optional[ParseError]:
        """Re-parse ``source_text`` and return the first error, if any."""
        result = self.parse_source(source_text, file_path)
        return result.errors[0] if result.errors else None

    @staticmethod
    def _describe_error(root: tree_sitter.Node, file_path: str) -> ParseError:
        """Locate the first ERROR or MISSING node below ``root``."""
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                what = f"missing {node.type}" if node.is_missing else "unexpected syntax"
                return ParseError(
                    file_path=file_path,
                    line=node.start_point.row + 1,
                    message=f"Tree-sitter reported {what} at column {node.start_point.column + 1}",
                    severity="error",
                )
            if node.has_error:
                stack.extend(reversed(node.children))
        return ParseError(
            file_path=file_path,
            line=0,
            message="Tree-sitter reported parse errors in file",
            severity="error",
        )
